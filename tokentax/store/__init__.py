"""Artifact tree loading and the live taxonomy store."""

from .loader import load_artifact, load_taxonomy
from .taxonomy import TaxonomyStore

__all__ = [
    "load_artifact",
    "load_taxonomy",
    "TaxonomyStore",
]
