"""Exception types raised by the taxonomy core."""

from __future__ import annotations


class TaxonomyError(Exception):
    """Base class for all taxonomy errors."""


class NotFound(TaxonomyError):
    """A symbol, formula or version does not resolve."""


class Expired(NotFound):
    """A cached snapshot exists but is past its expiry."""


class ParseError(TaxonomyError):
    """A descriptor could not be turned into a typed record."""


class TemplateCycle(ParseError):
    """Token template child references loop back on themselves."""


class Collision(TaxonomyError):
    """Name or tooling symbol already taken in a collection."""


class InvalidArgument(TaxonomyError):
    """Unrecognized artifact type or out-of-range query options."""


class FolderMissing(TaxonomyError):
    """The artifact root or its top-level manifest is missing."""
