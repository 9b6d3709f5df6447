"""CLI command implementations; each ``run_*`` returns a process exit code."""

from __future__ import annotations

from rich.console import Console

from ..config import ServiceConfig
from ..errors import TaxonomyError
from ..service import TaxonomyService


def start_service(config: ServiceConfig, err: Console) -> TaxonomyService | None:
    """Load the configured tree, printing the failure and returning None if it cannot be loaded."""
    try:
        return TaxonomyService(config).start()
    except TaxonomyError as e:
        err.print(f"Cannot load taxonomy: {e}", style="bold red")
        return None
