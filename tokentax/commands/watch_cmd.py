"""Watch command - reload the taxonomy when the artifact tree changes."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..config import ServiceConfig
from ..errors import TaxonomyError
from ..service import TaxonomyService
from ..watcher import run_watch_loop
from . import start_service


def reload_on_change(service: TaxonomyService, console: Console):
    """Build the watcher callback that refreshes the service and reports the result."""

    def on_change(paths: list[Path]) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        try:
            taxonomy = service.refresh_taxonomy()
        except TaxonomyError as e:
            console.print(f"[dim]{timestamp}[/dim] [red]reload failed:[/red] {e}")
            return
        counts = " ".join(f"{t.value}={n}" for t, n in taxonomy.counts().items())
        console.print(f"[dim]{timestamp}[/dim] {len(paths)} change(s), reloaded {taxonomy.version}: {counts}")

    return on_change


def run_watch(config: ServiceConfig) -> int:
    """
    Watch the artifact tree and reload on every debounced change.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    service = start_service(config, console)
    if service is None:
        return 1

    console.print(f"[bold]Watching[/bold] {config.artifact_path}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    run_watch_loop(Path(config.artifact_path), reload_on_change(service, console))
    console.print("[bold]Stopped.[/bold]")
    return 0
