"""Commands that change the artifact tree: delete, scaffold."""

from __future__ import annotations

from rich.console import Console

from ..config import ServiceConfig
from ..errors import Collision, InvalidArgument, ParseError
from ..mutations import DeleteArtifactRequest
from ..scaffold import scaffold_artifact
from . import start_service


def run_delete(config: ServiceConfig, artifact_type: str, symbol: str) -> int:
    console = Console()
    err = Console(stderr=True)
    service = start_service(config, err)
    if service is None:
        return 1

    response = service.delete_artifact(DeleteArtifactRequest(artifact_type, symbol))
    if not response.success:
        err.print(f"Delete failed: {response.reason}", style="bold red")
        return 1

    console.print(f"Deleted {response.artifact_type.value} {response.symbol}")
    return 0


def run_scaffold(
    config: ServiceConfig,
    artifact_type: str,
    name: str,
    *,
    tooling: str | None = None,
    visual: str | None = None,
) -> int:
    """Create a placeholder artifact directory under the artifact root."""
    console = Console()
    err = Console(stderr=True)
    try:
        directory, record = scaffold_artifact(
            config.artifact_path, artifact_type, name, tooling=tooling, visual=visual
        )
    except (InvalidArgument, Collision, ParseError, ValueError, OSError) as e:
        err.print(f"Scaffold failed: {e}", style="bold red")
        return 1

    console.print(f"Created {record.artifact.type.value} {record.tooling} at {directory}")
    return 0
