"""CLI entrypoint for tokentax."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import load_config
from .models import ArtifactType

TYPE_CHOICES = [t.folder for t in ArtifactType] + [t.value for t in ArtifactType]


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(__version__, prog_name="tokentax")
@click.option(
    "--artifacts",
    "-a",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Artifact root (overrides artifact_path from the config)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (defaults to ./tokentax.toml when present)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (overrides log_level from the config)",
)
@click.pass_context
def cli(ctx: click.Context, artifacts: Path | None, config_path: Path | None, log_level: str | None) -> None:
    """tokentax - Token taxonomy artifact repository.

    Load, browse and edit a token taxonomy artifact tree.
    """
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    if artifacts is not None:
        config.artifact_path = artifacts
    if log_level is not None:
        config.log_level = log_level.upper()

    configure_logging(config.log_level)
    ctx.obj["config"] = config


@cli.command()
@click.pass_context
def summary(ctx: click.Context) -> None:
    """Show the taxonomy version and artifact counts per type."""
    from .commands.browse import run_summary

    sys.exit(run_summary(ctx.obj["config"]))


@cli.command("list")
@click.argument("artifact_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.option("--max", "max_items", type=int, default=100, show_default=True, help="Page size")
@click.option("--start", type=int, default=0, show_default=True, help="Index of the first item")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, artifact_type: str, max_items: int, start: int, output_json: bool) -> None:
    """List one page of an artifact collection.

    Examples:

        tokentax list base

        tokentax list behaviors --max 20 --start 40
    """
    from .commands.browse import run_list

    sys.exit(run_list(ctx.obj["config"], artifact_type, max_items=max_items, start=start, output_json=output_json))


@cli.command()
@click.argument("artifact_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.argument("symbol")
@click.option("--json", "output_json", is_flag=True, help="Output the descriptor as JSON")
@click.pass_context
def show(ctx: click.Context, artifact_type: str, symbol: str, output_json: bool) -> None:
    """Show one artifact by tooling symbol."""
    from .commands.browse import run_show

    sys.exit(run_show(ctx.obj["config"], artifact_type, symbol, output_json=output_json))


@cli.command()
@click.argument("formula", required=False)
@click.option("--name", default=None, help="Look the template up by name instead of formula")
@click.pass_context
def spec(ctx: click.Context, formula: str | None, name: str | None) -> None:
    """Resolve a token template into its full specification."""
    from .commands.browse import run_spec

    if not formula and not name:
        raise click.UsageError("Pass a FORMULA or --name")
    sys.exit(run_spec(ctx.obj["config"], formula, name=name))


@cli.command()
@click.argument("artifact_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.argument("symbol")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, artifact_type: str, symbol: str, yes: bool) -> None:
    """Delete an artifact and its directory."""
    from .commands.edit import run_delete

    if not yes:
        click.confirm(f"Delete {artifact_type} {symbol}?", abort=True)
    sys.exit(run_delete(ctx.obj["config"], artifact_type, symbol))


@cli.command()
@click.argument("artifact_type", type=click.Choice(TYPE_CHOICES, case_sensitive=False))
@click.argument("name")
@click.option("--tooling", default=None, help="Tooling symbol (defaults to NAME)")
@click.option("--visual", default=None, help="Visual symbol (defaults to the tooling symbol)")
@click.pass_context
def scaffold(ctx: click.Context, artifact_type: str, name: str, tooling: str | None, visual: str | None) -> None:
    """Create a placeholder artifact directory.

    Examples:

        tokentax scaffold base Fungible --tooling tF
    """
    from .commands.edit import run_scaffold

    sys.exit(run_scaffold(ctx.obj["config"], artifact_type, name, tooling=tooling, visual=visual))


@cli.command()
@click.pass_context
def watch(ctx: click.Context) -> None:
    """Reload the taxonomy whenever the artifact tree changes."""
    from .commands.watch_cmd import run_watch

    sys.exit(run_watch(ctx.obj["config"]))


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
