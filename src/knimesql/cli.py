# src/knimesql/cli.py
"""knimesql Command Line Interface.

Entry point for the knimesql CLI tool.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from knimesql import __version__
from knimesql.contracts import WorkflowNode
from knimesql.core.config import KnimeSqlSettings, load_settings

__all__ = [
    "app",
]

app = typer.Typer(
    name="knimesql",
    help="knimesql: Translate KNIME workflow nodes into SQL.",
    no_args_is_help=True,
)


@dataclass(frozen=True)
class LogOptions:
    """Logging flags given on the command line, before any settings file is read."""

    verbose: bool
    json_logs: bool


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"knimesql version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """knimesql: Translate KNIME workflow nodes into SQL."""
    from knimesql.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)
    ctx.obj = LogOptions(verbose=verbose, json_logs=json_logs)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_config(settings: Path | None) -> KnimeSqlSettings:
    """Load settings or exit with a readable error list."""
    if settings is None:
        return KnimeSqlSettings()

    settings_path = settings.expanduser()
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {settings}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _node_header(node: WorkflowNode) -> str:
    node_id = "?" if node.node_id is None else str(node.node_id)
    node_type = node.short_type or "unknown factory"
    return f"-- [{node_id}] {node.display_alias} ({node_type})"


@app.command()
def translators() -> None:
    """List the node factories that can be translated."""
    from knimesql.translators import get_default_dispatcher
    from knimesql.translators.discovery import get_translator_description

    for cls in get_default_dispatcher().manager.get_translators():
        typer.echo(f"{cls.name:15} {cls.factory}")
        typer.echo(f"{'':15} {get_translator_description(cls)}")


@app.command()
def translate(
    ctx: typer.Context,
    bundle_dir: Path = typer.Argument(
        ...,
        help="Exported workflow bundle directory (workflow.json plus one settings.json per node folder).",
    ),
    node: int | None = typer.Option(
        None,
        "--node",
        "-n",
        help="Translate only this node id.",
    ),
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Translate workflow nodes to SQL.

    Without --node, every node with a registered translator is translated,
    each after the nodes feeding it; other nodes are reported as skipped.
    A workflow with a cycle cannot be ordered and is rejected.
    Exits with status 1 if any translated node produced a diagnostic.
    """
    from knimesql.core.bundle import BundleError, load_workflow_graph
    from knimesql.core.compact import TreeFormatError
    from knimesql.core.graph import WorkflowGraphError
    from knimesql.core.logging import configure_logging
    from knimesql.translators import get_default_dispatcher

    config = _load_config(settings)
    log_options: LogOptions = ctx.obj or LogOptions(verbose=False, json_logs=False)
    if settings is not None:
        configure_logging(
            json_output=log_options.json_logs or config.logging.json_output,
            level="DEBUG" if log_options.verbose else config.logging.level,
        )

    try:
        graph = load_workflow_graph(bundle_dir.expanduser(), max_workers=config.bundle.max_workers)
    except (BundleError, TreeFormatError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    dispatcher = get_default_dispatcher()
    if node is not None:
        selected = graph.get_node(node)
        if selected is None:
            typer.echo(f"Error: Node {node} not found in {bundle_dir}", err=True)
            raise typer.Exit(1)
        targets = [selected]
    else:
        try:
            candidates = graph.dependency_ordered_nodes()
        except WorkflowGraphError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from None
        targets = []
        for candidate in candidates:
            if dispatcher.supports(candidate.factory):
                targets.append(candidate)
            else:
                typer.echo(f"Skipped: {_node_header(candidate)[3:]}", err=True)

    failed = 0
    blocks: list[str] = []
    for target in targets:
        result = dispatcher.translate_node(
            graph,
            target,
            config.translation.exposed_columns,
            default_alias=config.translation.default_input_alias,
        )
        if result.is_error:
            failed += 1
        blocks.append(f"{_node_header(target)}\n{result.text}")

    typer.echo("\n\n".join(blocks))
    if failed:
        typer.echo(f"{failed} node(s) could not be translated.", err=True)
        raise typer.Exit(1)
