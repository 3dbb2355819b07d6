"""promptweave CLI - typer application entry point."""

from __future__ import annotations

import atexit
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from promptweave.assembly import InterceptState, assemble_snapshot
from promptweave.config import ConfigError, load_assembly_config
from promptweave.graph import NodeType, SnapshotError, collect_upstream, load_snapshot
from promptweave.observability import close_file_logging, configure_logging, get_logger

if TYPE_CHECKING:
    from promptweave.assembly import AssemblyResult
    from promptweave.config import AssemblyConfig
    from promptweave.graph import GraphSnapshot

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="pw",
    help="promptweave: assemble image-generation requests from a node graph.",
    no_args_is_help=True,
)
console = Console()

ROLE_STYLES = {
    "narrative": "[green]narrative[/green]",
    "reference": "[magenta]reference[/magenta]",
    "config": "[cyan]config[/cyan]",
}

SnapshotArg = Annotated[
    Path,
    typer.Argument(help="Graph snapshot JSON (canvas export with 'nodes' and 'edges')."),
]
SinkOption = Annotated[
    str,
    typer.Option("--sink", "-s", help="ID of the output or intercept node to assemble for."),
]


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Enable JSONL file logging into this directory (debug.jsonl).",
            envvar="PW_LOG_DIR",
        ),
    ] = None,
) -> None:
    """promptweave: assemble image-generation requests from a node graph."""
    configure_logging(verbosity=verbose, log_to_file=log_dir is not None, log_dir=log_dir)
    if log_dir is not None:
        atexit.register(close_file_logging)


@app.command()
def version() -> None:
    """Show version information."""
    from promptweave import __version__

    console.print(f"promptweave v{__version__}")


def _load(snapshot_path: Path, config_path: Path | None) -> tuple[GraphSnapshot, AssemblyConfig]:
    """Load snapshot and config, exiting with a message on failure.

    Raises:
        typer.Exit: If either file cannot be loaded.
    """
    try:
        return load_snapshot(snapshot_path), load_assembly_config(config_path)
    except (SnapshotError, ConfigError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _require_sink(snapshot: GraphSnapshot, sink: str) -> None:
    """Exit if *sink* is not a node of the snapshot.

    Raises:
        typer.Exit: If the sink does not exist.
    """
    if not snapshot.has_node(sink):
        console.print(f"[red]Error:[/red] Node '{sink}' not found in snapshot")
        raise typer.Exit(1)


def _print_result(result: AssemblyResult, placeholder: str) -> None:
    console.print(Panel(result.prompt or f"[dim]{placeholder}[/dim]", title="Prompt"))
    if result.negative_prompt:
        console.print(Panel(result.negative_prompt, title="Negative", border_style="red"))

    table = Table(title="Parameters")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    for name, value in result.parameters.to_dict().items():
        table.add_row(name, str(value))
    console.print(table)

    if result.reference_images:
        refs = Table(title="Reference Images")
        refs.add_column("Node", style="cyan")
        refs.add_column("Type")
        refs.add_column("Description", style="dim")
        for ref in result.reference_images:
            refs.add_row(ref.node_id, ref.image_type, ref.description or "-")
        console.print(refs)


@app.command()
def assemble(
    snapshot_path: SnapshotArg,
    sink: SinkOption,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Assembly config YAML (defaults, separators)."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the generation request as JSON."),
    ] = False,
) -> None:
    """Assemble the prompt, negative prompt and parameters for a sink node.

    For an intercept sink, the effective values (after applying the node's
    stored edits) are shown alongside the auto-assembled ones.
    """
    log = get_logger(__name__)
    snapshot, cfg = _load(snapshot_path, config)
    _require_sink(snapshot, sink)

    result = assemble_snapshot(sink, snapshot, cfg)
    log.info("assembled", sink=sink, prompt_chars=len(result.prompt))

    sink_node = snapshot.get_node(sink)
    state = None
    if sink_node is not None and sink_node.type == NodeType.INTERCEPT:
        state = InterceptState.from_payload(sink_node.data).reassemble(
            result.prompt, result.negative_prompt
        )

    if as_json:
        request = result.to_request()
        if state is not None:
            request["effective_prompt"] = state.prompt.effective_value
            request["effective_negative_prompt"] = state.negative.effective_value
        typer.echo(json.dumps(request, indent=2))
        return

    _print_result(result, cfg.placeholder)
    if state is not None:
        status = "[yellow]Edited[/yellow]" if state.prompt.is_edited else "[green]Auto[/green]"
        console.print(
            Panel(
                state.prompt.display_value(cfg.placeholder),
                title=f"Effective Prompt ({status})",
            )
        )
        if state.negative.effective_value:
            status = "[yellow]Edited[/yellow]" if state.negative.is_edited else "[green]Auto[/green]"
            console.print(
                Panel(
                    state.negative.effective_value,
                    title=f"Effective Negative ({status})",
                    border_style="red",
                )
            )


@app.command()
def trace(snapshot_path: SnapshotArg, sink: SinkOption) -> None:
    """Show the nodes collected upstream of a sink, in discovery order."""
    snapshot, _ = _load(snapshot_path, None)
    _require_sink(snapshot, sink)

    upstream = collect_upstream(sink, snapshot)
    if not upstream:
        console.print(f"[yellow]Nothing is connected upstream of '{sink}'.[/yellow]")
        return

    table = Table(title=f"Upstream of {sink}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Node", style="cyan")
    table.add_column("Type")
    table.add_column("Role")
    table.add_column("Depth", justify="right")
    for index, entry in enumerate(upstream, start=1):
        table.add_row(
            str(index),
            entry.node.id,
            entry.node.type,
            ROLE_STYLES.get(entry.role.value, entry.role.value),
            str(entry.depth),
        )
    console.print(table)


@app.command()
def sinks(snapshot_path: SnapshotArg) -> None:
    """List the output and intercept nodes of a snapshot."""
    snapshot, _ = _load(snapshot_path, None)

    found = snapshot.sink_nodes()
    if not found:
        console.print("[yellow]No output or intercept nodes in snapshot.[/yellow]")
        return

    table = Table(title="Sinks")
    table.add_column("Node", style="cyan")
    table.add_column("Type")
    table.add_column("Inputs", justify="right")
    for node in found:
        table.add_row(node.id, node.type, str(len(snapshot.incoming_edges(node.id))))
    console.print(table)
