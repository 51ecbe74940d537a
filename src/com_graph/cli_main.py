"""Command-line interface for com-graph."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from com_graph import __version__
from com_graph.cli.exception_handler import handle_exceptions
from com_graph.description import load_network, validate_network_description
from com_graph.layout import BitLayoutValidator, Placement
from com_graph.logging_utils import parse_log_level, setup_logging
from com_graph.model import CommunicationModel

# Create Typer app
app = typer.Typer(
    name="com-graph",
    help="Check and inspect the communication topology of vehicle networks.",
    add_completion=True,
    no_args_is_help=True,
)

# Rich consoles for output
console = Console()
error_console = Console(stderr=True, style="bold red")

InputFile = Annotated[
    Path,
    typer.Argument(
        help="Network description YAML/JSON file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"com-graph version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Level of log messages written to stderr (debug, info, warning, error).",
        ),
    ] = "warning",
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Also write debug logs to this file.",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Check and inspect the communication topology of vehicle networks.

    Network descriptions list clusters, ECUs, frames, PDUs and signals. They
    are built into a communication model that keeps triggerings and ports
    consistent and rejects overlapping layouts.
    """
    try:
        level = parse_log_level(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from None
    setup_logging(console_level=level, file_path=log_file)


@app.command()
def validate(
    input_file: InputFile,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            help="Treat warnings as errors.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only output errors, no success messages.",
        ),
    ] = False,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format for validation results: text, table, tree.",
        ),
    ] = "text",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Show the context recorded with each issue.",
        ),
    ] = False,
) -> None:
    """Validate a network description file.

    The file is checked against the com-graph.network/v1 schema and built
    into a communication model, which rejects overlapping layouts, invalid
    transformation chains and unconnected ECUs. The built model is then
    audited for layout and propagation consistency.

    Examples
    --------
        com-graph validate network.yaml
        com-graph validate network.yaml --strict
        com-graph validate network.yaml --format table

    """
    from com_graph.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree
    from com_graph.validation import NetworkValidator

    # Schema and build errors first
    errors = validate_network_description(input_file)

    if errors:
        error_console.print(f"\n[bold red]✗ Validation failed for {input_file.name}[/bold red]\n")

        table = Table(title="Validation Errors", show_header=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Location", style="cyan")
        table.add_column("Error", style="red")

        for i, error in enumerate(errors, 1):
            if ": " in error:
                loc, msg = error.split(": ", 1)
            else:
                loc, msg = "", error
            table.add_row(str(i), loc, msg)

        console.print(table)
        raise typer.Exit(code=1)

    model = load_network(input_file)
    result = NetworkValidator(strict=strict).validate(model)
    failed = not result.is_valid or (strict and bool(result.warnings))

    if not result.is_valid or result.warnings:
        if output_format == "table":
            ErrorTable(error_console).print_result(result)
        elif output_format == "tree":
            ErrorTree(error_console).print_result(result)
        else:
            ErrorFormatter(error_console, show_context=verbose).format_validation_result(
                result, input_file
            )

    if failed:
        raise typer.Exit(code=1)

    if not quiet:
        if result.warnings:
            console.print(
                f"\n[bold yellow]⚠ {input_file.name} is valid with warnings[/bold yellow]\n"
            )
        else:
            console.print(f"\n[bold green]✓ {input_file.name} is valid[/bold green]\n")


@app.command()
@handle_exceptions()
def show(input_file: InputFile) -> None:
    """Show the triggerings and ports of every physical channel.

    Examples
    --------
        com-graph show network.yaml

    """
    model = load_network(input_file)

    tree = Tree(f"[bold]{input_file.name}[/bold]")
    for channel in model.channels.values():
        channel_node = tree.add(
            f"[cyan]{channel.path}[/cyan] [dim]({channel.kind.value})[/dim]"
        )
        for path in channel.frame_triggerings:
            frame_triggering = model.frame_triggerings[path]
            frame_node = channel_node.add(
                f"[bold]{frame_triggering.name}[/bold] frame {frame_triggering.frame}"
            )
            _add_ports(model, frame_node, frame_triggering.ports)
            for pdu_path in frame_triggering.pdu_triggerings:
                _add_pdu_triggering(model, frame_node, pdu_path)
        for path in channel.pdu_triggerings:
            if model.pdu_triggerings[path].frame_triggering is None:
                _add_pdu_triggering(model, channel_node, path)

    console.print(tree)


def _add_pdu_triggering(model: CommunicationModel, parent: Tree, path: str) -> None:
    pdu_triggering = model.pdu_triggerings[path]
    node = parent.add(f"{pdu_triggering.name} PDU {pdu_triggering.pdu}")
    _add_ports(model, node, pdu_triggering.ports)
    for signal_path in pdu_triggering.signal_triggerings:
        signal_triggering = model.signal_triggerings[signal_path]
        kind = "signal" if signal_triggering.signal is not None else "signal group"
        signal_node = node.add(f"{signal_triggering.name} {kind} {signal_triggering.target}")
        _add_ports(model, signal_node, signal_triggering.ports)


def _add_ports(model: CommunicationModel, parent: Tree, ports: list[str]) -> None:
    for path in ports:
        port = model.ports[path]
        parent.add(f"[green]{port.direction.value}[/green] {port.ecu} [dim]({port.name})[/dim]")


@app.command()
@handle_exceptions()
def layout(
    input_file: InputFile,
    name: Annotated[str, typer.Argument(help="Name of a frame or PDU.")],
) -> None:
    """Show the bit layout of a frame or PDU.

    Frames list their PDUs, PDUs list their signals. Below the table follows
    the coverage bitmap, one hex byte per byte of the frame or PDU.

    Examples
    --------
        com-graph layout network.yaml EngineFrame
        com-graph layout network.yaml EngineData

    """
    model = load_network(input_file)

    if name in model.frames:
        frame = model.frames[name]
        length = frame.length
        names = [mapping.pdu for mapping in frame.mappings]
        placements = model.frame_placements(frame)
        title = f"Frame {name} ({length} bytes)"
    elif name in model.pdus:
        pdu = model.pdus[name]
        length = pdu.length
        names = [
            mapping.signal
            for mapping in pdu.mappings
            if mapping.signal is not None and mapping.start_position is not None
        ]
        placements = model.pdu_placements(pdu)
        title = f"PDU {name} ({length} bytes)"
    else:
        error_console.print(f"\n✗ No frame or PDU named '{name}'\n")
        raise typer.Exit(code=1)

    bitmap = BitLayoutValidator(length)
    console.print(_layout_table(title, bitmap, names, placements))
    console.print(f"Coverage: {bitmap.coverage.hex(' ').upper() or '-'}")


def _layout_table(
    title: str,
    bitmap: BitLayoutValidator,
    names: list[str],
    placements: list[Placement],
) -> Table:
    table = Table(title=title)
    table.add_column("Element", style="cyan")
    table.add_column("Start bit", justify="right")
    table.add_column("Bits", justify="right")
    table.add_column("Byte order")
    table.add_column("Update bit", justify="right")

    for element, placement in zip(names, placements):
        bitmap.add_placement(
            placement.bit_offset,
            placement.bit_length,
            placement.byte_order,
            placement.update_bit,
        )
        table.add_row(
            element,
            str(placement.bit_offset),
            str(placement.bit_length),
            placement.byte_order.value,
            "-" if placement.update_bit is None else str(placement.update_bit),
        )

    return table


if __name__ == "__main__":
    app()
