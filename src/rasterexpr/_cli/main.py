import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rasterexpr._api import initialize
from rasterexpr._computed import ComputedObject
from rasterexpr._errors import RegistryError
from rasterexpr._registry import SignatureRegistry

from .config import ConfigError, RasterExprConfig, ValueSource, get_config, parse_value_source
from .discover import load_value_from_source
from .graph_summary import summarize_graph

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """rasterexpr CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _config() -> RasterExprConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_registry(registry_path: Path | None) -> SignatureRegistry:
    """Load the registry from the option, falling back to [tool.rasterexpr].registry."""
    if registry_path is None:
        registry_path = _config().registry
    if registry_path is None:
        err_console.print("[red]Error: No registry given. Use --registry or set \\[tool.rasterexpr].registry[/red]")
        raise typer.Exit(code=1)
    err_console.print(f"[cyan]Loading registry from:[/cyan] {registry_path}")
    try:
        return SignatureRegistry.load(registry_path)
    except (OSError, RegistryError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _resolve_value_source(path: str | None, var_name: str | None) -> ValueSource:
    if path is None:
        source = _config().value
    else:
        try:
            source = parse_value_source(path, var_name)
        except ConfigError as e:
            err_console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from e
    if source is None:
        err_console.print("[red]Error: No value given. Pass a script or module path, or set \\[tool.rasterexpr].value[/red]")
        raise typer.Exit(code=1)
    return source


def _load_value(path: str | None, var_name: str | None, registry_path: Path | None) -> ComputedObject:
    registry = _load_registry(registry_path)
    initialize(registry)
    source = _resolve_value_source(path, var_name)
    err_console.print(f"[cyan]Loading value from:[/cyan] {escape(str(source))}")
    try:
        value = load_value_from_source(source)
    except (OSError, ValueError, TypeError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    logger.debug(f"Loaded {value!r}")
    return value


RegistryOption = Annotated[
    Path | None,
    typer.Option("--registry", "-r", help="Path to the signature registry (JSON or TOML)"),
]
PathArgument = Annotated[
    str | None,
    typer.Argument(help="Path to Python script or module path (e.g., examples.ndvi:image)"),
]
VarOption = Annotated[
    str | None,
    typer.Option("--var", help="Name of the variable holding the value (for script paths only)"),
]


@app.command()
def ops(
    *,
    registry: RegistryOption = None,
    namespace: Annotated[
        str | None,
        typer.Option("--namespace", "-n", help="Only list operations of this namespace"),
    ] = None,
) -> None:
    """List the operations in the signature registry."""
    signature_registry = _load_registry(registry)
    namespaces = [namespace] if namespace else signature_registry.namespaces()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Operation", style="bold")
    table.add_column("Arguments")
    table.add_column("Returns", style="green")

    count = 0
    for ns in namespaces:
        for signature in signature_registry.list_operations(ns):
            args = ", ".join(
                f"[dim]{escape(p.name)}[/dim]" if p.optional else escape(p.name) for p in signature.args
            )
            table.add_row(escape(signature.name), args, escape(signature.return_type))
            count += 1

    out_console.print(table)
    err_console.print(f"[dim]{count} operations[/dim]")


@app.command()
def describe(
    name: Annotated[str, typer.Argument(help="Fully qualified operation name, e.g. Image.select")],
    *,
    registry: RegistryOption = None,
) -> None:
    """Show the signature of one operation."""
    signature_registry = _load_registry(registry)
    if name not in signature_registry:
        err_console.print(f"[red]Error: Unknown operation: {escape(name)}[/red]")
        raise typer.Exit(code=1)
    signature = signature_registry.get(name)

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Parameter", style="bold")
    table.add_column("Type", style="yellow")
    table.add_column("Optional")
    table.add_column("Description", style="dim")
    for param in signature.args:
        table.add_row(
            escape(param.name),
            escape(param.declared_type),
            "yes" if param.optional else "",
            escape(param.description),
        )

    out_console.print(
        Panel(
            table,
            title=f"[bold]{escape(signature.name)}[/bold]",
            subtitle=f"[dim]returns {escape(signature.return_type)}[/dim]",
            border_style="cyan",
        ),
    )
    if signature.description:
        out_console.print(escape(signature.description))


@app.command()
def encode(
    path: PathArgument = None,
    *,
    registry: RegistryOption = None,
    var_name: VarOption = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write the encoded graph to this file instead of stdout"),
    ] = None,
    pretty: Annotated[bool, typer.Option("--pretty", help="Indent the JSON output")] = False,
    compact: Annotated[
        bool,
        typer.Option("--compact/--no-compact", help="Hoist shared subgraphs into a scope"),
    ] = True,
) -> None:
    """Encode a value's computation graph as a JSON request payload."""
    value = _load_value(path, var_name, registry)
    serialized = value.serialize(pretty=pretty, compact=compact)

    if output is None:
        output = _config().output
    if output is None:
        out_console.print(serialized, markup=False, highlight=False, soft_wrap=True)
        return

    output.write_text(serialized + "\n", encoding="utf-8")
    err_console.print(f"[green]✓ Wrote encoded graph to {output}[/green]")


@app.command()
def inspect(
    path: PathArgument = None,
    *,
    registry: RegistryOption = None,
    var_name: VarOption = None,
) -> None:
    """Summarize a value's computation graph."""
    value = _load_value(path, var_name, registry)
    summary = summarize_graph(value.node)

    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Operation", style="bold")
    table.add_column("Calls", justify="right", style="yellow")
    for operation in summary.operations:
        table.add_row(escape(operation.name), str(operation.calls))

    kinds = ", ".join(f"{kind.value}: {count}" for kind, count in sorted(summary.kind_counts.items()))
    out_console.print(
        Panel(
            table,
            title=f"[bold]{escape(value.name())}[/bold] ({escape(summary.root_operation or summary.root_kind.value)})",
            subtitle=f"[dim]{summary.node_count} nodes, depth {summary.depth} ({kinds})[/dim]",
            border_style="cyan",
        ),
    )


@app.command()
def convert(
    source: Annotated[Path, typer.Argument(help="Registry file to read (JSON or TOML)")],
    destination: Annotated[Path, typer.Argument(help="Registry file to write; format follows the suffix")],
) -> None:
    """Convert a signature registry between JSON and TOML."""
    try:
        signature_registry = SignatureRegistry.load(source)
    except (OSError, RegistryError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    signature_registry.dump(destination)
    err_console.print(f"[green]✓ Wrote {len(signature_registry)} signatures to {destination}[/green]")


def main() -> None:
    app()
