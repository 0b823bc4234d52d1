"""CLI entry point for mimebridge."""

from __future__ import annotations

import asyncio
import json
import logging
import mimetypes
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from mimebridge.config import DEFAULT_CONFIG_TEMPLATE, MimeBridgeConfig, load_config
from mimebridge.engine import ConversionProgress, Converter
from mimebridge.formats import FileData, FormatCatalog, FormatDescriptor

app = typer.Typer(
    name="mimebridge",
    help="Convert files between formats by chaining conversion handlers.",
)

config_app = typer.Typer(help="Manage mimebridge configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: MimeBridgeConfig | None = None

_LOG_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}


def _get_config() -> MimeBridgeConfig:
    if _config is None:
        return load_config()
    return _config


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _configure_logging(cfg: MimeBridgeConfig) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(show_path=False, markup=False)
    logging.basicConfig(level=_LOG_LEVELS[cfg.log_level], handlers=[handler], force=True)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to mimebridge.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(_config)


def _ready_converter() -> Converter:
    converter = Converter.from_config(_get_config())
    asyncio.run(converter.initialize())
    return converter


def _resolve_format(catalog: FormatCatalog, query: str, direction: str) -> FormatDescriptor | None:
    """Match a mime, format code or extension against the formats usable in *direction*."""
    pool = FormatCatalog(catalog.input_formats() if direction == "input" else catalog.output_formats())
    if "/" in query:
        return pool.find_by_mime(query)
    return pool.find_by_format(query) or pool.find_by_extension(query)


def _detect_source(catalog: FormatCatalog, path: Path) -> FormatDescriptor | None:
    guessed, _ = mimetypes.guess_type(path.name)
    pool = FormatCatalog(catalog.input_formats())
    if guessed:
        found = pool.find_by_mime(guessed)
        if found is not None:
            return found
    return pool.find_by_extension(path.suffix) if path.suffix else None


# ---------------------------------------------------------------------------
# Catalog commands
# ---------------------------------------------------------------------------


@app.command()
def formats(
    inputs: Annotated[bool, typer.Option("--input", help="Only formats that can be read")] = False,
    outputs: Annotated[bool, typer.Option("--output", help="Only formats that can be written")] = False,
    category: Annotated[str | None, typer.Option("--category", help="image, video, audio, ...")] = None,
    search: Annotated[str | None, typer.Option("--search", "-s", help="Filter by name, code or mime")] = None,
) -> None:
    """List the formats the enabled handlers support."""
    catalog = _ready_converter().catalog

    rows = catalog.search(search) if search else list(catalog)
    if inputs:
        rows = [f for f in rows if f.supports_input]
    if outputs:
        rows = [f for f in rows if f.supports_output]
    if category:
        rows = [f for f in rows if f.category.value == category.lower()]

    table = Table(title=f"Formats ({len(rows)})")
    table.add_column("Code", style="cyan")
    table.add_column("Name")
    table.add_column("Mime", style="dim")
    table.add_column("Ext")
    table.add_column("Category")
    table.add_column("In", justify="center")
    table.add_column("Out", justify="center")
    for fmt in rows:
        table.add_row(
            fmt.format,
            fmt.name,
            fmt.mime,
            f".{fmt.extension}",
            fmt.category.value,
            "[green]✓[/green]" if fmt.supports_input else "-",
            "[green]✓[/green]" if fmt.supports_output else "-",
        )
    rprint(table)


@app.command()
def handlers() -> None:
    """Show which handlers initialized and which were excluded."""
    converter = _ready_converter()
    registry = converter.registry
    ready = {h.name for h in registry.ready_handlers()}
    failures = registry.failures

    table = Table(title="Handlers")
    table.add_column("Order", justify="right")
    table.add_column("Handler", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Formats", justify="right")
    table.add_column("Detail", style="dim")
    for order, handler in enumerate(registry.handlers, 1):
        if handler.name in ready:
            status = "[green]ready[/green]"
            detail = ""
        else:
            status = "[red]excluded[/red]"
            detail = str(failures.get(handler.name, ""))
        table.add_row(str(order), handler.name, status, str(len(handler.list_supported_formats())), detail)
    rprint(table)


@app.command()
def route(
    source: Annotated[str, typer.Argument(help="Source format code, extension or mime")],
    destination: Annotated[str, typer.Argument(help="Target format code, extension or mime")],
    max_hops: Annotated[int | None, typer.Option("--max-hops", min=1, help="Longest chain to consider")] = None,
) -> None:
    """Show the handler chain that would convert SOURCE to DESTINATION."""
    converter = _ready_converter()
    src = _resolve_format(converter.catalog, source, "input")
    dst = _resolve_format(converter.catalog, destination, "output")
    if src is None or dst is None:
        missing = source if src is None else destination
        rprint(f"[red]Error:[/red] Unknown format '{missing}'")
        raise typer.Exit(1)

    path = converter.find_route(src, dst, max_hops)
    if path is None:
        rprint(f"[red]No route[/red] from {src.label} to {dst.label}")
        raise typer.Exit(1)

    table = Table(title=f"Route: {path}")
    table.add_column("Step", justify="right")
    table.add_column("Handler", style="cyan")
    table.add_column("From")
    table.add_column("To")
    for number, step in enumerate(path.steps, 1):
        table.add_row(str(number), step.handler.name, step.input_format.label, step.output_format.label)
    rprint(table)


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


@app.command()
def convert(
    files: Annotated[list[Path], typer.Argument(help="Files to convert (all in the same format)")],
    to: Annotated[str, typer.Option("--to", "-t", help="Target format code, extension or mime")],
    source: Annotated[str | None, typer.Option("--from", "-f", help="Source format; detected if omitted")] = None,
    output_dir: Annotated[Path, typer.Option("--output-dir", "-o", help="Where to write results")] = Path("."),
) -> None:
    """Convert FILES to another format."""
    missing = [str(p) for p in files if not p.is_file()]
    if missing:
        rprint(f"[red]Error:[/red] File not found: {', '.join(missing)}")
        raise typer.Exit(1)

    converter = _ready_converter()
    catalog = converter.catalog

    src = _resolve_format(catalog, source, "input") if source else _detect_source(catalog, files[0])
    if src is None:
        rprint(f"[red]Error:[/red] Could not determine source format for '{files[0]}'. Use --from.")
        raise typer.Exit(1)
    dst = _resolve_format(catalog, to, "output")
    if dst is None:
        rprint(f"[red]Error:[/red] Unknown output format '{to}'")
        raise typer.Exit(1)

    payloads = [FileData(name=p.name, data=p.read_bytes()) for p in files]

    with Progress(TextColumn("{task.description}"), BarColumn(), TextColumn("{task.percentage:>3.0f}%")) as bar:
        task = bar.add_task("Starting...", total=100)

        def on_progress(event: ConversionProgress) -> None:
            bar.update(task, completed=event.progress, description=event.message)

        result = asyncio.run(converter.convert(payloads, src, dst, on_progress))

    if not result.success:
        trail = " → ".join(result.path) if result.path else "-"
        rprint(Panel(f"{result.message}\n[dim]Route so far:[/dim] {trail}", title="Conversion Failed", border_style="red"))
        raise typer.Exit(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for f in result.files or []:
        target = output_dir / f.name
        target.write_bytes(f.data)
        written.append(str(target))

    rprint(
        Panel(
            f"[dim]Route:[/dim]   {' → '.join(result.path or [])}\n"
            f"[dim]Written:[/dim] {', '.join(written) or '-'}",
            title=result.message,
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    import yaml

    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default mimebridge.yaml in current directory."""
    target = Path("mimebridge.yaml")
    if target.exists() and not force:
        rprint("[yellow]mimebridge.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
