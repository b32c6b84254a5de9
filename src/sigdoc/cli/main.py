"""sigdoc CLI - signature-driven documentation enrichment.

This module provides the command-line interface for sigdoc, enabling
scanning of Ruby sources, inspection of single documented objects, and
ad hoc parsing of sig bodies and type expressions.
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from sigdoc.core.config import MergePolicy

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="sigdoc",
    help="Extract sig block types into YARD-style documentation tags",
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()
err_console = Console(stderr=True)

# Global verbose flag
_verbose: bool = False


def set_verbose(verbose: bool) -> None:
    """Set global verbose mode and route sigdoc log records through rich."""
    global _verbose
    _verbose = verbose
    if not verbose:
        return
    logger = logging.getLogger("sigdoc")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=err_console, show_path=False))


def print_exception(e: Exception) -> None:
    """Print exception details in verbose mode."""
    if _verbose:
        err_console.print("\n[dim]--- Traceback (verbose mode) ---[/dim]")
        err_console.print(f"[dim]{traceback.format_exc()}[/dim]")


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging and full tracebacks"),
    ] = False,
) -> None:
    """sigdoc CLI - signature-driven documentation enrichment."""
    set_verbose(verbose)


def _enrich(source_path: Path, policy: Optional[MergePolicy]):
    from sigdoc.services.enrichment_service import EnrichmentService

    service = EnrichmentService.with_policy(policy) if policy else EnrichmentService()
    return service.enrich_path(source_path)


@app.command()
def scan(
    source_path: Annotated[
        Path,
        typer.Argument(help="Ruby file or directory to scan", exists=True, resolve_path=True),
    ],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the registry as JSON"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the registry JSON to this file"),
    ] = None,
    policy: Annotated[
        Optional[MergePolicy],
        typer.Option("--policy", help="Override the configured merge policy"),
    ] = None,
) -> None:
    """Scan Ruby sources and report the enriched documentation.

    Example:
        sigdoc scan lib/
        sigdoc scan lib/ --json -o registry.json
    """
    from sigdoc.cli._tables import build_diagnostics_table, build_objects_table
    from sigdoc.core.config import get_config
    from sigdoc.core.models import Visibility
    from sigdoc.core.serializer import SerializationError, serialize

    result = _enrich(source_path, policy)

    if not result.success:
        err_console.print("[red]Error:[/red] Scan failed")
        for error in result.errors:
            err_console.print(f"  - {error}")
        raise typer.Exit(1)

    try:
        json_str = serialize(result.registry)
    except SerializationError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        if e.details:
            err_console.print(f"  {e.details}")
        print_exception(e)
        raise typer.Exit(1)

    if output is not None:
        output.write_text(json_str, encoding="utf-8")

    if json_output:
        typer.echo(json_str)
        return

    objects = list(result.registry.objects.values())
    if not get_config().include_private:
        objects = [obj for obj in objects if obj.visibility != Visibility.PRIVATE]

    console.print(f"[green]✓[/green] Scan completed: {source_path}")
    console.print(f"  Files: {result.files_scanned}")
    console.print(f"  Objects: {result.objects_count}")
    console.print(f"  Methods: {result.methods_count}")
    if result.files_skipped:
        console.print(f"  [yellow]Skipped files: {result.files_skipped}[/yellow]")
    if output is not None:
        console.print(f"  Written to: {output}")
    if objects:
        console.print(build_objects_table(objects))
    if result.diagnostics:
        console.print(f"  [yellow]Diagnostics: {len(result.diagnostics)}[/yellow]")
        console.print(build_diagnostics_table(result.diagnostics))


@app.command()
def show(
    source_path: Annotated[
        Path,
        typer.Argument(help="Ruby file or directory to scan", exists=True, resolve_path=True),
    ],
    object_path: Annotated[str, typer.Argument(help="Qualified path, e.g. Foo::Bar#baz")],
    policy: Annotated[
        Optional[MergePolicy],
        typer.Option("--policy", help="Override the configured merge policy"),
    ] = None,
) -> None:
    """Show the docstring and tags of one documented object.

    Example:
        sigdoc show lib/ "Signatures#foo"
    """
    from sigdoc.cli._tables import build_tags_table

    result = _enrich(source_path, policy)
    obj = result.registry.at(object_path)
    if obj is None:
        err_console.print(f"[red]Error:[/red] Object not found: {object_path}")
        raise typer.Exit(1)

    console.print(f"[blue]{obj.path}[/blue] ({obj.kind.value}, {obj.visibility.value})")
    if obj.file:
        console.print(f"  Defined in: {obj.file}:{obj.line}")
    if obj.docstring:
        console.print(obj.docstring, markup=False)
    if obj.tags:
        console.print(build_tags_table(obj.tags))


@app.command("parse-sig")
def parse_sig(
    body: Annotated[str, typer.Argument(help="Sig block or its body, e.g. 'params(a: String).void'")],
) -> None:
    """Parse a sig block and print the derived tags.

    Example:
        sigdoc parse-sig "sig { params(x: Integer).returns(String) }"
    """
    from sigdoc.signatures import SignatureError, parse_signature, render, render_return

    try:
        node = parse_signature(body)
    except SignatureError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        if e.details:
            err_console.print(f"  {e.details}")
        print_exception(e)
        raise typer.Exit(1)

    for name, expr in node.params:
        console.print(f"@param {name} [{', '.join(render(expr))}]", markup=False)
    returns = render_return(node)
    if returns is not None:
        console.print(f"@return [{', '.join(returns)}]", markup=False)
    if node.abstract:
        console.print("@abstract", markup=False)


@app.command("render-type")
def render_type(
    expr: Annotated[str, typer.Argument(help="Type expression, e.g. 'T.nilable(String)'")],
) -> None:
    """Render a single type expression as documentation type strings.

    Example:
        sigdoc render-type "T::Hash[String, Symbol]"
    """
    from sigdoc.signatures import SignatureError, parse_type, render

    try:
        types = render(parse_type(expr))
    except SignatureError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        print_exception(e)
        raise typer.Exit(1)
    console.print(", ".join(types), markup=False)


if __name__ == "__main__":
    app()
