"""Rich table builders used by the CLI.

Kept separate to keep the command module focused on wiring.
"""

from __future__ import annotations

from rich.table import Table

from sigdoc.core.models import Diagnostic, DocumentedObject, TagEntry


def format_types(types: list[str]) -> str:
    return f"[{', '.join(types)}]" if types else ""


def build_objects_table(objects: list[DocumentedObject]) -> Table:
    """Build the (Path, Kind, Visibility, Tags) listing for `scan`."""
    table = Table(show_header=True, title="Documented Objects")
    table.add_column("Path", style="cyan")
    table.add_column("Kind")
    table.add_column("Visibility")
    table.add_column("Tags")
    for obj in objects:
        summary = ", ".join(f"@{tag.tag_name}" for tag in obj.tags)
        table.add_row(obj.path, obj.kind.value, obj.visibility.value, summary)
    return table


def build_tags_table(tags: list[TagEntry]) -> Table:
    """Build the tag detail table for `show`."""
    table = Table(show_header=True)
    table.add_column("Tag")
    table.add_column("Name")
    table.add_column("Types", style="green")
    table.add_column("Text")
    for tag in tags:
        table.add_row(f"@{tag.tag_name}", tag.name or "", format_types(tag.types), tag.text)
    return table


def build_diagnostics_table(diagnostics: list[Diagnostic]) -> Table:
    table = Table(show_header=True, title="Diagnostics")
    table.add_column("Kind", style="yellow")
    table.add_column("Location")
    table.add_column("Message")
    for diagnostic in diagnostics:
        location = f"{diagnostic.file or '<source>'}:{diagnostic.line or '?'}"
        table.add_row(diagnostic.kind.value, location, diagnostic.message)
    return table
