"""CLI commands for parsing and resolving Bible references."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from passage_resolver.bootstrap import build_default_service_container
from passage_resolver.core.books import registry
from passage_resolver.core.exceptions import FormatError
from passage_resolver.core.models import Resolution
from passage_resolver.services.format_converter import flatten_markup
from passage_resolver.services.reference_parser import default_parser

console = Console()


def parse_reference(
    text: str = typer.Argument(..., help="Citation such as 'Jn 3:16-18'"),
) -> None:
    """Parse a citation and show its structured form."""
    outcome = default_parser.parse_detailed(text)
    if outcome.locator is None:
        status = outcome.status.value if outcome.status else "invalid-reference"
        console.print(f"[red]Error ({status}):[/red] {escape(outcome.reason)}")
        raise typer.Exit(1)

    locator = outcome.locator
    console.print(f"[bold]Reference:[/bold] {escape(locator.canonical)}")
    for field, value in locator.to_dict().items():
        if field != "reference" and value is not None:
            console.print(f"[bold]{field}:[/bold] {value}")


def _print_resolution(resolution: Resolution) -> None:
    passage = resolution.passage
    if not resolution.ok or passage is None:
        label = "yellow" if resolution.renderable else "red"
        console.print(f"[{label}]{resolution.status.value}:[/{label}] {escape(resolution.message or '')}")
        if resolution.status_code:
            console.print(f"[dim]status code {resolution.status_code}[/dim]")
        return

    version = f" {passage.version}" if passage.version else ""
    console.print(
        f"\n[bold]{escape(passage.reference.canonical)}[/bold]{version} [dim]({resolution.source})[/dim]\n"
    )
    if passage.verses:
        for verse in passage.verses:
            console.print(f"[cyan]{verse.chapter}:{verse.verse}[/cyan] {escape(verse.text)}")
    elif passage.rich_content:
        console.print(escape(" ".join(flatten_markup(passage.rich_content).split())))


def resolve_reference(
    text: str = typer.Argument(..., help="Citation to resolve"),
    corpus: Optional[Path] = typer.Option(
        None, "--corpus", "-c", help="JSON corpus file (defaults to BIBLE_CORPUS_PATH)"
    ),
    fetch: Optional[bool] = typer.Option(
        None, "--fetch/--no-fetch", help="Allow fetching missing passages from the ESV API"
    ),
) -> None:
    """Resolve a citation against the local corpus, fetching on demand."""
    try:
        services = build_default_service_container(corpus_path=corpus, fetch=fetch)
    except (OSError, FormatError) as e:
        console.print(f"[red]Error:[/red] could not load corpus: {escape(str(e))}")
        raise typer.Exit(1) from e

    resolution = asyncio.run(services.resolver.get_content(text))
    _print_resolution(resolution)
    if not resolution.ok:
        raise typer.Exit(1)


def list_books(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Filter by substring"),
) -> None:
    """List canonical books with their chapter counts."""
    books = registry.suggest(query) if query else registry.book_order()
    if not books:
        console.print("[dim]No books found.[/dim]")
        return

    table = Table(title="Books")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Book", style="cyan")
    table.add_column("Chapters", justify="right")
    for book in books:
        table.add_row(str(registry.book_id(book)), book, str(registry.chapter_count(book)))
    console.print(table)


def find_in_text(
    text: str = typer.Argument(..., help="Prose that may contain citations"),
) -> None:
    """List the citations found in a block of text."""
    found = default_parser.find_references(text)
    if not found:
        console.print("[dim]No references found.[/dim]")
        return
    for locator in found:
        console.print(escape(locator.canonical))


__all__ = ["find_in_text", "list_books", "parse_reference", "resolve_reference"]
