"""CLI commands for passage-resolver."""

import typer

from passage_resolver.cli.passages import (
    find_in_text,
    list_books,
    parse_reference,
    resolve_reference,
)

main_app = typer.Typer(
    name="passage-resolver",
    help="Bible reference parser and passage resolver",
    no_args_is_help=True,
)
main_app.command("parse")(parse_reference)
main_app.command("resolve")(resolve_reference)
main_app.command("books")(list_books)
main_app.command("find")(find_in_text)


def main() -> None:
    """Entry point for the CLI."""
    main_app()


__all__ = ["main", "main_app"]
