import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from book_catalog.application import BookApplication
from book_catalog.book_service import BookService
from book_catalog.config import Settings, configure_logging, settings
from book_catalog.database import check_connection, create_client, initialize_database
from book_catalog.errors import BookCatalogError, StorageError
from book_catalog.repository import BookRepository
from book_catalog.ui_helpers import print_book_result, print_list_result, set_output_mode

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(help="Book catalog backed by MongoDB")


@asynccontextmanager
async def open_book_service(app_settings: Optional[Settings] = None) -> AsyncIterator[BookService]:
    """Connect to MongoDB, prepare the collection and yield a ready BookService."""
    app_settings = app_settings or settings
    client = create_client(app_settings)
    try:
        await check_connection(client)
        repository = BookRepository.from_settings(app_settings, client=client)
        await initialize_database(repository.collection, unique_titles=app_settings.unique_titles)
        yield BookService(repository)
    finally:
        client.close()


def _run(coro_factory) -> None:
    """Run one async command against a freshly opened service.

    Exits 1 if the store is unreachable, and 2 if the command itself fails
    with a catalog error.
    """

    async def runner() -> int:
        async with open_book_service() as service:
            try:
                await coro_factory(service)
            except BookCatalogError as e:
                logger.warning(f"Command failed: {e.kind}: {e.message}")
                console.print(f"[bold red]ERROR:[/] {escape(e.message)}")
                return 2
        return 0

    try:
        code = asyncio.run(runner())
    except StorageError as e:
        logger.error(f"Application terminated unexpectedly: {e}")
        console.print(f"[bold red]Cannot start:[/] {e.message}")
        raise typer.Exit(code=1)
    if code:
        raise typer.Exit(code=code)


@app.callback(invoke_without_command=True)
def _global_options(
    ctx: typer.Context,
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
):
    """Global options; without a command the interactive menu starts."""
    configure_logging(settings.log_level)
    if output:
        set_output_mode(output)
    if ctx.invoked_subcommand is None:
        cli_menu()


@app.command("menu")
def cli_menu():
    """Start the interactive menu."""

    async def menu(service: BookService) -> None:
        await BookApplication(service, console=console).run()

    _run(menu)


@app.command("list")
def cli_list():
    """List all books."""

    async def list_books(service: BookService) -> None:
        print_list_result(await service.get_all())

    _run(list_books)


@app.command("find")
def cli_find(title: str = typer.Argument(..., help="Exact book title")):
    """Show a book by its title."""

    async def find_book(service: BookService) -> None:
        print_book_result(await service.get_by_title(title))

    _run(find_book)


@app.command("exists")
def cli_exists(title: str = typer.Argument(..., help="Exact book title")):
    """Check whether a book with this title exists."""

    async def check(service: BookService) -> None:
        if await service.exists_by_title(title):
            print(f"Book '{title}' exists in the database")
        else:
            print(f"Book '{title}' does not exist in the database")

    _run(check)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
