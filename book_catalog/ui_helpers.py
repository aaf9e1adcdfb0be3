import json
import os
from typing import Iterable, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from book_catalog.book import Book

# Environment variable to control one-shot command output
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOK_CATALOG_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    """Remember the one-shot output format for this process; unknown modes are ignored."""
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    """Current one-shot output format, 'plain' unless --output or the env var says otherwise."""
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def book_to_json(book: Book) -> dict:
    return {
        "id": str(book.id),
        "title": book.title,
        "author": book.author,
        "description": book.description,
        "page_count": book.page_count,
        "publish_date": book.publish_date.isoformat(),
    }


def books_table(books: Sequence[Book], title: str = "📚 Books") -> Table:
    table = Table(title=title, show_lines=True, header_style="bold cyan")
    table.add_column("ID", style="magenta", no_wrap=True)
    table.add_column("Title", style="white")
    table.add_column("Author", style="white")
    table.add_column("Pages", justify="right")
    table.add_column("Published", no_wrap=True)
    table.add_column("Description", style="dim")
    for b in books:
        table.add_row(
            str(b.id),
            escape(b.title),
            escape(b.author),
            str(b.page_count),
            b.publish_date.isoformat(),
            escape(b.description),
        )
    return table


def book_panel(book: Book) -> Panel:
    return Panel.fit(
        f"[bold]Id:[/] {book.id}\n"
        f"[bold]Title:[/] {escape(book.title)}\n"
        f"[bold]Author:[/] {escape(book.author)}\n"
        f"[bold]Description:[/] {escape(book.description)}\n"
        f"[bold]PageCount:[/] {book.page_count}\n"
        f"[bold]PublishDate:[/] {book.publish_date:%Y-%m-%d}",
        title="🔍 Book Details",
        border_style="green",
    )


# ------------------------- One-shot command output ------------------------- #
def print_list_result(books: List[Book]) -> None:
    """Print books according to the current output mode.
    - plain: 'ID - Title by Author' lines, or 'No books found.'
    - json: JSON array of book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books found.")
        return

    if mode == "json":
        print(json.dumps([book_to_json(b) for b in books], ensure_ascii=False))
    elif mode == "rich":
        _console.print(books_table(books))
    else:
        for b in books:
            print(f"{b.id} - {b.title} by {b.author}")


def print_book_result(book: Optional[Book]) -> None:
    mode = get_output_mode()

    if book is None:
        print("Book not found.")
        return

    if mode == "json":
        print(json.dumps(book_to_json(book), ensure_ascii=False))
    elif mode == "rich":
        _console.print(book_panel(book))
    else:
        print(str(book))


# ------------------------- Interactive console ------------------------- #
def render_menu(console: Console, app_name: str, items: Iterable[Tuple[str, str, str]]) -> None:
    table = Table.grid(padding=(0, 2))
    table.add_column(justify="right", style="bold cyan", width=4)
    table.add_column(justify="left", style="white")
    for key, label, icon in items:
        table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

    console.print(Panel(table, title=app_name, border_style="cyan", box=box.HEAVY, padding=(1, 2)))


def print_books(console: Console, books: Sequence[Book]) -> None:
    if not books:
        print_message(console, "No books found.")
        return
    console.print(books_table(books, title=f"📚 Found {len(books)} book(s)"))


def print_book(console: Console, book: Optional[Book]) -> None:
    if book is None:
        print_message(console, "Book not found.")
        return
    console.print(book_panel(book))


def print_instructions(console: Console, title: str, lines: Iterable[str]) -> None:
    body = "\n".join(escape(line) for line in lines)
    console.print(Panel.fit(body, title=title, border_style="blue"))


def print_message(console: Console, message: str, is_error: bool = False) -> None:
    if is_error:
        console.print(f"[bold red]ERROR:[/] {escape(message)}")
    else:
        console.print(f"[yellow]INFO:[/] {escape(message)}")


def print_success(console: Console, message: str) -> None:
    console.print(f"[bold green]SUCCESS:[/] {escape(message)}")
