import logging
from enum import IntEnum
from typing import Awaitable, Callable, Dict, Optional

from rich.console import Console

from book_catalog.book_service import BookService
from book_catalog.config import settings
from book_catalog.errors import BookCatalogError
from book_catalog.mapper import BookMapper, split_fields
from book_catalog.ui_helpers import (
    print_book,
    print_books,
    print_instructions,
    print_message,
    print_success,
    render_menu,
)
from book_catalog.validators import BookValidator

logger = logging.getLogger(__name__)


class Operation(IntEnum):
    EXIT = 0
    CREATE_BOOK = 1
    GET_ALL_BOOKS = 2
    GET_BOOK_BY_TITLE = 3
    GET_BOOK_BY_ID = 4
    UPDATE_BOOK_BY_TITLE = 5
    UPDATE_BOOK_BY_ID = 6
    DELETE_BOOK_BY_TITLE = 7
    DELETE_BOOK_BY_ID = 8
    CHECK_BOOK_EXISTS = 9


MENU_ITEMS = [
    ("1", "Create a book", "➕"),
    ("2", "Get all books", "📚"),
    ("3", "Get a book by title", "🔎"),
    ("4", "Get a book by ID", "🆔"),
    ("5", "Update a book by title", "✏️"),
    ("6", "Update a book by ID", "📝"),
    ("7", "Delete a book by title", "🗑️"),
    ("8", "Delete a book by ID", "❌"),
    ("9", "Check if book exists", "❓"),
    ("0", "Exit", "🚪"),
]

CREATE_INSTRUCTIONS = [
    "Enter book details in the following format:",
    "Title, Author, Description, PageCount, PublishDate (yyyy-mm-dd)",
    "Example: The Great Gatsby, F. Scott Fitzgerald, A classic novel, 180, 1925-04-10",
]
UPDATE_INSTRUCTIONS = [
    "Enter book details in the following format:",
    "Title, PageCount (optional), PublishDate (optional), Author (optional), Description (optional)",
    "Example: The Great Gatsby, 200, 1925-04-10, F. Scott Fitzgerald, Updated description",
    "Note: At least Title is required. Other fields are optional.",
]


class BookApplication:
    """Interactive menu loop: read a choice, run its handler, report the outcome."""

    def __init__(
        self,
        service: BookService,
        mapper: Optional[BookMapper] = None,
        console: Optional[Console] = None,
        read_line: Optional[Callable[[str], str]] = None,
        app_name: str = settings.app_name,
    ) -> None:
        self.service = service
        self.mapper = mapper or BookMapper()
        self.console = console or Console()
        self.read_line = read_line or self.console.input
        self.app_name = app_name
        self._handlers: Dict[Operation, Callable[[], Awaitable[None]]] = {
            Operation.CREATE_BOOK: self.handle_create_book,
            Operation.GET_ALL_BOOKS: self.handle_get_all_books,
            Operation.GET_BOOK_BY_TITLE: self.handle_get_book_by_title,
            Operation.GET_BOOK_BY_ID: self.handle_get_book_by_id,
            Operation.UPDATE_BOOK_BY_TITLE: self.handle_update_book_by_title,
            Operation.UPDATE_BOOK_BY_ID: self.handle_update_book_by_id,
            Operation.DELETE_BOOK_BY_TITLE: self.handle_delete_book_by_title,
            Operation.DELETE_BOOK_BY_ID: self.handle_delete_book_by_id,
            Operation.CHECK_BOOK_EXISTS: self.handle_check_book_exists,
        }
        self._failure_labels = {
            Operation.CREATE_BOOK: "create book",
            Operation.GET_ALL_BOOKS: "retrieve books",
            Operation.GET_BOOK_BY_TITLE: "retrieve book",
            Operation.GET_BOOK_BY_ID: "retrieve book",
            Operation.UPDATE_BOOK_BY_TITLE: "update book",
            Operation.UPDATE_BOOK_BY_ID: "update book",
            Operation.DELETE_BOOK_BY_TITLE: "delete book",
            Operation.DELETE_BOOK_BY_ID: "delete book",
            Operation.CHECK_BOOK_EXISTS: "check book existence",
        }

    # ------------------------- Loop ------------------------- #
    async def run(self) -> None:
        logger.info(f"Starting {self.app_name}")
        try:
            while True:
                self.console.clear()
                render_menu(self.console, self.app_name, MENU_ITEMS)
                choice, ok = BookValidator.try_parse_int(self.ask("Enter your choice: "))
                if not ok:
                    print_message(self.console, "Invalid input. Please enter a number.", is_error=True)
                    self.pause()
                    continue
                if choice == Operation.EXIT:
                    break
                await self.dispatch(choice)
                self.pause()
        except (EOFError, KeyboardInterrupt):
            self.console.print()
        logger.info("Exiting application")
        self.console.print("[green]Goodbye![/]")

    async def dispatch(self, choice: int) -> None:
        """Run one menu operation; every failure is reported and the loop goes on."""
        try:
            operation = Operation(choice)
            handler = self._handlers[operation]
        except (ValueError, KeyError):
            print_message(self.console, "Invalid choice. Please try again.", is_error=True)
            return

        try:
            await handler()
        except BookCatalogError as e:
            logger.warning(f"{operation.name} failed ({e.kind}): {e.message}")
            print_message(self.console, f"Failed to {self._failure_labels[operation]}: {e.message}", is_error=True)
        except EOFError:
            raise
        except Exception as e:
            logger.exception("An error occurred in the application")
            print_message(self.console, f"An error occurred: {e}", is_error=True)

    def ask(self, prompt: str) -> str:
        while True:
            raw = self.read_line(prompt)
            if raw is not None and raw.strip():
                return raw.strip()
            print_message(self.console, "Input cannot be empty. Please try again.", is_error=True)

    def pause(self) -> None:
        self.read_line("\nPress Enter to continue...")

    # ------------------------- Handlers ------------------------- #
    async def handle_create_book(self) -> None:
        print_instructions(self.console, "Create New Book", CREATE_INSTRUCTIONS)
        dto = self.mapper.map_to_create_dto(split_fields(self.ask("Enter book details: ")))
        book = await self.service.create(dto)
        print_success(self.console, f"Book created successfully with ID: {book.id}")

    async def handle_get_all_books(self) -> None:
        books = await self.service.get_all()
        print_books(self.console, books)

    async def handle_get_book_by_title(self) -> None:
        print_instructions(self.console, "Get Book", ["Enter the book title:"])
        book = await self.service.get_by_title(self.ask("Enter book title: "))
        print_book(self.console, book)

    async def handle_get_book_by_id(self) -> None:
        print_instructions(self.console, "Get Book by ID", ["Enter the book ID (UUID format):"])
        book_id = self.mapper.map_to_id(self.ask("Enter book ID: "))
        book = await self.service.get_by_id(book_id)
        print_book(self.console, book)

    async def handle_update_book_by_title(self) -> None:
        print_instructions(self.console, "Update Book", UPDATE_INSTRUCTIONS)
        dto = self.mapper.map_to_update_dto(split_fields(self.ask("Enter book details: ")))
        self._report_update(await self.service.update_by_title(dto.title, dto))

    async def handle_update_book_by_id(self) -> None:
        print_instructions(self.console, "Update Book by ID", ["Enter the book ID (UUID format):"])
        book_id = self.mapper.map_to_id(self.ask("Enter book ID: "))
        print_instructions(self.console, "Update Book", UPDATE_INSTRUCTIONS)
        dto = self.mapper.map_to_update_dto(split_fields(self.ask("Enter book details: ")))
        self._report_update(await self.service.update_by_id(book_id, dto))

    async def handle_delete_book_by_title(self) -> None:
        print_instructions(self.console, "Delete Book", ["Enter the book title to delete:"])
        deleted = await self.service.delete_by_title(self.ask("Enter book title: "))
        self._report_delete(deleted)

    async def handle_delete_book_by_id(self) -> None:
        print_instructions(self.console, "Delete Book by ID", ["Enter the book ID (UUID format) to delete:"])
        book_id = self.mapper.map_to_id(self.ask("Enter book ID: "))
        self._report_delete(await self.service.delete_by_id(book_id))

    async def handle_check_book_exists(self) -> None:
        print_instructions(self.console, "Check if Book Exists", ["Enter the book title to check:"])
        title = self.ask("Enter book title: ")
        if await self.service.exists_by_title(title):
            print_success(self.console, f"Book '{title}' exists in the database")
        else:
            print_message(self.console, f"Book '{title}' does not exist in the database")

    def _report_update(self, updated: bool) -> None:
        if updated:
            print_success(self.console, "Book updated successfully")
        else:
            print_message(self.console, "Failed to update book: no changes were applied", is_error=True)

    def _report_delete(self, deleted: bool) -> None:
        if deleted:
            print_success(self.console, "Book deleted successfully")
        else:
            print_message(self.console, "Failed to delete book", is_error=True)
