import io
import uuid
from datetime import date

import pytest
from rich.console import Console

from book_catalog.application import BookApplication
from book_catalog.book import CreateBookDto

pytestmark = pytest.mark.asyncio


def make_app(service, inputs):
    """Build the menu app over scripted input; EOF ends the session."""
    lines = iter(inputs)

    def read_line(prompt):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    console = Console(file=io.StringIO(), width=200, color_system=None)
    return BookApplication(service, console=console, read_line=read_line, app_name="Test Catalog")


def output_of(app):
    return app.console.file.getvalue()


async def test_create_book_through_menu(service):
    app = make_app(service, ["1", "Dune, Frank Herbert, Sci-fi classic, 412, 1965-08-01", "", "0"])

    await app.run()

    books = await service.get_all()
    assert [b.title for b in books] == ["Dune"]
    out = output_of(app)
    assert f"Book created successfully with ID: {books[0].id}" in out
    assert "Goodbye!" in out


async def test_create_with_wrong_field_count_reports_and_continues(service):
    app = make_app(service, ["1", "Dune, Frank Herbert", "", "9", "Dune", "", "0"])

    await app.run()

    out = output_of(app)
    assert "Failed to create book: Invalid input format." in out
    assert "Book 'Dune' does not exist in the database" in out


async def test_duplicate_title_is_reported(service, dune_dto):
    await service.create(dune_dto)
    app = make_app(service, ["1", "Dune, Someone Else, Copy, 10, 2000-01-01", "", "0"])

    await app.run()

    assert "Failed to create book: A book with title 'Dune' already exists." in output_of(app)
    assert len(await service.get_all()) == 1


async def test_update_by_title_through_menu(service, dune_dto):
    await service.create(dune_dto)
    app = make_app(service, ["5", "Dune, 413", "", "0"])

    await app.run()

    assert "Book updated successfully" in output_of(app)
    book = await service.get_by_title("Dune")
    assert book.page_count == 413
    assert book.author == "Frank Herbert"


async def test_update_by_id_through_menu(service, dune_dto):
    book = await service.create(dune_dto)
    app = make_app(service, ["6", str(book.id), "Dune, , , Frank P. Herbert", "", "0"])

    await app.run()

    assert "Book updated successfully" in output_of(app)
    assert (await service.get_by_id(book.id)).author == "Frank P. Herbert"


async def test_get_by_id_and_title(service, dune_dto):
    book = await service.create(dune_dto)
    app = make_app(service, ["4", str(book.id), "", "3", "Missing", "", "0"])

    await app.run()

    out = output_of(app)
    assert str(book.id) in out
    assert "Frank Herbert" in out
    assert "Book not found." in out


async def test_get_all_books(service, dune_dto):
    await service.create(dune_dto)
    await service.create(CreateBookDto("Emma", "Jane Austen", "Novel", 474, date(1815, 12, 23)))
    app = make_app(service, ["2", "", "0"])

    await app.run()

    out = output_of(app)
    assert "Found 2 book(s)" in out
    assert "Jane Austen" in out


async def test_delete_by_id_unknown_reports_not_found(service):
    missing = uuid.uuid4()
    app = make_app(service, ["8", str(missing), "", "0"])

    await app.run()

    assert f"Failed to delete book: Book with ID '{missing}' not found." in output_of(app)


async def test_delete_by_title(service, dune_dto):
    await service.create(dune_dto)
    app = make_app(service, ["7", "Dune", "", "0"])

    await app.run()

    assert "Book deleted successfully" in output_of(app)
    assert await service.get_all() == []


async def test_malformed_id_is_reported(service):
    app = make_app(service, ["4", "abc", "", "0"])

    await app.run()

    assert "Failed to retrieve book: Invalid book ID format: abc" in output_of(app)


async def test_invalid_menu_input(service):
    app = make_app(service, ["x", "", "42", "", "0"])

    await app.run()

    out = output_of(app)
    assert "Invalid input. Please enter a number." in out
    assert "Invalid choice. Please try again." in out


async def test_blank_input_is_asked_again(service, dune_dto):
    await service.create(dune_dto)
    app = make_app(service, ["   ", "9", "", "Dune", "", "0"])

    await app.run()

    out = output_of(app)
    assert out.count("Input cannot be empty. Please try again.") == 2
    assert "Book 'Dune' exists in the database" in out


async def test_unexpected_error_does_not_stop_the_loop(service, monkeypatch):
    async def boom():
        raise RuntimeError("boom")

    monkeypatch.setattr(service, "get_all", boom)
    app = make_app(service, ["2", "", "0"])

    await app.run()

    out = output_of(app)
    assert "An error occurred: boom" in out
    assert "Goodbye!" in out


async def test_end_of_input_exits_cleanly(service):
    app = make_app(service, [])

    await app.run()

    assert "Goodbye!" in output_of(app)
