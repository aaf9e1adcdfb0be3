"""Failure taxonomy shared by the mapper, service and repository layers."""


class BookCatalogError(Exception):
    """Base class for every failure the console reports back to the user."""

    kind = "BookCatalogError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(BookCatalogError, ValueError):
    """Missing or malformed caller-supplied text (wrong field count, blank title)."""

    kind = "InvalidInput"


class InvalidFormatError(BookCatalogError, ValueError):
    """A number, date or identifier could not be parsed."""

    kind = "InvalidFormat"


class ValidationError(BookCatalogError, ValueError):
    kind = "ValidationError"

    def __init__(self, message: str) -> None:
        super().__init__(f"Validation failed: {message}")
        self.details = message


class NotFoundError(BookCatalogError, LookupError):
    kind = "NotFound"


class DuplicateTitleError(BookCatalogError):
    kind = "DuplicateTitle"

    def __init__(self, title: str) -> None:
        super().__init__(f"A book with title '{title}' already exists.")
        self.title = title


class StorageError(BookCatalogError):
    """The underlying MongoDB call failed (connectivity, serialization, ...)."""

    kind = "StorageError"
