import logging
import uuid
from typing import List, Optional, Sequence

from book_catalog.book import CreateBookDto, UpdateBookDto
from book_catalog.errors import InvalidFormatError, InvalidInputError, ValidationError
from book_catalog.validators import BookValidator

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = ", "
CREATE_FIELDS = ("Title", "Author", "Description", "PageCount", "PublishDate")
UPDATE_FIELDS = ("Title", "PageCount", "PublishDate", "Author", "Description")


def split_fields(raw: Optional[str]) -> List[str]:
    """Split a console line such as 'Dune, Frank Herbert, ...' into its fields."""
    if raw is None:
        return []
    return raw.split(FIELD_SEPARATOR)


class BookMapper:
    """Turns raw console fields into validated DTOs and identifiers."""

    def map_to_create_dto(self, fields: Optional[Sequence[str]]) -> CreateBookDto:
        if fields is None or len(fields) != len(CREATE_FIELDS):
            raise InvalidInputError(
                "Invalid input format. Expected: " + FIELD_SEPARATOR.join(CREATE_FIELDS)
            )

        title, author, description, raw_pages, raw_date = (f.strip() for f in fields)

        page_count, pages_ok = BookValidator.try_parse_int(raw_pages)
        publish_date, date_ok = BookValidator.try_parse_date(raw_date)
        if not (pages_ok and date_ok):
            logger.error(f"Error parsing input: {FIELD_SEPARATOR.join(fields)}")
            raise InvalidFormatError("Invalid format for PageCount or PublishDate")

        dto = CreateBookDto(
            title=title,
            author=author,
            description=description,
            page_count=page_count,
            publish_date=publish_date,
        )
        self._ensure_valid(dto)
        return dto

    def map_to_update_dto(self, fields: Optional[Sequence[str]]) -> UpdateBookDto:
        if not fields:
            raise InvalidInputError("Invalid input format. At least Title is required.")

        values = [f.strip() for f in fields] + [""] * (len(UPDATE_FIELDS) - len(fields))
        title, raw_pages, raw_date, author, description = values[: len(UPDATE_FIELDS)]

        dto = UpdateBookDto(title=title)
        if raw_pages:
            page_count, ok = BookValidator.try_parse_int(raw_pages)
            if ok:
                dto.page_count = page_count
            else:
                logger.debug(f"Ignoring unparsable PageCount {raw_pages!r}")
        if raw_date:
            publish_date, ok = BookValidator.try_parse_date(raw_date)
            if ok:
                dto.publish_date = publish_date
            else:
                logger.debug(f"Ignoring unparsable PublishDate {raw_date!r}")
        if author:
            dto.author = author
        if description:
            dto.description = description

        self._ensure_valid(dto)
        return dto

    def map_to_id(self, text: Optional[str]) -> uuid.UUID:
        if text is None or not text.strip():
            raise InvalidInputError("Book ID cannot be empty")
        try:
            return uuid.UUID(text.strip())
        except ValueError as e:
            raise InvalidFormatError(f"Invalid book ID format: {text}") from e

    @staticmethod
    def _ensure_valid(dto) -> None:
        result = BookValidator.validate(dto)
        if not result.is_valid:
            logger.warning(f"{type(dto).__name__} rejected: {result.message}")
            raise ValidationError(result.message)
