import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from book_catalog.book import Book, CreateBookDto, UpdateBookDto

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

TITLE_MAX_LENGTH = 200
AUTHOR_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000

# Accepted after ISO 'yyyy-mm-dd' and ISO date-times
_FALLBACK_DATE_FORMATS = ("%d.%m.%Y", "%m/%d/%Y")
_INT_PATTERN = re.compile(r"^[+-]?\d+$")

Rule = Tuple[Callable[[Any], bool], str]


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: str = ""

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(True)

    @classmethod
    def failure(cls, message: str) -> "ValidationResult":
        return cls(False, message)


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _not_in_future(value: Optional[date]) -> bool:
    return value is None or value <= date.today()


CREATE_BOOK_RULES: List[Rule] = [
    (lambda d: _present(d.title), "Title is required"),
    (lambda d: len(d.title or "") <= TITLE_MAX_LENGTH, "Title cannot exceed 200 characters"),
    (lambda d: _present(d.author), "Author is required"),
    (lambda d: len(d.author or "") <= AUTHOR_MAX_LENGTH, "Author cannot exceed 100 characters"),
    (lambda d: len(d.description or "") <= DESCRIPTION_MAX_LENGTH, "Description cannot exceed 1000 characters"),
    (lambda d: d.page_count is not None and d.page_count > 0, "Page count must be greater than 0"),
    (lambda d: d.publish_date is not None and _not_in_future(d.publish_date), "Publish date cannot be in the future"),
]

# Optional fields are only checked when they were supplied
UPDATE_BOOK_RULES: List[Rule] = [
    (lambda d: _present(d.title), "Title is required"),
    (lambda d: len(d.title or "") <= TITLE_MAX_LENGTH, "Title cannot exceed 200 characters"),
    (lambda d: not d.author or len(d.author) <= AUTHOR_MAX_LENGTH, "Author cannot exceed 100 characters"),
    (lambda d: not d.description or len(d.description) <= DESCRIPTION_MAX_LENGTH, "Description cannot exceed 1000 characters"),
    (lambda d: d.page_count is None or d.page_count > 0, "Page count must be greater than 0"),
    (lambda d: _not_in_future(d.publish_date), "Publish date cannot be in the future"),
]

# A stored book must satisfy the same constraints it was created under
BOOK_RULES: List[Rule] = list(CREATE_BOOK_RULES)

RULES: Dict[type, List[Rule]] = {
    Book: BOOK_RULES,
    CreateBookDto: CREATE_BOOK_RULES,
    UpdateBookDto: UPDATE_BOOK_RULES,
}


class BookValidator:
    """Field-level checks for books and their DTOs, plus the lenient parsers used by the mapper."""

    @staticmethod
    def validate(record: Any) -> ValidationResult:
        """Run every rule registered for ``type(record)`` and join the failures with '; '."""
        rules = RULES.get(type(record))
        if rules is None:
            raise TypeError(f"No validation rules registered for {type(record).__name__}")
        errors = [message for predicate, message in rules if not predicate(record)]
        if errors:
            return ValidationResult.failure("; ".join(errors))
        return ValidationResult.success()

    @staticmethod
    def try_parse_int(text: Optional[str]) -> Tuple[Optional[int], bool]:
        if text is None:
            return None, False
        s = text.strip()
        if not _INT_PATTERN.match(s):
            return None, False
        value = int(s)
        if value < INT32_MIN or value > INT32_MAX:
            return None, False
        return value, True

    @staticmethod
    def try_parse_date(text: Optional[str]) -> Tuple[Optional[date], bool]:
        """Parse 'yyyy-mm-dd' (always), an ISO date-time, or a couple of common local forms."""
        if text is None:
            return None, False
        s = text.strip()
        if not s:
            return None, False
        try:
            return date.fromisoformat(s), True
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(s).date(), True
        except ValueError:
            pass
        for fmt in _FALLBACK_DATE_FORMATS:
            try:
                return datetime.strptime(s, fmt).date(), True
            except ValueError:
                continue
        return None, False
