from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from bson.errors import InvalidBSON


@dataclass
class Book:
    """A single book document in the catalog collection."""

    title: str
    author: str
    description: str = ""
    page_count: int = 0
    publish_date: date = field(default_factory=date.today)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return (
            f"Id: {self.id}\n"
            f"Author: {self.author}\n"
            f"Title: {self.title}\n"
            f"Description: {self.description}\n"
            f"PageCount: {self.page_count}\n"
            f"PublishDate: {self.publish_date:%Y-%m-%d}"
        )

    def to_document(self) -> dict:
        # _id keeps the canonical UUID string so existing collections stay readable
        return {
            "_id": str(self.id),
            "Author": self.author,
            "Title": self.title,
            "Description": self.description,
            "PageCount": self.page_count,
            "PublishDate": to_bson_date(self.publish_date),
        }

    @staticmethod
    def from_document(data: dict) -> "Book":
        try:
            return Book(
                id=uuid.UUID(str(data["_id"])),
                author=data.get("Author", ""),
                title=data.get("Title", ""),
                description=data.get("Description") or "",
                page_count=int(data.get("PageCount") or 0),
                publish_date=from_bson_date(data.get("PublishDate")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidBSON(f"Cannot read book document {data.get('_id')!r}: {e}") from e


@dataclass
class CreateBookDto:
    title: str
    author: str
    description: str
    page_count: int
    publish_date: date

    def to_book(self, book_id: Optional[uuid.UUID] = None) -> Book:
        return Book(
            id=book_id or uuid.uuid4(),
            title=self.title,
            author=self.author,
            description=self.description,
            page_count=self.page_count,
            publish_date=self.publish_date,
        )


@dataclass
class UpdateBookDto:
    """Partial update: ``None`` means "leave the stored value as it is"."""

    title: str
    author: Optional[str] = None
    description: Optional[str] = None
    page_count: Optional[int] = None
    publish_date: Optional[date] = None


def to_bson_date(value: date) -> datetime:
    # BSON has no calendar-date type; store midnight of that day
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def from_bson_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported PublishDate value: {value!r}")
