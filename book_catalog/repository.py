import logging
import uuid
from functools import wraps
from typing import Callable, List, Optional

from bson.errors import BSONError
from pymongo.errors import DuplicateKeyError, PyMongoError

from book_catalog.book import Book, UpdateBookDto, to_bson_date
from book_catalog.config import Settings
from book_catalog.database import create_client, get_collection
from book_catalog.errors import DuplicateTitleError, StorageError

logger = logging.getLogger(__name__)


def store_operation(action: str, describe: Callable[..., str]):
    """Log and wrap any driver failure of the decorated repository call.

    ``describe`` receives the call's arguments (without ``self``) and names
    the record involved, e.g. "ID: <uuid>" or "title: Dune".
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except DuplicateKeyError as e:
                context = describe(*args, **kwargs)
                logger.error(f"Duplicate title while {action} with {context}: {e}")
                title = e.details.get("keyValue", {}).get("Title") if e.details else None
                raise DuplicateTitleError(title or context) from e
            except (PyMongoError, BSONError) as e:
                context = describe(*args, **kwargs)
                logger.error(f"Error {action} with {context}: {e}")
                raise StorageError(f"Error {action} with {context}: {e}") from e

        return wrapper

    return decorator


class BookRepository:
    """Persistence boundary over the books collection (one document per book)."""

    def __init__(self, collection) -> None:
        self._collection = collection

    @property
    def collection(self):
        return self._collection

    @classmethod
    def from_settings(cls, settings: Settings, client=None) -> "BookRepository":
        client = client or create_client(settings)
        return cls(get_collection(client, settings))

    @store_operation("adding book", lambda book: f"title: {book.title}")
    async def insert(self, book: Book) -> Book:
        await self._collection.insert_one(book.to_document())
        logger.info(f"Book added successfully with ID: {book.id}")
        return book

    @store_operation("retrieving all books", lambda: "no filter")
    async def find_all(self) -> List[Book]:
        documents = await self._collection.find({}).to_list(length=None)
        books = [Book.from_document(doc) for doc in documents]
        logger.info(f"Retrieved {len(books)} books")
        return books

    @store_operation("retrieving book", lambda book_id: f"ID: {book_id}")
    async def find_by_id(self, book_id: uuid.UUID) -> Optional[Book]:
        document = await self._collection.find_one({"_id": str(book_id)})
        return Book.from_document(document) if document else None

    @store_operation("retrieving book", lambda title: f"title: {title}")
    async def find_by_title(self, title: str) -> Optional[Book]:
        document = await self._collection.find_one({"Title": title})
        return Book.from_document(document) if document else None

    @store_operation("updating book", lambda book_id, dto: f"ID: {book_id}")
    async def update(self, book_id: uuid.UUID, dto: UpdateBookDto) -> bool:
        result = await self._collection.update_one(
            {"_id": str(book_id)}, {"$set": self._build_update(dto)}
        )
        logger.info(f"Updated {result.modified_count} book(s) with ID: {book_id}")
        return result.modified_count > 0

    @store_operation("deleting book", lambda book_id: f"ID: {book_id}")
    async def delete_by_id(self, book_id: uuid.UUID) -> bool:
        result = await self._collection.delete_one({"_id": str(book_id)})
        logger.info(f"Deleted {result.deleted_count} book(s) with ID: {book_id}")
        return result.deleted_count > 0

    @store_operation("deleting book", lambda title: f"title: {title}")
    async def delete_by_title(self, title: str) -> bool:
        result = await self._collection.delete_one({"Title": title})
        logger.info(f"Deleted {result.deleted_count} book(s) with title: {title}")
        return result.deleted_count > 0

    @store_operation("checking if book exists", lambda title: f"title: {title}")
    async def exists_by_title(self, title: str) -> bool:
        count = await self._collection.count_documents({"Title": title}, limit=1)
        return count > 0

    @staticmethod
    def _build_update(dto: UpdateBookDto) -> dict:
        """Only fields present on the DTO end up in ``$set``; Title always does."""
        fields = {"Title": dto.title}
        if dto.author:
            fields["Author"] = dto.author
        if dto.description:
            fields["Description"] = dto.description
        if dto.page_count is not None:
            fields["PageCount"] = dto.page_count
        if dto.publish_date is not None:
            fields["PublishDate"] = to_bson_date(dto.publish_date)
        return fields
