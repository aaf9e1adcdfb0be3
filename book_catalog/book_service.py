import logging
import uuid
from typing import List, Optional

from book_catalog.book import Book, CreateBookDto, UpdateBookDto
from book_catalog.errors import DuplicateTitleError, InvalidInputError, NotFoundError, ValidationError
from book_catalog.repository import BookRepository
from book_catalog.validators import BookValidator

logger = logging.getLogger(__name__)


class BookService:
    """Business rules around the repository: validation, title uniqueness, existence.

    Title uniqueness is a check-then-write sequence. Two processes creating the
    same title at once can both pass the check; the unique index created by
    ``database.initialize_database`` is what rejects the second write.
    """

    def __init__(self, repository: BookRepository) -> None:
        self.repository = repository

    # ------------------------- Create / read ------------------------- #
    async def create(self, dto: CreateBookDto) -> Book:
        self._ensure_valid(dto)
        if await self.repository.exists_by_title(dto.title):
            logger.warning(f"Rejected duplicate title: {dto.title}")
            raise DuplicateTitleError(dto.title)

        book = dto.to_book(uuid.uuid4())
        return await self.repository.insert(book)

    async def get_all(self) -> List[Book]:
        return await self.repository.find_all()

    async def get_by_id(self, book_id: uuid.UUID) -> Optional[Book]:
        return await self.repository.find_by_id(book_id)

    async def get_by_title(self, title: str) -> Optional[Book]:
        self._require_title(title)
        return await self.repository.find_by_title(title)

    # ------------------------- Update ------------------------- #
    async def update_by_id(self, book_id: uuid.UUID, dto: UpdateBookDto) -> bool:
        self._ensure_valid(dto)
        existing = await self.repository.find_by_id(book_id)
        if existing is None:
            raise NotFoundError(f"Book with ID '{book_id}' not found.")

        await self._ensure_title_free(existing, dto)
        return await self.repository.update(existing.id, dto)

    async def update_by_title(self, title: str, dto: UpdateBookDto) -> bool:
        self._ensure_valid(dto)
        self._require_title(title)
        existing = await self.repository.find_by_title(title)
        if existing is None:
            raise NotFoundError(f"Book with title '{title}' not found.")

        await self._ensure_title_free(existing, dto)
        return await self.repository.update(existing.id, dto)

    # ------------------------- Delete / exists ------------------------- #
    async def delete_by_id(self, book_id: uuid.UUID) -> bool:
        if await self.repository.find_by_id(book_id) is None:
            raise NotFoundError(f"Book with ID '{book_id}' not found.")
        return await self.repository.delete_by_id(book_id)

    async def delete_by_title(self, title: str) -> bool:
        self._require_title(title)
        if await self.repository.find_by_title(title) is None:
            raise NotFoundError(f"Book with title '{title}' not found.")
        return await self.repository.delete_by_title(title)

    async def exists_by_title(self, title: str) -> bool:
        # Blank titles simply do not exist; no error for this query
        if title is None or not title.strip():
            return False
        return await self.repository.exists_by_title(title)

    # ------------------------- Helpers ------------------------- #
    async def _ensure_title_free(self, existing: Book, dto: UpdateBookDto) -> None:
        if dto.title != existing.title and await self.repository.exists_by_title(dto.title):
            logger.warning(f"Rejected rename of {existing.id} to taken title: {dto.title}")
            raise DuplicateTitleError(dto.title)

    @staticmethod
    def _ensure_valid(dto) -> None:
        result = BookValidator.validate(dto)
        if not result.is_valid:
            raise ValidationError(result.message)

    @staticmethod
    def _require_title(title: Optional[str]) -> None:
        if title is None or not title.strip():
            raise InvalidInputError("Title cannot be empty")
