import copy
from datetime import date
from types import SimpleNamespace

import bson
import pytest
from pymongo.errors import DuplicateKeyError

from book_catalog.book import CreateBookDto
from book_catalog.book_service import BookService
from book_catalog.mapper import BookMapper
from book_catalog.repository import BookRepository


class FakeCursor:
    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        return self._documents[:length] if length else list(self._documents)


class FakeCollection:
    """In-memory stand-in for a motor collection.

    Documents are passed through bson.encode/decode so anything MongoDB could
    not store (e.g. a bare ``date``) fails here as well.
    """

    def __init__(self):
        self.documents = {}
        self.unique_fields = set()
        self.indexes = []

    @staticmethod
    def _roundtrip(document):
        return bson.decode(bson.encode(document))

    @staticmethod
    def _matches(document, query):
        return all(document.get(k) == v for k, v in (query or {}).items())

    def _check_unique(self, document, skip_id=None):
        for field in self.unique_fields:
            for other in self.documents.values():
                if other["_id"] != skip_id and field in document and other.get(field) == document[field]:
                    raise DuplicateKeyError(
                        f"E11000 duplicate key error dup key: {{ {field}: {document[field]!r} }}",
                        11000,
                        {"keyValue": {field: document[field]}},
                    )

    async def insert_one(self, document):
        doc = self._roundtrip(document)
        if doc["_id"] in self.documents:
            raise DuplicateKeyError("E11000 duplicate key error", 11000, {"keyValue": {"_id": doc["_id"]}})
        self._check_unique(doc)
        self.documents[doc["_id"]] = doc
        return SimpleNamespace(inserted_id=doc["_id"], acknowledged=True)

    def find(self, query=None):
        return FakeCursor([copy.deepcopy(d) for d in self.documents.values() if self._matches(d, query)])

    async def find_one(self, query):
        for doc in self.documents.values():
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def update_one(self, query, update):
        changes = self._roundtrip(update["$set"])
        for doc in self.documents.values():
            if self._matches(doc, query):
                self._check_unique(changes, skip_id=doc["_id"])
                modified = any(doc.get(k) != v for k, v in changes.items())
                doc.update(changes)
                return SimpleNamespace(matched_count=1, modified_count=int(modified))
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for key, doc in list(self.documents.items()):
            if self._matches(doc, query):
                del self.documents[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    async def count_documents(self, query, limit=None):
        count = sum(1 for d in self.documents.values() if self._matches(d, query))
        return min(count, limit) if limit else count

    async def create_index(self, keys, unique=False, name=None):
        self.indexes.append({"keys": keys, "unique": unique, "name": name})
        if unique:
            self.unique_fields.update(field for field, _ in keys)
        return name


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def repository(collection):
    return BookRepository(collection)


@pytest.fixture
def service(repository):
    return BookService(repository)


@pytest.fixture
def mapper():
    return BookMapper()


@pytest.fixture
def dune_dto():
    return CreateBookDto(
        title="Dune",
        author="Frank Herbert",
        description="Sci-fi classic",
        page_count=412,
        publish_date=date(1965, 8, 1),
    )
