from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from book_catalog.config import Settings
from book_catalog.database import TITLE_INDEX_NAME, check_connection, get_collection, initialize_database
from book_catalog.errors import DuplicateTitleError, StorageError

pytestmark = pytest.mark.asyncio


async def test_check_connection_pings_admin():
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})

    await check_connection(client)

    client.admin.command.assert_awaited_once_with("ping")


async def test_check_connection_failure_is_storage_error():
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("localhost:27017: refused"))

    with pytest.raises(StorageError, match="Cannot connect to MongoDB"):
        await check_connection(client)


async def test_initialize_database_creates_unique_title_index(collection):
    await initialize_database(collection)

    assert collection.indexes == [{"keys": [("Title", 1)], "unique": True, "name": TITLE_INDEX_NAME}]


async def test_unique_index_rejects_concurrent_duplicate(repository, collection, dune_dto):
    await initialize_database(collection)
    await repository.insert(dune_dto.to_book())

    # Second process got past the service check before the first insert landed
    with pytest.raises(DuplicateTitleError):
        await repository.insert(dune_dto.to_book())


async def test_initialize_database_disabled(collection):
    await initialize_database(collection, unique_titles=False)
    assert collection.indexes == []


async def test_existing_duplicates_only_warn(caplog):
    collection = MagicMock()
    collection.create_index = AsyncMock(side_effect=OperationFailure("E11000 duplicate key", 11000))

    await initialize_database(collection)

    assert "Could not create unique Title index" in caplog.text


async def test_get_collection_uses_settings():
    client = MagicMock()
    get_collection(client, Settings(mongodb_database="Library", mongodb_collection="Shelf"))
    client.__getitem__.assert_called_once_with("Library")
    client.__getitem__.return_value.__getitem__.assert_called_once_with("Shelf")
