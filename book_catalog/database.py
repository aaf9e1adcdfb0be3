"""MongoDB connection handling for the book catalog.

The client is created once per run, checked with a ``ping`` before the menu
starts, and closed on exit. Index setup happens here as well so the
repository only deals with documents.
"""
import logging
from typing import Optional

import motor.motor_asyncio
from pymongo import ASCENDING
from pymongo.errors import OperationFailure, PyMongoError

from book_catalog.config import Settings, settings as default_settings
from book_catalog.errors import StorageError

logger = logging.getLogger(__name__)

TITLE_INDEX_NAME = "title_unique"


def create_client(settings: Optional[Settings] = None) -> motor.motor_asyncio.AsyncIOMotorClient:
    """Build a motor client from the configured endpoint."""
    settings = settings or default_settings
    options = {}
    if settings.mongodb_server_selection_timeout_ms is not None:
        options["serverSelectionTimeoutMS"] = settings.mongodb_server_selection_timeout_ms
    return motor.motor_asyncio.AsyncIOMotorClient(settings.mongodb_url, **options)


def get_collection(client, settings: Optional[Settings] = None):
    settings = settings or default_settings
    return client[settings.mongodb_database][settings.mongodb_collection]


async def check_connection(client) -> None:
    """Ping the server; raise StorageError when it cannot be reached."""
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        logger.error(f"MongoDB is unreachable: {e}")
        raise StorageError(f"Cannot connect to MongoDB: {e}") from e


async def initialize_database(collection, unique_titles: bool = True) -> None:
    """Create the indexes the catalog relies on.

    A unique Title index closes the check-then-insert race between separate
    processes. Collections that already hold duplicate titles cannot get the
    index; in that case uniqueness stays enforced by the service only.
    """
    if not unique_titles:
        return
    try:
        await collection.create_index([("Title", ASCENDING)], unique=True, name=TITLE_INDEX_NAME)
    except OperationFailure as e:
        logger.warning(f"Could not create unique Title index, existing duplicates? {e}")
    except PyMongoError as e:
        logger.error(f"Index setup failed: {e}")
        raise StorageError(f"Index setup failed: {e}") from e
