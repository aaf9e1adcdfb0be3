import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    return int(raw) if raw else None


@dataclass
class Settings:
    # MongoDB Settings
    mongodb_url: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    mongodb_database: str = os.getenv("MONGODB_DATABASE", "BookCatalog")
    mongodb_collection: str = os.getenv("MONGODB_COLLECTION", "Books")
    # None leaves the driver default in place
    mongodb_server_selection_timeout_ms: Optional[int] = _optional_int("MONGODB_SERVER_SELECTION_TIMEOUT_MS")

    # Enforce title uniqueness with a unique index in addition to the service check
    unique_titles: bool = os.getenv("BOOK_CATALOG_UNIQUE_TITLES", "True").lower() in ("true", "1", "yes")

    # Application Settings
    app_name: str = os.getenv("APP_NAME", "MongoDB Book Management System")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: str = settings.log_level) -> None:
    """Route all log records through a single rich handler on the root logger."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        root.setLevel(level.upper())
        return
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )
