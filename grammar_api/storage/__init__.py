"""Storage module with factory for creating the credential store."""

from urllib.parse import urlparse

from loguru import logger

from ..config import settings
from .memory import InMemoryUserRepository
from .protocols import UserRepository
from .sql import SQLUserRepository


def create_repository(database_url: str | None = None) -> UserRepository:
    """Create repository instance based on database URL.

    Args:
        database_url: Database URL. Uses settings if not provided.

    Returns:
        Repository instance.
    """
    url = database_url or settings.database_url
    parsed = urlparse(url)

    if parsed.scheme == "memory":
        logger.info("Creating in-memory user repository")
        return InMemoryUserRepository()
    logger.info(f"Creating SQL user repository ({parsed.scheme})")
    return SQLUserRepository(url)


__all__ = [
    "InMemoryUserRepository",
    "SQLUserRepository",
    "UserRepository",
    "create_repository",
]
