"""SQL user repository implementation."""

from datetime import UTC, datetime
from pathlib import Path

import databases
import sqlalchemy as sa
from loguru import logger

from ..exceptions import ConflictError, StorageError
from ..types import UserRecord

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    username VARCHAR(255) PRIMARY KEY NOT NULL,
    password VARCHAR(255) NOT NULL,
    created_at TIMESTAMP NOT NULL
)
"""


class SQLUserRepository:
    """SQLite/PostgreSQL credential store using databases."""

    def __init__(self, database_url: str):
        """Initialize SQL repository.

        Args:
            database_url: Database connection URL.
        """
        self.database = databases.Database(database_url)
        self.metadata = sa.MetaData()

        self.users = sa.Table(
            "users",
            self.metadata,
            sa.Column("username", sa.String(255), primary_key=True),
            sa.Column("password", sa.String(255), nullable=False),
            sa.Column("created_at", sa.DateTime, nullable=False),
        )

    async def startup(self) -> None:
        """Open the connection pool and create tables."""
        self._ensure_sqlite_directory()
        await self.database.connect()
        await self.database.execute(CREATE_USERS_TABLE)
        logger.info("SQL user repository connected")

    async def shutdown(self) -> None:
        """Close database connection."""
        await self.database.disconnect()

    async def get(self, username: str) -> UserRecord | None:
        """Look up a user by username.

        Args:
            username: Exact username to match.

        Returns:
            User record, or None if no user has that name.
        """
        query = self.users.select().where(self.users.c.username == username)
        try:
            row = await self.database.fetch_one(query)
        except Exception as e:
            logger.error(f"Failed to load user: {e}")
            raise StorageError() from e

        if row is None:
            return None
        return {
            "username": row["username"],
            "password": row["password"],
            "created_at": row["created_at"].isoformat(),
        }

    async def create(self, username: str, password: str) -> None:
        """Insert a new user.

        Args:
            username: Unique username.
            password: Stored password value.

        Raises:
            ConflictError: If the username is already taken, including when a
                concurrent signup inserted it first.
            StorageError: On any other database failure.
        """
        query = self.users.insert().values(
            username=username,
            password=password,
            created_at=datetime.now(UTC).replace(tzinfo=None),
        )
        try:
            await self.database.execute(query)
        except Exception as e:
            if await self.get(username) is not None:
                raise ConflictError() from e
            logger.error(f"Failed to save user: {e}")
            raise StorageError() from e

    def _ensure_sqlite_directory(self) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        url = self.database.url
        if url.dialect == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
