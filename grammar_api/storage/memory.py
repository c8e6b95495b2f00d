"""In-memory user repository."""

import asyncio
from datetime import UTC, datetime

from loguru import logger

from ..exceptions import ConflictError
from ..types import UserRecord


class InMemoryUserRepository:
    """Dict-backed credential store for local development and tests."""

    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self._lock = asyncio.Lock()

    async def startup(self) -> None:
        """Initialize repository."""
        logger.info("In-memory user repository initialized")

    async def shutdown(self) -> None:
        """Cleanup repository."""
        self.users.clear()

    async def get(self, username: str) -> UserRecord | None:
        user = self.users.get(username)
        return dict(user) if user else None  # type: ignore[return-value]

    async def create(self, username: str, password: str) -> None:
        async with self._lock:
            if username in self.users:
                raise ConflictError()
            self.users[username] = {
                "username": username,
                "password": password,
                "created_at": datetime.now(UTC).isoformat(),
            }
