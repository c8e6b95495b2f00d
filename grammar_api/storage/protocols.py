"""Storage protocol definitions using typing.Protocol."""

from typing import Protocol

from ..types import UserRecord


class UserRepository(Protocol):
    """Credential store protocol."""

    async def get(self, username: str) -> UserRecord | None:
        """Look up a user by username."""
        ...

    async def create(self, username: str, password: str) -> None:
        """Insert a user, raising ConflictError if the username is taken."""
        ...

    async def startup(self) -> None:
        """Initialize repository on startup."""
        ...

    async def shutdown(self) -> None:
        """Cleanup repository on shutdown."""
        ...
