"""User signup, login and bearer-token authentication."""

import asyncio
import base64
import hashlib

import bcrypt
from loguru import logger

from .exceptions import ConflictError, MissingTokenError, UnauthorizedError, ValidationError
from .storage import UserRepository
from .tokens import TokenCodec
from .types import AuthResult


def _prehash(password: str) -> bytes:
    """SHA-256 digest of the whole password. bcrypt reads at most 72 bytes of input."""
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_prehash(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def mask_username(username: str) -> str:
    """Shorten a username for log lines."""
    return username[:8] + "..." if len(username) > 8 else username


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization:
        raise MissingTokenError()

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MissingTokenError()
    return token


class AuthGateway:
    """Validates credentials against the store and issues bearer tokens."""

    def __init__(
        self,
        repository: UserRepository,
        token_codec: TokenCodec,
        hash_rounds: int = 12,
    ) -> None:
        """Initialize with injected dependencies."""
        self.repository = repository
        self.token_codec = token_codec
        self.hash_rounds = hash_rounds

    async def signup(self, username: str | None, password: str | None) -> AuthResult:
        """Register a new user and issue a token.

        Raises:
            ValidationError: If username or password is missing.
            ConflictError: If the username is already taken.
        """
        username, password = self._require_credentials(username, password)

        if await self.repository.get(username) is not None:
            logger.info("Signup rejected, username taken", user=mask_username(username))
            raise ConflictError("Username already exists")

        password_hash = await asyncio.to_thread(hash_password, password, self.hash_rounds)
        await self.repository.create(username, password_hash)
        logger.info("User signed up", user=mask_username(username))

        return self._issue(username)

    async def login(self, username: str | None, password: str | None) -> AuthResult:
        """Check credentials and issue a token.

        Unknown users and wrong passwords fail with the same error.

        Raises:
            ValidationError: If username or password is missing.
            UnauthorizedError: If the credentials do not match a stored user.
        """
        username, password = self._require_credentials(username, password)

        user = await self.repository.get(username)
        if user is None or not await asyncio.to_thread(
            verify_password, password, user.get("password", "")
        ):
            logger.info("Login failed", user=mask_username(username))
            raise UnauthorizedError("Invalid username or password")

        logger.info("User logged in", user=mask_username(username))
        return self._issue(username)

    def authenticate(self, authorization: str | None) -> str:
        """Resolve the username behind an Authorization header.

        Raises:
            MissingTokenError: If no bearer token is present.
            InvalidTokenError: If the token does not verify.
            TokenExpiredError: If the token is expired.
        """
        return self.token_codec.verify(parse_bearer(authorization))

    def logout(self) -> None:
        """Acknowledge a logout.

        Tokens are not revoked server-side and stay valid until they expire.
        """
        logger.debug("Logout acknowledged")

    def _issue(self, username: str) -> AuthResult:
        return {"token": self.token_codec.issue(username), "user": {"username": username}}

    @staticmethod
    def _require_credentials(username: str | None, password: str | None) -> tuple[str, str]:
        if not username or not password:
            raise ValidationError("Username and password are required")
        return username, password
