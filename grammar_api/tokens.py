"""Signed, time-limited bearer tokens using JWT."""

import time
from collections.abc import Callable
from datetime import timedelta

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from .config import Settings
from .exceptions import InvalidTokenError, TokenExpiredError


def has_canonical_signature(token: str) -> bool:
    """Check the signature segment is the one base64url spelling of its bytes.

    The decoder ignores the unused low bits of the final character, so several
    spellings of one signature would otherwise verify.
    """
    try:
        signature = token.rsplit(".", 1)[1].encode("ascii")
        return base64url_encode(base64url_decode(signature)) == signature
    except (IndexError, ValueError):
        return False


class TokenCodec:
    """Issue and verify HS256 JWTs that bind a username."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=1),
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize with explicit signing configuration.

        Args:
            secret_key: Service signing secret.
            algorithm: JWT signing algorithm.
            expires_in: Token lifetime.
            clock: Returns the current time as epoch seconds.
        """
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_in = expires_in
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        """Build a codec from application settings."""
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.jwt_algorithm,
            expires_in=timedelta(minutes=settings.jwt_expiration_minutes),
        )

    def issue(self, username: str) -> str:
        """Create a token for a user.

        Args:
            username: The username to encode in the token.

        Returns:
            Encoded JWT token as string.
        """
        issued_at = int(self._clock())
        payload = {
            "sub": username,
            "iat": issued_at,
            "exp": issued_at + int(self.expires_in.total_seconds()),
        }
        token: str = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token

    def verify(self, token: str) -> str:
        """Extract the username from a valid token.

        Args:
            token: Encoded JWT.

        Returns:
            Username embedded in the token.

        Raises:
            InvalidTokenError: If the signature or claims do not verify.
            TokenExpiredError: If the current time is at or past the expiry.
        """
        if not has_canonical_signature(token):
            raise InvalidTokenError()

        try:
            # Expiry is checked below so that a token is rejected at exactly ``exp``.
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidTokenError() from e

        username = payload.get("sub")
        expires_at = payload.get("exp")
        if not isinstance(username, str) or not username or not isinstance(expires_at, int):
            raise InvalidTokenError()

        if self._clock() >= expires_at:
            raise TokenExpiredError()

        return username
