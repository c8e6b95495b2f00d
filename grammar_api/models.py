"""Request and response models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, field_validator


class Credentials(BaseModel):
    """Signup or login body. Presence is checked by the auth gateway."""

    username: str | None = None
    password: str | None = None


class GrammarCheckRequest(BaseModel):
    """Grammar check body."""

    text: str | None = None


class ErrorEntry(BaseModel):
    """A single correction reported by the model."""

    word: str
    suggestion: str
    type: Literal["grammar", "spelling"]
    position: str

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> object:
        """Accept any casing of the error type."""
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("position", mode="before")
    @classmethod
    def coerce_position(cls, value: object) -> object:
        """Models often report positions as numbers."""
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        return value


class GrammarCheckResult(BaseModel):
    """Normalized outcome of a grammar check."""

    correctedText: str  # noqa: N815
    errors: list[ErrorEntry]
    originalText: str  # noqa: N815


class UserInfo(BaseModel):
    username: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class AuthResponse(MessageResponse):
    token: str
    user: UserInfo


class GrammarCheckResponse(GrammarCheckResult):
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
