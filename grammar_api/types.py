"""Type definitions for the Grammar Checker API."""

from typing_extensions import TypedDict


class TokenUsage(TypedDict, total=False):
    """Token usage information from LLM API."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class UserRecord(TypedDict, total=False):
    """Database record for a user."""

    username: str
    password: str
    created_at: str


class AuthResult(TypedDict):
    """Result of a successful signup or login."""

    token: str
    user: dict[str, str]
