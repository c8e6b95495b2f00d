"""Grammar Checker API - user accounts and LLM-backed grammar checks."""

from .api import app
from .auth import AuthGateway
from .grammar import GrammarProxy
from .tokens import TokenCodec

__version__ = "1.0.0"

__all__ = [
    "AuthGateway",
    "GrammarProxy",
    "TokenCodec",
    "app",
]
