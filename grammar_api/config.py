"""Configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEFAULT_SECRET_KEY = "your-secret-key-change-in-production"  # noqa: S105


class Settings(BaseSettings):
    """Application settings with validation and constants."""

    host: str = "0.0.0.0"  # nosec B104 - Required for container deployment
    port: int = 3000
    log_level: str = "INFO"
    log_file: str | None = None

    environment: Literal["development", "production"] = "development"

    database_url: str = "sqlite+aiosqlite:///./data/users.db"

    # JWT settings
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = Field(default=60, gt=0)
    password_hash_rounds: int = Field(default=12, ge=4, le=31)

    # Upstream completion settings
    openai_api_key: str | None = None
    llm_model: str = "gpt-3.5-turbo"
    llm_api_base: str | None = None
    llm_timeout: int = Field(default=30, ge=1, le=300)
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1000

    cors_origins: list[str] = ["*"]

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Refuse to run in production with the placeholder signing secret."""
        if not self.secret_key:
            raise ValueError("GRAMMAR_SECRET_KEY must not be empty.")
        if self.environment == "production" and self.secret_key == DEFAULT_SECRET_KEY:
            raise ValueError(
                "Production environment requires a real signing secret. "
                "Please set the GRAMMAR_SECRET_KEY environment variable."
            )
        return self

    class Config:
        """Pydantic config."""

        env_prefix = "GRAMMAR_"
        env_file = ".env"
        extra = "ignore"


settings = Settings()
