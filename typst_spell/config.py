"""Configuration loaded from the environment and an optional .env file."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Style = Literal["pretty", "plain", "json"]


class Settings(BaseSettings):
    """Runtime defaults for typst-spell.

    Every field can be set with a ``TYPST_SPELL_`` prefixed environment
    variable (``TYPST_SPELL_CONTEXT_LENGTH=40``) or in a ``.env`` file.
    List values are given as JSON (``TYPST_SPELL_LANGUAGE='["en", "de"]'``).
    Command-line options take precedence over these values.
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPST_SPELL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    language: list[str] = Field(default_factory=lambda: ["en"])
    style: Style = "pretty"
    context_length: int = Field(default=80, ge=0)
    delay: float = Field(default=0.1, gt=0)
    max_suggestions: int = Field(default=5, ge=1)
    distance: Literal[1, 2] = 2
    words_file: str | None = None
    log_file: str | None = None

    @field_validator("language")
    @classmethod
    def strip_languages(cls, value: list[str]) -> list[str]:
        """Strip language codes and reject empty ones."""
        languages = [code.strip() for code in value]
        if not languages or not all(languages):
            msg = "language must contain at least one non-empty language code"
            raise ValueError(msg)
        return languages

    @field_validator("words_file", "log_file")
    @classmethod
    def blank_path_is_none(cls, value: str | None) -> str | None:
        """Treat an empty path setting as unset."""
        if value is None or not value.strip():
            return None
        return value.strip()


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
