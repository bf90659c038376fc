"""Configuration management using Pydantic Settings."""

import os
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

CredentialPlacement = Literal["header", "bearer", "query"]


class ClientConfig(BaseSettings):
    """
    Client settings from explicit values, environment, or .env file.

    Environment variables use the ``GEMINI_`` prefix (``GEMINI_API_KEY``,
    ``GEMINI_MODEL``, ...). ``GOOGLE_API_KEY`` is accepted as a fallback key.

    Instances are frozen. Use ``with_overrides`` to derive a new configuration
    instead of mutating one that in-flight requests may be reading.
    """

    api_key: str | None = Field(default_factory=lambda: os.environ.get("GOOGLE_API_KEY"))
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    credential_placement: CredentialPlacement = "header"
    timeout: float = Field(60.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def require_api_key(self) -> str:
        """
        Return the API key or fail before any request is built.

        Raises:
            ConfigurationError: If no key was passed and none is in the environment
        """
        if not self.api_key:
            raise ConfigurationError(
                "Missing GEMINI_API_KEY; pass api_key explicitly or set the environment variable."
            )
        return self.api_key

    def with_overrides(self, **changes: Any) -> "ClientConfig":
        """Return a new configuration with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    def credential_headers(self) -> dict[str, str]:
        """Headers that carry the credential for the configured placement."""
        api_key = self.require_api_key()
        if self.credential_placement == "header":
            return {"x-goog-api-key": api_key}
        if self.credential_placement == "bearer":
            return {"Authorization": f"Bearer {api_key}"}
        return {}

    def credential_params(self) -> dict[str, str]:
        """Query parameters that carry the credential for the configured placement."""
        api_key = self.require_api_key()
        if self.credential_placement == "query":
            return {"key": api_key}
        return {}


@lru_cache
def get_config() -> ClientConfig:
    """Get cached configuration instance."""
    return ClientConfig()
