"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables
  - Fall back to .env file
  - Validate types and constraints at startup

Only AppSettings is a BaseSettings instance. Sub-settings are plain
BaseModel classes populated through env_nested_delimiter="__", so
DECODER__STRICT maps to decoder.strict and KEYSTORE__CREATION_TIME maps to
keystore.creation_time.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jks_truststore.adapters.pem_decoder import DEFAULT_ACCEPTED_BLOCK_TYPES

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class DecoderSettings(BaseModel):
    """
    PEM decoding policy.

    The defaults reproduce the historical behavior: "CERTIFICATE" and
    "EC PRIVATE KEY" blocks are accepted, and a block of any other type is
    reported but still included. strict=True excludes such blocks and makes
    any decode problem fail the generation.
    """

    strict: bool = Field(default=False, description="Exclude mistyped blocks and fail on decode errors")
    accepted_block_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACCEPTED_BLOCK_TYPES),
        description="PEM block types accepted as trusted-certificate content",
    )

    @field_validator("accepted_block_types")
    @classmethod
    def normalize_block_types(cls, value: list[str]) -> list[str]:
        """Upper-case and trim each type; reject an empty list."""
        normalized = [v.strip().upper() for v in value if v.strip()]
        if not normalized:
            raise ValueError("At least one accepted PEM block type is required")
        return normalized


class KeystoreSettings(BaseModel):
    """
    Keystore serialization settings.

    JKS embeds each entry's creation time in the byte stream. Setting
    creation_time pins it, so identical inputs reproduce the same `jks`
    value and identifier across runs.
    """

    creation_time: datetime | None = Field(
        default=None,
        description="Fixed entry creation time (ISO 8601); system clock when unset",
    )

    @field_validator("creation_time")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    decoder: DecoderSettings = Field(default_factory=lambda: DecoderSettings())
    keystore: KeystoreSettings = Field(default_factory=lambda: KeystoreSettings())

    log_level: str = Field(default="INFO")
