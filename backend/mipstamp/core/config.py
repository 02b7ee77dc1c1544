"""
Application configuration using Pydantic Settings.
All configuration is loaded from environment variables with sensible defaults.
"""

import binascii
from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_RAW_KEY_SIZE = 32
# Signing keys may also be the 64-byte seed followed by the public key.
_SIGNING_KEY_SIZES = (_RAW_KEY_SIZE, 2 * _RAW_KEY_SIZE)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Key material configured here only supplies defaults to the stamping
    service and the CLI; the crypto primitives always take explicit keys.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Core Application Settings
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ==========================================================================
    # MIP Signing Configuration
    # ==========================================================================
    mip_signing_key: str = Field(
        default="",
        description=(
            "Hex-encoded raw Ed25519 private key (32-byte seed, or 64-byte seed "
            "followed by the public key) used to sign stamps. "
            "If empty, callers must pass a key explicitly."
        ),
    )
    mip_verify_key: str = Field(
        default="",
        description="Hex-encoded raw Ed25519 public key (32 bytes) used to verify chains",
    )
    mip_signing_key_id: str = Field(
        default="mip-signing-key-1",
        description="Key identifier reported alongside signed stamps for operator logs",
    )
    mip_strict_ordering: bool = Field(
        default=False,
        description="Reject chains containing stamps with identical created_at values",
    )

    @field_validator("mip_signing_key", "mip_verify_key")
    @classmethod
    def _validate_hex_key(cls, value: str, info: ValidationInfo) -> str:
        value = value.strip().lower()
        if not value:
            return value
        try:
            raw = binascii.unhexlify(value)
        except ValueError as exc:
            raise ValueError(f"key must be hex-encoded: {exc}") from exc
        sizes = _SIGNING_KEY_SIZES if info.field_name == "mip_signing_key" else (_RAW_KEY_SIZE,)
        if len(raw) not in sizes:
            expected = " or ".join(str(size) for size in sizes)
            raise ValueError(f"key must decode to {expected} bytes, got {len(raw)}")
        return value

    def signing_key_bytes(self) -> bytes | None:
        """Raw private key bytes, or ``None`` when not configured."""
        return bytes.fromhex(self.mip_signing_key) if self.mip_signing_key else None

    def verify_key_bytes(self) -> bytes | None:
        """Raw public key bytes, or ``None`` when not configured."""
        return bytes.fromhex(self.mip_verify_key) if self.mip_verify_key else None

    # ==========================================================================
    # Production Safety Checks
    # ==========================================================================

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Self:
        """Enforce critical settings in production/staging."""
        if self.environment in ("production", "staging"):
            if not self.mip_verify_key:
                raise ValueError(f"mip_verify_key must be set in {self.environment} environment")
            if self.debug:
                raise ValueError(f"debug must be False in {self.environment} environment")
        return self


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated environment variable parsing.
    """
    return Settings()
