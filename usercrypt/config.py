"""
Configuration for the per-user encryption service.
"""

import os
from dataclasses import dataclass, field

from .errors import MissingConfiguration

# Application version - update this for each release
VERSION = "1.0.0"


@dataclass(frozen=True)
class Config:
    """Application configuration, read from the environment once per instance."""

    # Server settings
    HOST: str = field(default_factory=lambda: os.getenv("USERCRYPT_HOST", "127.0.0.1"))
    PORT: int = field(default_factory=lambda: int(os.getenv("USERCRYPT_PORT", "18430")))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("USERCRYPT_LOG_LEVEL", "INFO"))

    # Cryptographic settings - no default, a missing secret must never
    # silently fall back to a known value
    ENCRYPTION_SECRET: str = field(default_factory=lambda: os.getenv("ENCRYPTION_SECRET", ""))

    @property
    def has_encryption_secret(self) -> bool:
        """Check if the server secret for key derivation is configured."""
        return bool(self.ENCRYPTION_SECRET)

    def require_encryption_secret(self) -> str:
        """
        Get the server secret for key derivation.

        Raises:
            MissingConfiguration: If ENCRYPTION_SECRET is unset or empty
        """
        if not self.ENCRYPTION_SECRET:
            raise MissingConfiguration("ENCRYPTION_SECRET")
        return self.ENCRYPTION_SECRET

    def __repr__(self) -> str:
        secret = "***" if self.ENCRYPTION_SECRET else "<unset>"
        return (
            f"Config(HOST={self.HOST!r}, PORT={self.PORT}, "
            f"LOG_LEVEL={self.LOG_LEVEL!r}, ENCRYPTION_SECRET={secret})"
        )


# Global config instance
config = Config()
