"""
Per-user key derivation using PBKDF2-HMAC-SHA256.

The server secret is the password and the user identifier is the salt, so a
user's key is never stored; it is recomputed on demand.
"""

import hashlib
import logging
from typing import Optional

from . import config as settings_module
from .config import Config
from .errors import InvalidInput

logger = logging.getLogger(__name__)


class KeyDeriver:
    """Derives 256-bit user keys from a user identifier and a server secret."""
    
    ITERATIONS = 100_000
    KEY_LEN = 32  # 256 bits for AES-256
    DIGEST = "sha256"
    
    @classmethod
    def derive(cls, user_id: str, server_secret: str) -> str:
        """
        Derive a user's encryption key.
        
        Args:
            user_id: Stable, unique user identifier (e.g. an OAuth 'sub' claim)
            server_secret: Server-side secret shared by all users
            
        Returns:
            64-character lowercase hex string (256-bit key)
            
        Raises:
            InvalidInput: If either argument is empty
        """
        if not user_id:
            raise InvalidInput("user_id")
        if not server_secret:
            raise InvalidInput("server_secret")
        
        derived_key = hashlib.pbkdf2_hmac(
            cls.DIGEST,
            server_secret.encode("utf-8"),
            user_id.encode("utf-8"),
            cls.ITERATIONS,
            dklen=cls.KEY_LEN,
        )
        logger.debug(f"Derived {cls.KEY_LEN}-byte user key ({cls.ITERATIONS} iterations)")
        
        return derived_key.hex()
    
    @classmethod
    def derive_from_environment(cls, user_id: str, settings: Optional[Config] = None) -> str:
        """
        Derive a user's key with the server secret taken from configuration.
        
        Args:
            user_id: Stable, unique user identifier
            settings: Configuration to read ENCRYPTION_SECRET from.
                Defaults to the process-wide config.
            
        Returns:
            64-character lowercase hex string (256-bit key)
            
        Raises:
            MissingConfiguration: If ENCRYPTION_SECRET is not set
        """
        if settings is None:
            settings = settings_module.config
        
        server_secret = settings.require_encryption_secret()
        return cls.derive(user_id, server_secret)
