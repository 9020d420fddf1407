"""
Per-user encryption layer.

Handles:
- Key derivation from a user identifier and server secret (PBKDF2-SHA256)
- Text encryption (AES-256-GCM)
- Encryption of user records at rest
"""

from .errors import (
    UserCryptoError,
    InvalidInput,
    MissingConfiguration,
    InvalidEnvelope,
    AuthenticationFailed,
)
from .config import Config
from .key_derivation import KeyDeriver
from .cipher import TextCipher, EncryptedEnvelope
from .user_data import UserDataCipher

__all__ = [
    "Config",
    "KeyDeriver",
    "TextCipher",
    "EncryptedEnvelope",
    "UserDataCipher",
    "UserCryptoError",
    "InvalidInput",
    "MissingConfiguration",
    "InvalidEnvelope",
    "AuthenticationFailed",
]
