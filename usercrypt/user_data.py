"""
Encryption of user data at rest with keys derived per user.
"""

import logging
from typing import Any, Iterable, Optional

from .cipher import TextCipher
from .config import Config
from .key_derivation import KeyDeriver

logger = logging.getLogger(__name__)


class UserDataCipher:
    """Encrypts and decrypts a user's data under that user's derived key."""

    def __init__(self, settings: Optional[Config] = None):
        """
        Initialize the user data cipher.

        Args:
            settings: Configuration holding ENCRYPTION_SECRET.
                Defaults to the process-wide config.
        """
        self.settings = settings

    def _user_key(self, user_id: str) -> str:
        return KeyDeriver.derive_from_environment(user_id, self.settings)

    def encrypt_for_user(self, user_id: str, plaintext: str) -> str:
        """Encrypt text for a user. Returns the base64 envelope."""
        return TextCipher.encrypt(plaintext, self._user_key(user_id))

    def decrypt_for_user(self, user_id: str, encrypted_data: str) -> str:
        """Decrypt text previously encrypted for the same user."""
        return TextCipher.decrypt(encrypted_data, self._user_key(user_id))

    def encrypt_fields(self, user_id: str, record: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
        """
        Encrypt selected string fields of a record.

        The key is derived once for the whole record. Fields that are
        missing or None are left as they are.

        Args:
            user_id: Owner of the record
            record: Record to encrypt (not modified)
            fields: Names of the fields to encrypt

        Returns:
            A copy of the record with the named fields encrypted
        """
        key = self._user_key(user_id)
        result = dict(record)
        count = 0
        for name in fields:
            if result.get(name) is None:
                continue
            if not isinstance(result[name], str):
                raise TypeError(f"Field '{name}' must be a string, got {type(result[name]).__name__}")
            result[name] = TextCipher.encrypt(result[name], key)
            count += 1

        logger.debug(f"Encrypted {count} field(s)")
        return result

    def decrypt_fields(self, user_id: str, record: dict[str, Any], fields: Iterable[str]) -> dict[str, Any]:
        """
        Decrypt selected fields of a record produced by encrypt_fields.

        Returns:
            A copy of the record with the named fields decrypted
        """
        key = self._user_key(user_id)
        result = dict(record)
        for name in fields:
            if result.get(name) is None:
                continue
            if not isinstance(result[name], str):
                raise TypeError(f"Field '{name}' must be a string, got {type(result[name]).__name__}")
            result[name] = TextCipher.decrypt(result[name], key)
        return result
