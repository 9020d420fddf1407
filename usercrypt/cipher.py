"""
Authenticated text encryption using AES-256-GCM.

Encrypted data is a single base64 string:
    nonce (16 bytes) + ciphertext + auth tag (16 bytes)

There is no version byte; the layout must stay fixed so previously stored
data keeps decrypting.
"""

import os
import re
import base64
import binascii
import hashlib
import logging
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationFailed, InvalidEnvelope

logger = logging.getLogger(__name__)

HEX_KEY_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


@dataclass(frozen=True)
class EncryptedEnvelope:
    """Decoded form of an encrypted blob."""
    nonce: bytes
    ciphertext: bytes
    tag: bytes

    NONCE_LEN = 16
    TAG_LEN = 16

    def to_bytes(self) -> bytes:
        """Serialize as nonce + ciphertext + tag."""
        return self.nonce + self.ciphertext + self.tag

    def to_b64(self) -> str:
        """Serialize to the external base64 representation."""
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedEnvelope":
        """
        Split raw envelope bytes into their parts.

        Raises:
            InvalidEnvelope: If data is too short to hold a nonce and a tag
        """
        if len(data) < cls.NONCE_LEN + cls.TAG_LEN:
            raise InvalidEnvelope("Invalid encrypted data: too short")

        return cls(
            nonce=data[:cls.NONCE_LEN],
            ciphertext=data[cls.NONCE_LEN:len(data) - cls.TAG_LEN],
            tag=data[len(data) - cls.TAG_LEN:],
        )

    @classmethod
    def from_b64(cls, encoded: str) -> "EncryptedEnvelope":
        """
        Parse the external base64 representation.

        Raises:
            InvalidEnvelope: If the string is not valid base64 or is too short
        """
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidEnvelope(f"Invalid encrypted data: {e}") from e

        return cls.from_bytes(data)


class TextCipher:
    """Encrypts and decrypts text with AES-256-GCM under caller-supplied key material."""

    KEY_LEN = 32  # 256 bits

    @classmethod
    def normalize_key(cls, key_material: str) -> bytes:
        """
        Turn key material into exactly 32 raw key bytes.

        Checked in order:
        - 64 hex characters: hex-decoded
        - exactly 32 bytes when UTF-8 encoded: used as-is
        - anything else: SHA-256 digest

        Args:
            key_material: Hex key, raw 32-byte key, or any other string

        Returns:
            32-byte AES key
        """
        if HEX_KEY_PATTERN.fullmatch(key_material):
            return bytes.fromhex(key_material)

        raw = key_material.encode("utf-8")
        if len(raw) == cls.KEY_LEN:
            return raw

        return hashlib.sha256(raw).digest()

    @classmethod
    def encrypt(cls, plaintext: str, key_material: str) -> str:
        """
        Encrypt text.

        Args:
            plaintext: Text to encrypt (may be empty)
            key_material: Key, see normalize_key

        Returns:
            Base64 encoded nonce + ciphertext + tag
        """
        key = cls.normalize_key(key_material)
        nonce = os.urandom(EncryptedEnvelope.NONCE_LEN)

        aesgcm = AESGCM(key)
        # AESGCM appends the 16-byte tag to the ciphertext
        sealed = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)

        envelope = EncryptedEnvelope(
            nonce=nonce,
            ciphertext=sealed[:-EncryptedEnvelope.TAG_LEN],
            tag=sealed[-EncryptedEnvelope.TAG_LEN:],
        )
        logger.debug(f"Encrypted {len(envelope.ciphertext)} byte(s)")

        return envelope.to_b64()

    @classmethod
    def decrypt(cls, encrypted_data: str, key_material: str) -> str:
        """
        Decrypt text produced by encrypt.

        Args:
            encrypted_data: Base64 encoded nonce + ciphertext + tag
            key_material: Same key material used for encryption

        Returns:
            The original text

        Raises:
            InvalidEnvelope: If the data is malformed or truncated
            AuthenticationFailed: If the data was tampered with or the key is wrong
        """
        key = cls.normalize_key(key_material)
        envelope = EncryptedEnvelope.from_b64(encrypted_data)

        aesgcm = AESGCM(key)
        try:
            plaintext = aesgcm.decrypt(envelope.nonce, envelope.ciphertext + envelope.tag, None)
        except InvalidTag as e:
            logger.warning("Rejected encrypted data: authentication tag mismatch")
            raise AuthenticationFailed() from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEnvelope("Decrypted data is not valid UTF-8") from e
