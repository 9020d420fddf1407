"""
Error kinds raised by the per-user encryption layer.

None of these are retried internally; the caller decides what to do.
"""


class UserCryptoError(Exception):
    """Base class for all errors raised by usercrypt."""


class InvalidInput(UserCryptoError, ValueError):
    """An argument to key derivation was empty."""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"{argument} is required for key derivation")


class MissingConfiguration(UserCryptoError):
    """A required setting is absent from the process configuration."""

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"{setting} environment variable is not set")


class InvalidEnvelope(UserCryptoError, ValueError):
    """Encrypted data is malformed, truncated or not valid base64."""


class AuthenticationFailed(UserCryptoError):
    """Tag verification failed (tampered data or wrong key)."""

    def __init__(self):
        super().__init__("Decryption failed: data could not be authenticated")
