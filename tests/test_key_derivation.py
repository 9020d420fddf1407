"""
Tests for per-user key derivation.

Run with: pytest tests/test_key_derivation.py -v
"""

import hashlib
import re

import pytest

import usercrypt.config
from usercrypt.config import Config
from usercrypt import KeyDeriver, InvalidInput, MissingConfiguration


HEX_64 = re.compile(r"[0-9a-f]{64}")


# =============================================================================
# derive
# =============================================================================

class TestDerive:
    """KeyDeriver.derive"""

    def test_returns_64_char_lowercase_hex(self):
        key = KeyDeriver.derive("google-sub-123", "server-secret")

        assert len(key) == 64
        assert HEX_64.fullmatch(key)

    def test_is_deterministic(self):
        user_id = "123456789012345678901"

        assert KeyDeriver.derive(user_id, "my-secret") == KeyDeriver.derive(user_id, "my-secret")

    def test_matches_pbkdf2_sha256(self):
        expected = hashlib.pbkdf2_hmac("sha256", b"my-secret", b"user-1", 100_000, dklen=32).hex()

        assert KeyDeriver.derive("user-1", "my-secret") == expected

    def test_different_user_ids_give_different_keys(self):
        keys = {KeyDeriver.derive(f"user-{i}", "same-secret") for i in range(5)}

        assert len(keys) == 5

    def test_different_secrets_give_different_keys(self):
        assert KeyDeriver.derive("same-user", "secret-1") != KeyDeriver.derive("same-user", "secret-2")

    def test_unicode_inputs(self):
        key = KeyDeriver.derive("utilisateur-é", "sécret-日本")

        assert HEX_64.fullmatch(key)

    def test_empty_user_id_rejected(self):
        with pytest.raises(InvalidInput) as exc_info:
            KeyDeriver.derive("", "secret")

        assert exc_info.value.argument == "user_id"

    def test_empty_secret_rejected(self):
        with pytest.raises(InvalidInput) as exc_info:
            KeyDeriver.derive("sub", "")

        assert exc_info.value.argument == "server_secret"

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            KeyDeriver.derive("", "")


# =============================================================================
# derive_from_environment
# =============================================================================

class TestDeriveFromEnvironment:
    """KeyDeriver.derive_from_environment"""

    def test_uses_configured_secret(self, settings):
        assert KeyDeriver.derive_from_environment("user-123", settings) == KeyDeriver.derive(
            "user-123", "test-server-secret"
        )

    def test_missing_secret_names_setting(self, settings_without_secret):
        with pytest.raises(MissingConfiguration, match="ENCRYPTION_SECRET") as exc_info:
            KeyDeriver.derive_from_environment("user-123", settings_without_secret)

        assert exc_info.value.setting == "ENCRYPTION_SECRET"

    def test_empty_secret_treated_as_missing(self, monkeypatch):
        monkeypatch.setenv("ENCRYPTION_SECRET", "")

        with pytest.raises(MissingConfiguration):
            KeyDeriver.derive_from_environment("user-123", Config())

    def test_environment_read_once_per_config(self, monkeypatch):
        monkeypatch.setenv("ENCRYPTION_SECRET", "first")
        settings = Config()
        monkeypatch.setenv("ENCRYPTION_SECRET", "second")

        assert KeyDeriver.derive_from_environment("user", settings) == KeyDeriver.derive("user", "first")

    def test_defaults_to_process_config(self, monkeypatch):
        monkeypatch.setattr(usercrypt.config, "config", Config(ENCRYPTION_SECRET="process-secret"))

        assert KeyDeriver.derive_from_environment("user") == KeyDeriver.derive("user", "process-secret")

    def test_empty_user_id_rejected(self, settings):
        with pytest.raises(InvalidInput):
            KeyDeriver.derive_from_environment("", settings)
