"""
Tests for secret generation, strength validation and SecretConfig.
"""
import re
import pytest
from pydantic import ValidationError

from navigator_secret.provider import (
    SecretConfig,
    Secret,
    SecretOrigin,
    SecretLocation,
    MigrationContext,
    generate_secret,
    validate_secret_strength,
)
from navigator_secret.conf import ENV_SESSION_SECRET, ENV_SECRETKEY_PATH

HEX_64 = re.compile(r"^[0-9a-f]{64}$")


class TestGenerateSecret:
    """Tests for generate_secret."""

    def test_secret_is_64_lowercase_hex(self):
        assert HEX_64.match(generate_secret())

    def test_secrets_are_distinct(self):
        samples = {generate_secret() for _ in range(200)}
        assert len(samples) == 200

    def test_uses_system_csprng(self, monkeypatch):
        """Secrets come from the secrets module, not from random."""
        calls = []

        def fake_token_bytes(n):
            calls.append(n)
            return bytes(range(n))

        monkeypatch.setattr(
            "navigator_secret.provider.config.secrets.token_bytes", fake_token_bytes
        )
        assert generate_secret() == bytes(range(32)).hex()
        assert calls == [32]


class TestSecretStrength:
    """Strength is a length check on the string form."""

    @pytest.mark.parametrize("length", [0, 1, 16, 31])
    def test_short_secrets_rejected(self, length):
        assert validate_secret_strength("x" * length) is False

    @pytest.mark.parametrize("length", [32, 33, 64, 128])
    def test_long_secrets_accepted(self, length):
        assert validate_secret_strength("x" * length) is True

    def test_boundary_counts_characters_not_bytes(self):
        # 32 hex characters decode to only 16 bytes but still pass.
        assert validate_secret_strength("ab" * 16) is True

    def test_secret_is_secure_property(self):
        assert Secret(value="x" * 32, origin=SecretOrigin.ENVIRONMENT).is_secure
        assert not Secret(value="x" * 31, origin=SecretOrigin.ENVIRONMENT).is_secure


class TestSecretModel:
    """Tests for Secret, SecretLocation and MigrationContext."""

    def test_secret_is_immutable(self, active_secret):
        with pytest.raises(ValidationError):
            active_secret.value = "c" * 64

    def test_secret_value_not_in_repr(self, active_secret):
        assert "a" * 64 not in repr(active_secret)
        assert "a" * 64 not in str(active_secret)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValidationError):
            Secret(value="", origin=SecretOrigin.ENVIRONMENT)

    def test_same_as_ignores_origin(self):
        a = Secret(value="x" * 40, origin=SecretOrigin.FILESYSTEM)
        b = Secret(value="x" * 40, origin=SecretOrigin.GENERATED)
        assert a.same_as(b)
        assert not a.same_as(None)

    def test_location_path(self, tmp_path):
        location = SecretLocation(
            backend=SecretOrigin.FILESYSTEM, identifier=str(tmp_path)
        )
        assert location.path == tmp_path

    def test_remote_location_has_no_path(self):
        location = SecretLocation(backend=SecretOrigin.REMOTE, identifier="name")
        with pytest.raises(ValueError):
            location.path

    def test_context_candidates(self, active_secret, previous_secret):
        context = MigrationContext(active=active_secret, previous=previous_secret)
        assert context.has_previous is True
        assert context.candidates() == [active_secret, previous_secret]

    def test_context_without_previous(self, active_secret):
        context = MigrationContext(active=active_secret)
        assert context.has_previous is False
        assert context.candidates() == [active_secret]

    def test_context_rejects_identical_previous(self, active_secret):
        previous = Secret(value=active_secret.value, origin=SecretOrigin.FILESYSTEM)
        with pytest.raises(ValidationError):
            MigrationContext(active=active_secret, previous=previous)


class TestSecretConfig:
    """Tests for SecretConfig."""

    def test_defaults(self, secret_dir):
        config = SecretConfig(secret_dir=secret_dir)
        assert config.explicit_secret is None
        assert config.secret_name == "FlowiseSessionSecret"
        assert config.storage_type == "local"
        assert config.remote_requested is False
        assert config.secret_path == secret_dir / "session.secret"
        assert config.previous_path == secret_dir / "session.secret.previous"

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_SESSION_SECRET, "s" * 40)
        monkeypatch.setenv(ENV_SECRETKEY_PATH, str(tmp_path))
        monkeypatch.setenv("SECRETKEY_AWS_SESSION_SECRET", "MySecret")
        config = SecretConfig.from_env()
        assert config.explicit_secret == "s" * 40
        assert config.secret_dir == tmp_path
        assert config.secret_name == "MySecret"

    def test_default_dir_under_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        config = SecretConfig.from_env()
        assert config.secret_path == tmp_path / ".flowise" / "session.secret"

    def test_empty_explicit_secret_is_unset(self, secret_dir):
        config = SecretConfig(explicit_secret="", secret_dir=secret_dir)
        assert config.explicit_secret is None

    def test_explicit_secret_hidden_from_repr(self, secret_dir):
        config = SecretConfig(explicit_secret="hidden-value" * 4, secret_dir=secret_dir)
        assert "hidden-value" not in repr(config)

    def test_unsupported_storage(self, secret_dir):
        with pytest.raises(ValidationError):
            SecretConfig(storage_type="vault", secret_dir=secret_dir)

    def test_remote_storage_requested(self, monkeypatch, secret_dir):
        monkeypatch.setenv("SECRETKEY_STORAGE_TYPE", "AWS")
        config = SecretConfig.from_env(secret_dir=secret_dir)
        assert config.storage_type == "aws"
        assert config.remote_requested is True
        assert config.remote_configured is False

    def test_remote_client_contract(self, secret_dir):
        with pytest.raises(ValidationError):
            SecretConfig(remote_client=object(), secret_dir=secret_dir)

    def test_remote_client_counts_as_requested(self, secret_dir, remote_client):
        config = SecretConfig(remote_client=remote_client, secret_dir=secret_dir)
        assert config.remote_configured is True
        assert config.remote_requested is True

    def test_empty_principal_path(self, secret_dir):
        with pytest.raises(ValidationError):
            SecretConfig(principal_path=(), secret_dir=secret_dir)
