"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds the variables documented in the
.env.example file and that the grouped configuration views are built from
the same flat environment.
"""

from pathlib import Path

import pytest

from docuvault.server.core.config import CORSConfig, Settings, SMTPConfig, StorageConfig

ENV_KEYS = [
    "DOCUVAULT_SERVER_HOST",
    "DOCUVAULT_SERVER_PORT",
    "DOCUVAULT_LOG_LEVEL",
    "DATABASE_URL",
    "MASTER_ADMIN_EMAIL",
    "SUPPORT_EMAIL",
    "FRONTEND_URL",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_SECURE",
    "SMTP_USER",
    "SMTP_PASSWORD",
    "SMTP_FROM",
    "S3_BUCKET",
    "S3_REGION",
    "S3_ENDPOINT_URL",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "S3_PRESIGNED_EXPIRES",
    "MAX_UPLOAD_SIZE",
    "CORS_ORIGINS",
    "CORS_ALLOW_CREDENTIALS",
]


@pytest.fixture
def env_example_path() -> Path:
    """Get path to .env.example file."""
    return Path(__file__).resolve().parents[4] / ".env.example"


@pytest.fixture
def env_example_vars(env_example_path: Path) -> dict[str, str]:
    """Parse .env.example file and return environment variables."""
    env_vars = {}
    with open(env_example_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip()
    return env_vars


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_example_documents_every_setting(env_example_vars: dict[str, str]):
    missing = [key for key in ENV_KEYS if key not in env_example_vars]

    assert missing == []


class TestDefaults:
    def test_server_defaults(self, clean_env):
        settings = Settings(_env_file=None)

        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000
        assert settings.log_level == "INFO"
        assert settings.database_url == "sqlite+aiosqlite:///./docuvault.db"

    def test_smtp_is_not_configured_by_default(self, clean_env):
        smtp = Settings(_env_file=None).smtp

        assert isinstance(smtp, SMTPConfig)
        assert smtp.port == 587
        assert smtp.is_configured is False

    def test_storage_defaults(self, clean_env):
        storage = Settings(_env_file=None).storage

        assert storage.bucket is None
        assert storage.presigned_expires == 3600
        assert storage.max_upload_size == 10 * 1024 * 1024


class TestBinding:
    def test_example_values_bind(self, env_example_vars: dict[str, str], clean_env):
        for key in ENV_KEYS:
            clean_env.setenv(key, env_example_vars[key])

        settings = Settings(_env_file=None)

        assert settings.server_port == int(env_example_vars["DOCUVAULT_SERVER_PORT"])
        assert settings.master_admin_email == env_example_vars["MASTER_ADMIN_EMAIL"]
        assert settings.database_url == env_example_vars["DATABASE_URL"]
        assert settings.cors_origins == ["http://localhost:5173"]

    def test_smtp_group(self, clean_env):
        clean_env.setenv("SMTP_HOST", "smtp.example.com")
        clean_env.setenv("SMTP_PORT", "465")
        clean_env.setenv("SMTP_SECURE", "true")
        clean_env.setenv("SMTP_USER", "mailer@example.com")
        clean_env.setenv("SMTP_PASSWORD", "secret")

        smtp = Settings(_env_file=None).smtp

        assert (smtp.host, smtp.port, smtp.secure) == ("smtp.example.com", 465, True)
        assert smtp.sender is None
        assert smtp.is_configured is True

    def test_storage_group(self, clean_env):
        clean_env.setenv("S3_BUCKET", "vault")
        clean_env.setenv("S3_ENDPOINT_URL", "http://localhost:9000")
        clean_env.setenv("S3_PRESIGNED_EXPIRES", "900")

        storage = Settings(_env_file=None).storage

        assert isinstance(storage, StorageConfig)
        assert (storage.bucket, storage.endpoint_url, storage.presigned_expires) == (
            "vault",
            "http://localhost:9000",
            900,
        )

    def test_cors_group(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", '["https://app.example.com"]')
        clean_env.setenv("CORS_ALLOW_CREDENTIALS", "false")

        cors = Settings(_env_file=None).cors

        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["https://app.example.com"]
        assert cors.allow_credentials is False


class TestGroupedModels:
    def test_smtp_accepts_field_names(self):
        smtp = SMTPConfig(host="mail", user="u", password="p")

        assert smtp.is_configured is True

    @pytest.mark.parametrize("missing", ["host", "user", "password"])
    def test_smtp_needs_host_user_and_password(self, missing):
        values = {"host": "mail", "user": "u", "password": "p"}
        values[missing] = None

        assert SMTPConfig(**values).is_configured is False
