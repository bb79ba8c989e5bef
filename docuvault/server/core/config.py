"""
DocuVault settings.

Every knob is a flat environment variable (or ``.env`` entry) read by
pydantic-settings; the SMTP, storage and CORS groups are views over the
same values so services can take one small config object each.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class SMTPConfig(BaseModel):
    """Outgoing mail (SMTP) configuration."""

    host: Optional[str] = Field(default=None, alias="SMTP_HOST", description="SMTP server host")
    port: int = Field(default=587, alias="SMTP_PORT", description="SMTP server port")
    secure: bool = Field(
        default=False, alias="SMTP_SECURE", description="Use implicit TLS (SMTPS) instead of STARTTLS"
    )
    user: Optional[str] = Field(default=None, alias="SMTP_USER", description="SMTP login user")
    password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD", description="SMTP login password")
    sender: Optional[str] = Field(
        default=None, alias="SMTP_FROM", description="Sender address; falls back to SMTP_USER"
    )

    model_config = {"populate_by_name": True}

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)


class StorageConfig(BaseModel):
    """S3-compatible object storage configuration."""

    bucket: Optional[str] = Field(default=None, alias="S3_BUCKET", description="Bucket holding tenant documents")
    region: str = Field(default="us-east-1", alias="S3_REGION", description="Bucket region")
    endpoint_url: Optional[str] = Field(
        default=None, alias="S3_ENDPOINT_URL", description="Custom endpoint for S3-compatible stores (MinIO, R2)"
    )
    access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID", description="Access key id")
    secret_access_key: Optional[str] = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY", description="Secret access key"
    )
    presigned_expires: int = Field(
        default=3600, alias="S3_PRESIGNED_EXPIRES", description="Lifetime of pre-signed URLs in seconds"
    )
    max_upload_size: int = Field(
        default=10 * 1024 * 1024, alias="MAX_UPLOAD_SIZE", description="Largest accepted upload in bytes"
    )

    model_config = {"populate_by_name": True}


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods for CORS"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers for CORS"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env file.

    Grouped settings (SMTP, storage, CORS) are exposed as properties built from
    the same flat environment so every key keeps its conventional name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )

    # =====================================================================
    # DocuVault Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="DocuVault server host address to bind to",
        alias="DOCUVAULT_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="DocuVault server port number",
        alias="DOCUVAULT_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="DocuVault server logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="DOCUVAULT_LOG_LEVEL",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./docuvault.db",
        description="Async database connection URL (Postgres URLs are rewritten to asyncpg)",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Mail Recipients & Links
    # =====================================================================
    master_admin_email: str = Field(
        default="admin@example.com",
        description="Mailbox receiving system-wide tenant notifications",
        alias="MASTER_ADMIN_EMAIL",
    )
    support_email: str = Field(
        default="support@example.com",
        description="Support address shown in outgoing emails",
        alias="SUPPORT_EMAIL",
    )
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Base URL of the web client, used for links in emails",
        alias="FRONTEND_URL",
    )

    # =====================================================================
    # SMTP Configuration
    # =====================================================================
    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_secure: bool = Field(default=False, alias="SMTP_SECURE")
    smtp_user: Optional[str] = Field(default=None, alias="SMTP_USER")
    smtp_password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from: Optional[str] = Field(default=None, alias="SMTP_FROM")

    # =====================================================================
    # Object Storage Configuration
    # =====================================================================
    s3_bucket: Optional[str] = Field(default=None, alias="S3_BUCKET")
    s3_region: str = Field(default="us-east-1", alias="S3_REGION")
    s3_endpoint_url: Optional[str] = Field(default=None, alias="S3_ENDPOINT_URL")
    aws_access_key_id: Optional[str] = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: Optional[str] = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    s3_presigned_expires: int = Field(default=3600, alias="S3_PRESIGNED_EXPIRES")
    max_upload_size: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_SIZE")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def smtp(self) -> SMTPConfig:
        """Get SMTP configuration from environment variables."""
        return SMTPConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def storage(self) -> StorageConfig:
        """Get object storage configuration from environment variables."""
        return StorageConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
