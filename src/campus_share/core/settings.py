"""Application settings and configuration.

This module defines all configuration options for the CampusShare API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="CampusShare API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    download_signing_secret: str | None = Field(default=None, alias="DOWNLOAD_SIGNING_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./campus_share.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Signed download links
    download_url_ttl_ms: int = Field(default=3_600_000, alias="DOWNLOAD_URL_TTL_MS")
    download_allowed_origins: list[str] = Field(
        default=["localhost:3000", "localhost:5173"],
        alias="DOWNLOAD_ALLOWED_ORIGINS",
    )
    download_allow_missing_referer: bool = Field(
        default=False,
        alias="DOWNLOAD_ALLOW_MISSING_REFERER",
    )

    # File uploads
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    # Seed administrator account
    admin_email: str = Field(default="admin@campusshare.com", alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, alias="ADMIN_PASSWORD")
    admin_name: str = Field(default="System Administrator", alias="ADMIN_NAME")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def download_secret(self) -> str:
        """Key used to sign download links; falls back to the JWT secret."""
        return self.download_signing_secret or self.secret_key


settings = Settings()  # type: ignore[call-arg]
