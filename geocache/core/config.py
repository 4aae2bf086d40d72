"""Application configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    Store credentials are only ever read from the environment or ``.env``.
    """

    app_name: str = "Geocache Finder"
    version: str = "0.1.0"
    api_prefix: str = "/api/v1"

    # CORS Settings
    cors_origins: list[str] = ["*"]  # Default to allow all in development
    cors_allow_credentials: bool = False

    # Database Settings
    DB_DRIVER: str = "postgresql+asyncpg"
    DB_HOST: str = "localhost"
    DB_PORT: int | None = None
    DB_NAME: str = "test"
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DATABASE_URL: str | None = None  # Overrides the DB_* parts when set
    DB_CONNECT_TIMEOUT: float = Field(default=5.0, gt=0)
    MAX_CONNECTIONS: int = Field(default=5, ge=1)

    # Send raw store error text to clients (internal deployments only)
    EXPOSE_ERROR_DETAILS: bool = False

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Photo search (Flickr)
    FLICKR_API_KEY: str | None = None
    FLICKR_API_URL: str = "https://api.flickr.com/services/rest/"
    PHOTO_SEARCH_TIMEOUT: float = Field(default=5.0, gt=0)
    PHOTO_SEARCH_PER_PAGE: int = Field(default=12, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def validate_origins(self) -> "Settings":
        """Validate CORS origins."""
        if self.cors_origins == ["*"]:
            self.cors_origins = [
                "http://localhost",
                "http://localhost:8000",
                "http://localhost:3000",
            ]
        return self

    @property
    def database_url(self) -> URL:
        """Connection URL for the geocache store.

        Returns:
            A SQLAlchemy URL; the password is escaped by ``URL.create``.
        """
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL)
        return URL.create(
            self.DB_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASSWORD or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )


# Create settings instance
settings = Settings()
