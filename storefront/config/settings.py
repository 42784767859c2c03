from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.models.schemas import MAX_PASSWORD_BYTES


class Settings(BaseSettings):
    """
    Application settings backed by Pydantic BaseSettings.
    Values are loaded from environment variables and an optional .env file.
    """

    # Application
    PROJECT_NAME: str = "Storefront"
    PROJECT_DESCRIPTION: str = "Small e-commerce storefront"
    VERSION: str = "0.1.0"
    DEBUG: bool = Field(False, description="Debug mode")
    ENVIRONMENT: str = Field("production", description="Runtime environment")

    # Database
    DATABASE_URL: str | None = Field(None, description="Full SQLAlchemy async URL (overrides DB_* values)")
    DB_HOST: str = Field("localhost", description="PostgreSQL host")
    DB_PORT: int = Field(5432, description="PostgreSQL port")
    DB_NAME: str = Field("storefront", description="Database name")
    DB_USER: str = Field("postgres", description="PostgreSQL user")
    DB_PASSWORD: str | None = Field(None, description="PostgreSQL password")
    DB_ECHO: bool = Field(False, description="Log SQL queries")
    DB_AUTO_CREATE: bool = Field(True, description="Create tables and seed roles on startup")

    # Database connection pool
    DB_POOL_SIZE: int = Field(10, description="Connection pool size")
    DB_MAX_OVERFLOW: int = Field(20, description="Pool overflow")
    DB_POOL_RECYCLE: int = Field(3600, description="Recycle connections every N seconds")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout waiting for a pooled connection")

    # Redis
    REDIS_HOST: str = Field("localhost", description="Redis host")
    REDIS_PORT: int = Field(6379, description="Redis port")
    REDIS_DB: int = Field(0, description="Redis database")
    REDIS_PASSWORD: str | None = Field(None, description="Redis password")

    # Cart
    CART_BACKEND: str = Field("memory", description="Cart storage backend: memory | redis")
    CART_TTL_SECONDS: int = Field(60 * 60 * 24, description="Idle carts are discarded after this many seconds")

    # JWT / session
    JWT_SECRET_KEY: str = Field(..., description="Secret key used to sign session tokens")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 8, description="Session token lifetime in minutes")
    SESSION_COOKIE_NAME: str = Field("STOREFRONT_SESSION", description="Cookie carrying the session token")
    SESSION_COOKIE_SECURE: bool = Field(False, description="Send the session cookie only over HTTPS")

    # Google OAuth2 login
    GOOGLE_CLIENT_ID: str | None = Field(None, description="Google OAuth2 client id")
    GOOGLE_CLIENT_SECRET: str | None = Field(None, description="Google OAuth2 client secret")
    GOOGLE_REDIRECT_URI: str = Field(
        "http://localhost:8000/login/oauth2/code/google", description="Registered OAuth2 redirect URI"
    )
    GOOGLE_TIMEOUT: int = Field(10, description="Timeout for Google API calls in seconds")

    # Product images
    PRODUCT_IMAGES_DIR: str | None = Field(None, description="Directory where uploaded product images are stored")
    MAX_FILE_SIZE: int = Field(5 * 1024 * 1024, description="Maximum image size in bytes (5MB)")
    ALLOWED_EXTENSIONS: str = Field("jpg,jpeg,png,gif,webp", description="Comma-separated product image extensions")

    # Admin bootstrap
    ADMIN_EMAIL: str | None = Field(None, description="Email of the admin account created at startup")
    ADMIN_PASSWORD: str | None = Field(None, description="Password of the admin account created at startup")

    # Observability
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN for error tracking")
    LOG_JSON: bool = Field(False, description="Emit logs as JSON lines")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("CART_BACKEND")
    @classmethod
    def validate_cart_backend(cls, v):
        if v not in ("memory", "redis"):
            raise ValueError("CART_BACKEND must be 'memory' or 'redis'")
        return v

    @field_validator("ADMIN_PASSWORD")
    @classmethod
    def validate_admin_password(cls, v):
        if v is not None and len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"ADMIN_PASSWORD must be at most {MAX_PASSWORD_BYTES} bytes")
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @computed_field
    @property
    def database_url(self) -> str:
        """Async SQLAlchemy URL, built from DB_* values unless DATABASE_URL is set"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_PASSWORD:
            return (
                f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return f"postgresql+asyncpg://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def redis_url(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @computed_field
    @property
    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @property
    def allowed_extensions(self) -> list[str]:
        return [ext.strip().lower().lstrip(".") for ext in self.ALLOWED_EXTENSIONS.split(",") if ext.strip()]

    @computed_field
    @property
    def google_oauth_enabled(self) -> bool:
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)


_settings_instance = None


def get_settings() -> Settings:
    """
    Return the cached settings instance.
    Environment variables are read only once per process.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
