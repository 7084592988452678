"""Settings for CrossRepo repositories."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class CrossRepoSettings(BaseSettings):
    """CrossRepo configuration settings."""

    # PostgreSQL
    PGSQL_HOST: str = "localhost"
    PGSQL_PORT: str = "5432"
    PGSQL_DBNAME: Optional[str] = None
    PGSQL_USER: str = "postgres"
    PGSQL_PASSWORD: str = "postgres"

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DATABASE: Optional[str] = None

    # Query settings
    DEFAULT_PAGE_LIMIT: int = 10
    SOFT_DELETE_FIELD: str = "deletedAt"
    # Hex chars of the relation path digest appended to include aliases
    ALIAS_DIGEST_LENGTH: int = 8
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = CrossRepoSettings()
