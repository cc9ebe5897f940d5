"""Service configuration settings."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service configuration
    service_name: str = "case-content-service"
    environment: str = "development"
    port: int = 8010

    # Storage configuration
    database_url: str = "sqlite+aiosqlite:///./case_content.db"
    storage_type: str = "sql"  # "sql" or "inmemory"
    cases_collection: str = "cases"
    users_collection: str = "users"

    # CORS configuration
    cors_origins: str = "*"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def uses_sql(self) -> bool:
        return self.storage_type.lower() == "sql"


# Global settings instance
settings = Settings()
