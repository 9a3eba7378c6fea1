"""
Application configuration using Pydantic Settings.
All configuration is loaded from environment variables (12-factor app).
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    app_name: str = Field(default="Cable Inventory API", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Enable debug mode")

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # === Database (single source of truth) ===
    database_url: Optional[str] = Field(
        default=None,
        description="Database connection URL (defaults to SQLite under data_dir)",
    )
    data_dir: Path = Field(default=Path("data"), description="Directory for the default SQLite database")
    auto_create_tables: bool = Field(default=True, description="Create missing tables on startup")

    # === CORS ===
    cors_origins: str = Field(default="*", description="Comma-separated list of allowed CORS origins")

    # === Logging ===
    log_level: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL")
    log_format: str = Field(default="json", description="Log format: json or text")

    # === Inventory imports ===
    import_max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted size of an uploaded inventory export",
    )
    import_allowed_extensions: str = Field(
        default=".csv",
        description="Comma-separated list of accepted upload file extensions",
    )
    import_history_limit: int = Field(
        default=50,
        description="Number of import audit records returned by default",
    )
    reset_source_suffix: str = Field(
        default=" (reset)",
        description="Suffix appended to the source file name of reset ledger writes",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def allowed_extensions_list(self) -> list[str]:
        """Parse accepted upload extensions, lower-cased with a leading dot."""
        extensions = []
        for ext in self.import_allowed_extensions.split(","):
            ext = ext.strip().lower()
            if not ext:
                continue
            extensions.append(ext if ext.startswith(".") else f".{ext}")
        return extensions

    @property
    def resolved_database_url(self) -> str:
        """Configured database URL, or a SQLite file inside data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{(self.data_dir / 'inventory.db').as_posix()}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Use dependency injection in FastAPI routes: settings = Depends(get_settings)
    """
    return Settings()
