from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_DATABASE_URL = "sqlite:///:memory:"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: Literal["development", "test", "production"] = Field(
        "development", description="Runtime environment"
    )
    db_type: Literal["sqlite", "postgres", "mysql"] = Field(
        "sqlite", description="Backing database engine"
    )
    db_path: str = Field(
        "./data/sqlite/database.sqlite",
        description="sqlite file path, or a connection string for other engines",
    )
    database_url: Optional[str] = Field(
        None, description="Explicit SQLAlchemy URL overriding db_type/db_path"
    )
    api_prefix: str = Field("api", description="URL prefix for all routes")
    api_title: str = Field("Users API", description="OpenAPI document title")
    api_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3000
    bcrypt_rounds: int = Field(10, ge=4, le=31, description="bcrypt cost factor")
    create_tables: bool = Field(
        True, description="Create missing tables when the server starts"
    )
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    def sqlalchemy_url(self) -> str:
        """Resolve the URL the engine should connect to."""
        if self.database_url:
            return self.database_url
        if self.environment == "test":
            return MEMORY_DATABASE_URL
        if self.db_type == "sqlite":
            return f"sqlite:///{self.db_path}"
        if self.db_path.startswith("postgres://"):
            # SQLAlchemy only accepts the postgresql:// scheme
            return "postgresql://" + self.db_path[len("postgres://"):]
        return self.db_path


settings = Settings()
