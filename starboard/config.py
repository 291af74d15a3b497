"""Application configuration with comprehensive validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Starboard Evaluation API"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    SECRET_KEY: SecretStr = SecretStr("dev-secret-change-me")

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Database
    DB_BACKEND: Literal["sqlite", "snowflake"] = "sqlite"
    SQLITE_PATH: str = "starboard.db"

    # Snowflake
    SNOWFLAKE_ACCOUNT: Optional[str] = None
    SNOWFLAKE_USER: Optional[str] = None
    SNOWFLAKE_PASSWORD: Optional[SecretStr] = None
    SNOWFLAKE_DATABASE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_ROLE: Optional[str] = None

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_STEPS: int = 300      # 5 minutes
    CACHE_TTL_CUTOFF: int = 120     # 2 minutes
    CACHE_RETRY_SECONDS: int = 30   # wait after a failed connect

    # Evaluation defaults (applied to new applications)
    DEFAULT_MIN_SCORE: float = Field(default=1.0, ge=0)
    DEFAULT_MAX_SCORE: float = Field(default=10.0, gt=0)
    DEFAULT_REQUIRED_EVALUATOR_PERCENTAGE: float = Field(default=75.0, ge=0, le=100)

    @model_validator(mode="after")
    def validate_score_range(self):
        """Ensure the default scoring range is not empty."""
        if self.DEFAULT_MIN_SCORE >= self.DEFAULT_MAX_SCORE:
            raise ValueError(
                f"DEFAULT_MIN_SCORE ({self.DEFAULT_MIN_SCORE}) must be below "
                f"DEFAULT_MAX_SCORE ({self.DEFAULT_MAX_SCORE})"
            )
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production has required security settings."""
        if self.APP_ENV == "production":
            if self.DEBUG:
                raise ValueError("DEBUG must be False in production")
            if len(self.SECRET_KEY.get_secret_value()) < 32:
                raise ValueError("SECRET_KEY must be ≥32 characters in production")
        return self

    @model_validator(mode="after")
    def validate_snowflake_settings(self):
        """Snowflake backend needs a full set of credentials."""
        if self.DB_BACKEND == "snowflake":
            missing = [
                name for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD",
                                  "SNOWFLAKE_DATABASE", "SNOWFLAKE_SCHEMA", "SNOWFLAKE_WAREHOUSE")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"Snowflake backend requires: {', '.join(missing)}")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
