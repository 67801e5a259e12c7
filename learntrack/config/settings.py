"""learntrack settings, read from LEARNTRACK_* environment variables or .env."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration. Every field maps to LEARNTRACK_<FIELD_NAME>."""

    model_config = SettingsConfigDict(
        env_prefix="LEARNTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="learntrack", description="Service name in logs")
    app_version: str = Field(default="0.1.0")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development"
    )
    debug: bool = Field(default=True, description="Expose /docs and /redoc")

    # Access tokens are issued by the identity service; learntrack only verifies
    auth_secret_key: str = Field(
        default="dev-jwt-secret-key-change-in-production-32chars!",
        min_length=32,
        description="Shared HS256 verification key",
    )
    auth_algorithm: str = Field(default="HS256")

    # Cassandra
    cassandra_hosts: list[str] = Field(default=["localhost"])
    cassandra_port: int = Field(default=9042)
    cassandra_keyspace: str = Field(default="learntrack")
    cassandra_username: str | None = Field(default=None)
    cassandra_password: str | None = Field(default=None)
    cassandra_protocol_version: int = Field(default=4)
    cassandra_connect_timeout: float = Field(default=10.0, description="Seconds")
    cassandra_datacenter: str = Field(
        default="datacenter1", description="Replicated datacenter in production"
    )
    cassandra_replication_factor: int = Field(default=3, ge=1)

    # Quiz grading
    quiz_pass_ratio: float = Field(
        default=0.7, gt=0, le=1, description="Fraction of correct answers to pass"
    )
    quiz_recent_window_hours: int = Field(
        default=24, gt=0, description="Window for the recently-passed quiz signal"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    log_include_caller_info: bool = Field(default=True)
    log_dir: str = Field(default="logs")
    log_file_max_bytes: int = Field(default=10 * 1024 * 1024, description="Per file")
    log_file_backup_count: int = Field(default=5)
    log_requests: bool = Field(default=True, description="Log HTTP request start/finish")
    log_exclude_paths: list[str] = Field(default=["/health"])

    # CORS
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])
    cors_max_age: int = Field(default=600)

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
