from functools import lru_cache
from typing import Annotated, Any, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    # Application Configuration
    API_NAME: str = "Task API"
    API_SUMMARY: str = "Create, list, soft-delete, restore and complete tasks"
    API_VERSION: str = "v1.0.x"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILES_ENABLED: bool = True

    CORS_ENABLED: bool = True
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    STATIC_DIR: str = "public"

    # Database Configuration
    TASK_STORE_BACKEND: Literal["redis", "postgres"] = "redis"
    TASK_STORE_NAMESPACE: str = "tasks"

    REDIS_URL: str = "redis://localhost:6379"
    POSTGRES_URL: str = "postgresql://localhost:5432/tasks"  # Assumes a local Postgres db named 'tasks' exists

    # OpenTelemetry Settings
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = "task-api"

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: Any):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    def validate_list_from_string(cls, v: Any):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",")]
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings():
    return Settings()
