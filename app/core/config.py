import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: str = Field(default="development", alias="APP_ENV")
    host: str = Field(default="0.0.0.0", alias="APP_HOST")
    port: int = Field(default=8000, alias="APP_PORT")
    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"], alias="CORS_ORIGINS")

    database_url: str = Field(default="sqlite:///./data/momentum.db", alias="DATABASE_URL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        # CORS_ORIGINS=https://a.example,https://b.example
        if isinstance(value, str) and value.strip().startswith("["):
            return json.loads(value)
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


class WorkflowConfig(BaseSettings):
    """n8n webhook targets. Read per request so operators can change them without a restart."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    generate_tickets_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("N8N_GENERATE_TICKETS_URL", "NEXT_PUBLIC_N8N_GENERATE_TICKETS_URL"),
    )
    plan_sprint_url: str | None = Field(default=None, validation_alias="N8N_PLAN_SPRINT_URL")
    timeout_sec: float = Field(default=120.0, validation_alias="N8N_TIMEOUT_SEC")


@lru_cache
def get_settings() -> AppConfig:
    return AppConfig()


def get_workflow_settings() -> WorkflowConfig:
    return WorkflowConfig()

