from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, ge=1, le=65535, alias="PORT")
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    service_name: str = Field(default="sit753-app", alias="SERVICE_NAME")

    app_name: str = Field(default="SIT753 DevOps Pipeline Application", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    app_description: str = Field(
        default="High Distinction Jenkins Pipeline Implementation",
        alias="APP_DESCRIPTION",
    )
    app_author: str = Field(default="Your Name", alias="APP_AUTHOR")
    build_number: str = Field(default="local", alias="BUILD_NUMBER")
    git_commit: str = Field(default="unknown", alias="GIT_COMMIT")

    shutdown_timeout_seconds: float = Field(default=10.0, gt=0, alias="SHUTDOWN_TIMEOUT_SECONDS")
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(default=["*"], alias="CORS_ALLOW_ORIGINS")

    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_exp_minutes: int = Field(default=60, ge=1, alias="JWT_EXP_MINUTES")

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        # CORS_ALLOW_ORIGINS=https://a.example,https://b.example
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        return value.strip().lower() or "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise SettingsLoadError(str(exc)) from exc
