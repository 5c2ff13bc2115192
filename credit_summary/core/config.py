from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_env: str = "dev"
    log_level: str = "info"
    log_dir: Path = Path("logs")
    dialect_dir: Path | None = None
    default_dialect: str = "credit_bureau_mx"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        """Accept lowercase level names from the environment."""

        return value.strip().upper()

    @field_validator("default_dialect")
    @classmethod
    def _strip_dialect(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("DEFAULT_DIALECT must not be empty")
        return value


settings = Settings()
