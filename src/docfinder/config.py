"""Runtime settings, read from ``DOCFINDER_*`` environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docfinder.generator.constants import MAX_RECURSION_DEPTH

MAX_FILE_SIZE = 100 * 1024 * 1024  # 100 MiB

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DOCFINDER_", case_sensitive=False)

    max_depth: int = Field(default=MAX_RECURSION_DEPTH, ge=1)
    max_file_size: int = Field(default=MAX_FILE_SIZE, ge=1)
    log_level: LogLevel = "WARNING"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
