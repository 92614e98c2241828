import logging
import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from repo_tracker.infrastructure.github_client import DEFAULT_API_URL


class Settings(BaseModel):
    """Runtime settings, read from the environment (and a .env file if present)."""
    model_config = ConfigDict(frozen=True)

    api_url: str = DEFAULT_API_URL
    log_level: str = "WARNING"
    request_timeout: Optional[float] = Field(None, gt=0, description="Seconds; unset means no timeout")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


def load_settings() -> Settings:
    load_dotenv()

    values = {}
    if os.getenv("GITHUB_API_URL"):
        values["api_url"] = os.getenv("GITHUB_API_URL")
    if os.getenv("LOG_LEVEL"):
        values["log_level"] = os.getenv("LOG_LEVEL")
    if os.getenv("REQUEST_TIMEOUT"):
        values["request_timeout"] = os.getenv("REQUEST_TIMEOUT")

    return Settings(**values)
