"""Pydantic-based configuration helpers for the approval relay."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError, field_validator


class AppSettings(BaseModel):
    """Settings required to talk to Slack and serve its webhooks."""

    bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    signing_secret: str = Field(..., alias="SLACK_SIGNING_SECRET")
    port: int = Field(3000, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("bot_token", "signing_secret")
    @classmethod
    def _ensure_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Slack credentials must not be blank")
        return value.strip()

    @field_validator("port")
    @classmethod
    def _ensure_valid_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        return value

    @field_validator("log_level")
    @classmethod
    def _ensure_known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:
        missing = [str(error["loc"][0]) for error in exc.errors() if error["type"] == "missing"]
        if not missing:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc
        message = (
            "Missing required environment variables: "
            f"{_format_missing(missing)}"
        )
        raise RuntimeError(message) from exc
