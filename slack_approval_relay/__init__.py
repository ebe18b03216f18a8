"""Slack Approval Relay package initialisation."""

from .background import run_async  # noqa: F401
from .config import AppSettings, get_settings  # noqa: F401
from .logging_config import configure_logging  # noqa: F401
from .slack_client import SlackClient  # noqa: F401

__all__ = [
    "AppSettings",
    "get_settings",
    "run_async",
    "configure_logging",
    "SlackClient",
]
