"""Core utilities for configuration, logging, and shared models."""

from .config import AppSettings, SummarySettings, load_app_settings
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "SummarySettings",
    "configure_logging",
    "load_app_settings",
]
