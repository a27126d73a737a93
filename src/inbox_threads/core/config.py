"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field, field_validator


class StaffSettings(BaseModel):
    """Settings identifying the organisation's own mail domain."""

    domain: str = Field(
        default="futuregate.info",
        description="Sender domain treated as staff; everything else is client",
    )

    @field_validator("domain")
    @classmethod
    def lowercase_domain(cls, value: str) -> str:
        return value.strip().lower()


class IngestionSettings(BaseModel):
    """Settings controlling how raw provider records are stored."""

    snippet_max_chars: int = Field(
        default=500, ge=1, description="Maximum stored snippet length"
    )


class SummarySettings(BaseModel):
    """Settings for the local extractive thread summary."""

    max_participants: int = Field(
        default=8, ge=1, description="Participants listed in a summary"
    )
    max_snippets: int = Field(
        default=5, ge=0, description="Most recent snippets quoted in a summary"
    )
    snippet_chars: int = Field(
        default=160, ge=1, description="Characters kept per quoted snippet"
    )
    fallback_enabled: bool = Field(
        default=True,
        description="Store a local summary when the external provider fails",
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Emit key=value log records"
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    staff: StaffSettings = Field(default_factory=StaffSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    summary: SummarySettings = Field(default_factory=SummarySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


ENV_PREFIX = "INBOX_THREADS_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _collect_env_values(
    env_file: Path | str | None, *, include_environment: bool = True
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined: dict[str, Any] = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        normalized_value: Any = value
        if value is None or value == "":
            # Empty values fall back to the model default.
            continue
        if isinstance(value, str):
            lowercase_value = value.lower()
            if lowercase_value == "true":
                normalized_value = True
            elif lowercase_value == "false":
                normalized_value = False
        _merge_into_tree(collected, path, normalized_value)

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    *,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment=include_environment)
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "IngestionSettings",
    "LoggingSettings",
    "StaffSettings",
    "SummarySettings",
    "load_app_settings",
]
