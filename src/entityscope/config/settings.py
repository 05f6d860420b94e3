"""Runtime settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from entityscope.errors import ConfigValidationError, ErrorCode, ErrorContext

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Tunables for discovery and planning."""

    model_config = SettingsConfigDict(
        env_prefix="ENTITYSCOPE_",
        extra="ignore",
    )

    array_max_depth: int = 3
    default_page_size: int = 20
    max_workers: int = 1
    log_level: str = "WARNING"

    @field_validator("array_max_depth", "default_page_size", "max_workers", mode="after")
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ConfigValidationError(
                message=f"{info.field_name} must be at least 1",
                field=info.field_name,
                value=v,
            )
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                message=f"Invalid log level: {v}. Valid: {', '.join(VALID_LOG_LEVELS)}",
                field="log_level",
                value=v,
                context=ErrorContext(extra={"valid_levels": list(VALID_LOG_LEVELS)}),
            )
        return level


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from an optional YAML file and the environment.

    Priority: env vars > settings file > defaults

    Raises:
        ConfigValidationError: If the file is missing or not a mapping, or a
            value fails validation.
    """
    data: dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigValidationError(
                message=f"Settings file not found: {path}",
                code=ErrorCode.CONFIG_NOT_FOUND,
                context=ErrorContext(source=str(path)),
            )
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                message=f"Invalid YAML in settings file: {e}",
                context=ErrorContext(source=str(path)),
            ) from e
        if not isinstance(loaded, dict):
            raise ConfigValidationError(
                message="Settings file must contain a mapping",
                value=type(loaded).__name__,
                context=ErrorContext(source=str(path)),
            )
        data.update(loaded)

    data.update(_get_env_overrides())
    try:
        return Settings(**data)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or None
        raise ConfigValidationError(
            message=f"Invalid setting {field}: {error['msg']}",
            field=field,
            value=error.get("input"),
        ) from e


def _get_env_overrides() -> dict[str, Any]:
    """Settings explicitly set in the environment, which beat file values."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "ENTITYSCOPE_ARRAY_MAX_DEPTH": ("array_max_depth", int),
        "ENTITYSCOPE_DEFAULT_PAGE_SIZE": ("default_page_size", int),
        "ENTITYSCOPE_MAX_WORKERS": ("max_workers", int),
        "ENTITYSCOPE_LOG_LEVEL": ("log_level", str),
    }

    for env_key, (key, converter) in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            try:
                overrides[key] = converter(value)
            except ValueError as e:
                raise ConfigValidationError(
                    message=f"{env_key} must be an integer",
                    field=key,
                    value=value,
                    context=ErrorContext(source="environment"),
                ) from e

    return overrides


__all__ = ["Settings", "load_settings", "VALID_LOG_LEVELS"]
