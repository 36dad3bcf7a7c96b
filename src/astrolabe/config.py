"""Configuration loading from YAML with environment overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

LOG_LEVELS = ("debug", "info", "warning", "error")


class ConfigError(Exception):
    """Config file could not be read or failed validation."""

    pass


class LayoutConfig(BaseModel):
    """Geometry and solver settings for the layout engine."""

    node_width: float = Field(220, gt=0)
    node_height: float = Field(100, gt=0)
    lane_gap: float = Field(150, ge=0)
    vertical_gap: float = Field(40, ge=0)
    attachment_offset: float = Field(60, ge=0)
    orphan_gap: float = Field(120, ge=0)

    # Fallback grid
    grid_columns: int = Field(5, ge=1)
    grid_cell_width: float = Field(250, gt=0)
    grid_cell_height: float = Field(150, gt=0)

    solver_iterations: int = Field(8, ge=0)
    solver_timeout: float = Field(5.0, gt=0)


class AstrolabeConfig(BaseModel):
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    log_level: str = "warning"

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = str(v).lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {', '.join(LOG_LEVELS)}")
        return level


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"ASTROLABE_{key}", default)


def load_config(path: str | Path | None = None) -> AstrolabeConfig:
    """
    Load configuration from a YAML file.

    A missing file (or no path) yields defaults. ``ASTROLABE_LOG_LEVEL``
    overrides the file's log level.
    """
    data: dict = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            try:
                with path.open() as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Config root must be a mapping: {path}")

    env_level = _env("LOG_LEVEL")
    if env_level:
        data = {**data, "log_level": env_level}

    try:
        return AstrolabeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config: {e}") from e
