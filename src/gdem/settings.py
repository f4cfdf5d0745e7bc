"""Sampler defaults loaded from a JSON settings file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

import jsonschema

from gdem.errors import SettingsError

ENV_SETTINGS = "GDEM_SETTINGS"
DEFAULT_FILENAME = "gdem.json"


@dataclass(frozen=True)
class Settings:
    """Defaults applied by the CLI when flags are not given."""

    band: int = 1
    nodata_fallback: float | None = None
    interpolate: bool = False
    profile_spacing_m: float = 30.0


def _load_schema() -> dict[str, Any]:
    """Load the settings schema bundled in the package."""
    with resources.files("gdem.schemas").joinpath("settings.schema.json").open(
        "r", encoding="utf-8"
    ) as handle:
        return json.load(handle)


def validate_settings(data: Mapping[str, Any]) -> None:
    """Validate a settings document, raising SettingsError on failure."""
    try:
        jsonschema.validate(dict(data), _load_schema())
    except jsonschema.ValidationError as exc:
        raise SettingsError(f"Invalid settings: {exc.message}") from exc


def settings_from_dict(data: Mapping[str, Any]) -> Settings:
    validate_settings(data)
    return replace(Settings(), **data)


def _read(path: Path) -> Settings:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SettingsError(f"Failed to read settings {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {path} must contain a JSON object.")
    return settings_from_dict(data)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from ``path``, $GDEM_SETTINGS, or ./gdem.json.

    A candidate that does not exist yields the defaults.
    """
    if path is None:
        env_path = os.environ.get(ENV_SETTINGS)
        path = Path(env_path) if env_path else Path.cwd() / DEFAULT_FILENAME
    if not path.exists():
        return Settings()
    return _read(path)
