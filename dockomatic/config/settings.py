"""
YAML-backed settings for the orchestration helper.

Search precedence (first match wins)
1. An explicit path argument (``--config`` on the CLI).
2. The file named by ``$DOCKOMATIC_CONFIG``.
3. The packaged default shipped inside the wheel.

A document may either list keys at the top level or group them under a
``defaults:`` mapping; top-level keys win over ``defaults``.
"""

from __future__ import annotations

import os
from importlib.resources import as_file, files
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import ConfigurationError

_DEFAULT_SETTINGS = files("dockomatic.resources") / "default_helper.yaml"

ENV_VAR = "DOCKOMATIC_CONFIG"


class HelperSettings(BaseModel):
    """Pydantic model describing helper defaults."""

    executable: str = "docker"
    timeout: Optional[float] = Field(None, gt=0, description="Seconds before a run is killed")
    probe_timeout: float = Field(30.0, gt=0)
    platform: Optional[str] = None
    auto_remove_container: bool = True
    auto_remove_image: bool = False
    gpus: bool = False
    gpu_spec: str = "all"
    keep_working_directory: bool = False
    temp_root: Optional[Path] = None
    temp_prefix: str = "dkr_"

    @field_validator("temp_prefix")
    @classmethod
    def _single_component(cls, value: str) -> str:
        """Reject prefixes that would create nested directories."""
        if not value or "/" in value or "\\" in value:
            raise ValueError("temp_prefix must be a non-empty single path component")
        return value


def _resolve(explicit: Optional[Path]) -> Path:
    """Return the settings file to read according to the precedence above."""
    if explicit is not None:
        if not explicit.exists():
            raise ConfigurationError(f"Settings file {explicit} does not exist")
        return explicit
    env = os.environ.get(ENV_VAR)
    if env:
        path = Path(env).expanduser()
        if path.exists():
            return path
    with as_file(_DEFAULT_SETTINGS) as p:
        return p


def load_settings(
    path: Optional[str | Path] = None,
    overrides: dict | None = None,
) -> HelperSettings:
    """Load :class:`HelperSettings`.

    Args:
        path: Explicit YAML file.  ``None`` triggers the search sequence in
            the module doc-string.
        overrides: Values taking precedence over the file; ``None`` entries
            are ignored so CLI options can be passed through unchanged.

    Raises:
        ConfigurationError: When the file is missing or fails validation.
    """
    overrides = overrides or {}
    resolved = _resolve(Path(path).expanduser() if path else None)
    data = yaml.safe_load(resolved.read_text()) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{resolved} must contain a mapping")
    defaults = data.get("defaults") or {}
    merged: dict = {**defaults, **{k: v for k, v in data.items() if k != "defaults"}}
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return HelperSettings(**merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings in {resolved} – {exc}") from exc
