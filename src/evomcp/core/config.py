"""Settings for network binding, Evolution API credentials and CORS."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from evomcp.core.errors import SettingsValidationError

DEFAULT_CREDENTIAL_MARKERS = ("EVOLUTION_API_KEY", "EVOLUTION_API_URL")

# Environment variable -> settings field
_ENV_FIELDS = {
    "HOST": "host",
    "PORT": "port",
    "EVOLUTION_API_URL": "evolution_api_url",
    "EVOLUTION_API_KEY": "evolution_api_key",
    "EVOLUTION_INSTANCE": "evolution_instance",
}


class GatewaySettings(BaseModel):
    """Runtime configuration for the gateway process.

    Only the bootstrap code reads these values. The dispatch core sees
    missing credentials indirectly, through the failures raised by tool
    handlers.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    evolution_api_url: str | None = None
    evolution_api_key: str | None = None
    evolution_instance: str | None = None
    request_timeout: float = 30.0
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    credential_markers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CREDENTIAL_MARKERS)
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.evolution_api_url and self.evolution_api_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewaySettings:
        """Build settings from environment variables."""
        return cls.model_validate(_env_values(environ))


class SettingsLoader:
    """Load a YAML settings file into :class:`GatewaySettings`.

    Values missing from the file are taken from the environment, so a file
    may carry only the parts that differ between deployments.
    """

    def __init__(self, path: Path, environ: Mapping[str, str] | None = None) -> None:
        self._path = path
        self._environ = environ

    def load(self) -> GatewaySettings:
        """Read YAML, interpolate env vars, and validate.

        Raises:
            SettingsValidationError: On read, YAML or schema errors.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsValidationError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise SettingsValidationError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SettingsValidationError("Settings YAML must be a mapping")

        merged = _env_values(self._environ)
        merged.update(data)

        try:
            return GatewaySettings.model_validate(merged)
        except ValidationError as exc:
            raise SettingsValidationError(str(exc)) from exc


def load_settings(
    path: Path | None = None, environ: Mapping[str, str] | None = None
) -> GatewaySettings:
    """Return settings from *path* when given, otherwise from the environment."""
    if path is not None:
        return SettingsLoader(path, environ).load()
    try:
        return GatewaySettings.from_env(environ)
    except ValidationError as exc:
        raise SettingsValidationError(str(exc)) from exc


def _env_values(environ: Mapping[str, str] | None) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for key, field in _ENV_FIELDS.items():
        value = env.get(key)
        if value:
            values[field] = value
    return values
