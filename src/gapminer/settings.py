"""GapMiner settings loaded from gapminer.toml.

Example file:

    [circuits.gemini-api]
    failure_threshold = 3
    timeout_seconds = 60

    [circuits.pdf-parser]
    failure_threshold = 4

    [validation]
    validity_threshold = 0.75
    default_max_gaps = 15

Services listed under [circuits] are merged over the built-in service
defaults. Unknown top-level tables are ignored; unknown keys inside a known
table are rejected.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .circuit_breaker import (
    SERVICE_DEFAULTS,
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    CircuitConfigError,
    config_for_service,
)
from .validation import ValidatorConfig

logger = logging.getLogger(__name__)

SETTINGS_FILE = "gapminer.toml"
SETTINGS_ENV_VAR = "GAPMINER_CONFIG"


class SettingsError(ValueError):
    """Raised for unreadable or invalid settings files."""


@dataclass(frozen=True)
class GapMinerSettings:
    """Runtime settings for GapMiner.

    Attributes:
        services: Circuit breaker configuration per service name.
        validator: Validator configuration.
    """

    services: dict[str, CircuitBreakerConfig] = field(default_factory=lambda: default_services())
    validator: ValidatorConfig = field(default_factory=ValidatorConfig)

    def build_registry(self, **kwargs: Any) -> CircuitBreakerRegistry:
        """Create a registry that configures breakers from these settings.

        Args:
            **kwargs: Forwarded to CircuitBreakerRegistry (e.g. clock).
        """
        return CircuitBreakerRegistry(service_configs=self.services, **kwargs)


def default_services() -> dict[str, CircuitBreakerConfig]:
    """Return the resolved configuration of every built-in service."""
    return {name: config_for_service(name) for name in SERVICE_DEFAULTS}


def load_settings(path: Path) -> GapMinerSettings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file.

    Returns:
        Parsed GapMinerSettings.

    Raises:
        FileNotFoundError: If the file is missing.
        SettingsError: On invalid TOML or invalid values.
    """
    if not path.exists():
        msg = f"Settings file not found: {path}"
        raise FileNotFoundError(msg)

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise SettingsError(msg) from exc

    settings = parse_settings(data)
    logger.debug("Loaded settings from %s (%d services)", path, len(settings.services))
    return settings


def parse_settings(data: dict[str, Any]) -> GapMinerSettings:
    """Build settings from already-parsed TOML data.

    Raises:
        SettingsError: If a table has the wrong type, an unknown key, or an invalid value.
    """
    circuits = data.get("circuits", {})
    if not isinstance(circuits, dict):
        raise SettingsError("[circuits] section must be a table")

    services = default_services()
    for name, overrides in circuits.items():
        if not isinstance(overrides, dict):
            raise SettingsError(f"[circuits.{name}] must be a table")
        _reject_unknown_keys(f"circuits.{name}", overrides, CircuitBreakerConfig)
        try:
            services[name] = config_for_service(name, **overrides)
        except (CircuitConfigError, TypeError) as exc:
            raise SettingsError(f"[circuits.{name}]: {exc}") from exc

    validation = data.get("validation", {})
    if not isinstance(validation, dict):
        raise SettingsError("[validation] section must be a table")
    _reject_unknown_keys("validation", validation, ValidatorConfig)
    try:
        validator = ValidatorConfig(**validation)
    except (ValueError, TypeError) as exc:
        raise SettingsError(f"[validation]: {exc}") from exc

    return GapMinerSettings(services=services, validator=validator)


def find_settings(start: Path | None = None) -> Path | None:
    """Locate the settings file.

    GAPMINER_CONFIG wins when set. Otherwise walks up from start looking
    for gapminer.toml.

    Args:
        start: Starting directory. Defaults to cwd.

    Returns:
        Path to the settings file, or None if not found.
    """
    from_env = os.environ.get(SETTINGS_ENV_VAR)
    if from_env:
        return Path(from_env)

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / SETTINGS_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def resolve_settings(path: Path | None = None) -> GapMinerSettings:
    """Load settings from path, a discovered file, or fall back to defaults."""
    resolved = path or find_settings()
    if resolved is None:
        return GapMinerSettings()
    return load_settings(resolved)


def _reject_unknown_keys(table: str, values: dict[str, Any], config_type: type) -> None:
    known = {f.name for f in dataclasses.fields(config_type)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise SettingsError(f"Unknown key(s) in [{table}]: {', '.join(unknown)}")
