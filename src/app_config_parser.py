"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from app_config_schema import (
    AlertSettings,
    AppConfig,
    AppConfigurationError,
    RuntimeSettings,
    SessionSettings,
    UIServerSettings,
)

_TRUE_WORDS = ("true", "1", "yes", "on")
_FALSE_WORDS = ("false", "0", "no", "off")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings.

    Missing sections and keys fall back to the dataclass defaults; present
    values are type-checked and reported with their dotted field name.
    """
    return AppConfig(
        session=_parse_session_settings(_Section.of(raw, "session")),
        alerts=_parse_alert_settings(_Section.of(raw, "alerts")),
        runtime=_parse_runtime_settings(_Section.of(raw, "runtime")),
        ui_server=_parse_ui_server_settings(
            _Section.of(raw, "ui_server"),
            base_dir=base_dir,
        ),
        source_file=source_file,
    )


def _parse_session_settings(section: "_Section") -> SessionSettings:
    defaults = SessionSettings()
    return SessionSettings(
        work_duration_seconds=section.positive_int(
            "work_duration_seconds", defaults.work_duration_seconds
        ),
        break_duration_seconds=section.positive_int(
            "break_duration_seconds", defaults.break_duration_seconds
        ),
        long_break_duration_seconds=section.positive_int(
            "long_break_duration_seconds", defaults.long_break_duration_seconds
        ),
        long_break_every=section.positive_int(
            "long_break_every", defaults.long_break_every
        ),
        sessions_before_rest_prompt=section.positive_int(
            "sessions_before_rest_prompt", defaults.sessions_before_rest_prompt
        ),
        strict_transitions=section.flag(
            "strict_transitions", defaults.strict_transitions
        ),
    )


def _parse_alert_settings(section: "_Section") -> AlertSettings:
    defaults = AlertSettings()
    volume = section.number("pulse_volume", defaults.pulse_volume)
    if not 0.0 < volume <= 1.0:
        raise AppConfigurationError(f"{section.field('pulse_volume')} must be in (0, 1].")
    return AlertSettings(
        audio_enabled=section.flag("audio_enabled", defaults.audio_enabled),
        notifications_enabled=section.flag(
            "notifications_enabled", defaults.notifications_enabled
        ),
        output_device=section.optional_int("output_device"),
        pulse_frequency_hz=section.positive_number(
            "pulse_frequency_hz", defaults.pulse_frequency_hz
        ),
        pulse_duration_seconds=section.positive_number(
            "pulse_duration_seconds", defaults.pulse_duration_seconds
        ),
        pulse_volume=volume,
    )


def _parse_runtime_settings(section: "_Section") -> RuntimeSettings:
    defaults = RuntimeSettings()
    return RuntimeSettings(
        tick_interval_seconds=section.positive_number(
            "tick_interval_seconds", defaults.tick_interval_seconds
        ),
        pulse_interval_seconds=section.positive_number(
            "pulse_interval_seconds", defaults.pulse_interval_seconds
        ),
    )


def _parse_ui_server_settings(
    section: "_Section",
    *,
    base_dir: Path,
) -> UIServerSettings:
    defaults = UIServerSettings()
    index_file = section.text("index_file", defaults.index_file)
    if index_file:
        path = Path(index_file).expanduser()
        index_file = str(path if path.is_absolute() else (base_dir / path).resolve())
    return UIServerSettings(
        enabled=section.flag("enabled", defaults.enabled),
        host=section.text("host", defaults.host),
        port=section.integer("port", defaults.port),
        index_file=index_file,
    )


class _Section:
    """Read-only view of one TOML table with typed accessors."""

    def __init__(self, name: str, values: Mapping[str, Any]):
        self._name = name
        self._values = values

    @classmethod
    def of(cls, root: Mapping[str, Any], name: str) -> "_Section":
        values = root.get(name)
        if values is None:
            return cls(name, {})
        if not isinstance(values, Mapping):
            raise AppConfigurationError(f"[{name}] must be a table.")
        return cls(name, values)

    def field(self, key: str) -> str:
        return f"{self._name}.{key}"

    def text(self, key: str, default: str) -> str:
        value = self._values.get(key, default)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise AppConfigurationError(f"{self.field(key)} must be a string.")
        return value.strip()

    def flag(self, key: str, default: bool) -> bool:
        value = self._values.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
        raise AppConfigurationError(f"{self.field(key)} must be a boolean.")

    def integer(self, key: str, default: int) -> int:
        value = self._values.get(key, default)
        # bool is an int subclass; `true` is never a valid count.
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip(), 0)
            except ValueError:
                pass
        raise AppConfigurationError(f"{self.field(key)} must be an integer.")

    def optional_int(self, key: str) -> Optional[int]:
        if self._values.get(key) is None:
            return None
        return self.integer(key, 0)

    def positive_int(self, key: str, default: int) -> int:
        number = self.integer(key, default)
        if number <= 0:
            raise AppConfigurationError(f"{self.field(key)} must be greater than zero.")
        return number

    def number(self, key: str, default: float) -> float:
        value = self._values.get(key, default)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise AppConfigurationError(f"{self.field(key)} must be a number.")

    def positive_number(self, key: str, default: float) -> float:
        number = self.number(key, default)
        if number <= 0:
            raise AppConfigurationError(f"{self.field(key)} must be greater than zero.")
        return number
