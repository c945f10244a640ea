"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pomodoro.constants import (
    DEFAULT_BREAK_SECONDS,
    DEFAULT_LONG_BREAK_EVERY,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SESSIONS_BEFORE_REST_PROMPT,
    DEFAULT_WORK_SECONDS,
)

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class SessionSettings:
    """Work/break cadence loaded from `[session]`."""
    work_duration_seconds: int = DEFAULT_WORK_SECONDS
    break_duration_seconds: int = DEFAULT_BREAK_SECONDS
    long_break_duration_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    long_break_every: int = DEFAULT_LONG_BREAK_EVERY
    sessions_before_rest_prompt: int = DEFAULT_SESSIONS_BEFORE_REST_PROMPT
    strict_transitions: bool = False


@dataclass(frozen=True)
class AlertSettings:
    """Alarm pulse and notification settings from `[alerts]`."""
    audio_enabled: bool = True
    notifications_enabled: bool = True
    output_device: Optional[int] = None
    pulse_frequency_hz: float = 880.0
    pulse_duration_seconds: float = 0.25
    pulse_volume: float = 0.5


@dataclass(frozen=True)
class RuntimeSettings:
    """Recurring source intervals from `[runtime]`."""
    tick_interval_seconds: float = 1.0
    pulse_interval_seconds: float = 1.5


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    session: SessionSettings
    alerts: AlertSettings
    runtime: RuntimeSettings
    ui_server: UIServerSettings
    source_file: str
