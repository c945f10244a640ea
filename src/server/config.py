"""Validated settings for the web UI server."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from app_config_schema import UIServerSettings


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
ROOT_PATH = "/"
INDEX_PATH = "/index.html"
HEALTHZ_PATH = "/healthz"
SESSION_API_PATH = "/api/session"


def default_index_file() -> Path:
    """Return the bundled single-page UI shipped in `web_ui/`."""
    bundle_root = getattr(sys, "_MEIPASS", None)
    repo_root = Path(bundle_root) if bundle_root else Path(__file__).resolve().parents[2]
    return repo_root / "web_ui" / "index.html"


@dataclass(frozen=True)
class UIServerConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")
        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )
        # A disabled server never reads the page, so a stale path is tolerated.
        if self.enabled:
            _check_index_file(self.index_file)

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def http_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_settings(cls, settings: UIServerSettings) -> "UIServerConfig":
        index_file = (settings.index_file or "").strip() or str(default_index_file())
        return cls(
            enabled=settings.enabled,
            host=settings.host,
            port=settings.port,
            index_file=index_file,
        )


def _check_index_file(index_file: str) -> None:
    if not index_file:
        raise ServerConfigurationError("ui_server.index_file cannot be empty")
    path = Path(index_file)
    if not path.exists():
        raise ServerConfigurationError(f"UI index file not found: {path}")
    if not path.is_file():
        raise ServerConfigurationError(f"UI index path is not a file: {path}")
