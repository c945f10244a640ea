"""UI server module for the static web UI and websocket streaming."""

from .config import ServerConfigurationError, UIServerConfig
from .service import UIServer

__all__ = [
    "ServerConfigurationError",
    "UIServerConfig",
    "UIServer",
]
