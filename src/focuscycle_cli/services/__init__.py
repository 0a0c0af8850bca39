"""Services module for focuscycle - configuration and controller wiring."""

from .config_service import ConfigError, ConfigService, get_config_service
from .session_service import build_controller, get_history_logger

__all__ = [
    "ConfigError",
    "ConfigService",
    "build_controller",
    "get_config_service",
    "get_history_logger",
]
