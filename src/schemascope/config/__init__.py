"""Configuration management for schemascope."""
from .app import (
    AppConfig,
    SourcesConfig,
    ServerConfig,
    ChatConfig,
    LoggingConfig,
    load_app_config,
)
from .log_setup import configure_logging

__all__ = [
    "AppConfig",
    "SourcesConfig",
    "ServerConfig",
    "ChatConfig",
    "LoggingConfig",
    "load_app_config",
    "configure_logging",
]
