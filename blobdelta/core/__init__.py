"""Core module initialization."""

from .config_manager import BlobDeltaConfig, ClientConfig, ConfigManager, ListingConfig
from .logging_config import correlation_scope, get_logger, setup_logging, setup_logging_from_config

__all__ = [
    "BlobDeltaConfig",
    "ClientConfig",
    "ConfigManager",
    "ListingConfig",
    "correlation_scope",
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
]
