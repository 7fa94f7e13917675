"""
Configuration management for blobdelta.

Handles loading, validation, and access to configuration settings.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from enum import Enum

import yaml
from pydantic import BaseModel, Field, field_validator, ValidationError, ConfigDict

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    """Valid log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    format: str = "json"
    file: Optional[str] = None
    rotation_size: str = "10MB"
    rotation_count: int = 5
    module_levels: Optional[Dict[str, str]] = Field(
        default=None,
        description="Per-module log levels, e.g., {'blobdelta.blob.enumerable': 'DEBUG'}"
    )


class ListingConfig(BaseModel):
    """Blob listing defaults."""
    page_size: int = Field(
        default=5000,
        ge=1,
        description="Maximum blob names requested per listing segment"
    )


class ClientConfig(BaseModel):
    """Blob service HTTP client configuration."""
    account_url: Optional[str] = Field(
        default=None,
        description="Blob service endpoint, e.g. https://account.blob.core.windows.net"
    )
    timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Request timeout in seconds"
    )
    api_version: str = "2021-08-06"


class BlobDeltaConfig(BaseModel):
    """Main blobdelta configuration schema."""

    version: str = Field(default="0.1.0", description="Configuration version")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    listing: ListingConfig = Field(default_factory=ListingConfig)

    client: ClientConfig = Field(default_factory=ClientConfig)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        parts = v.split(".")
        if len(parts) != 3:
            raise ValueError("Version must be in format x.y.z")
        for part in parts:
            if not part.isdigit():
                raise ValueError("Version components must be numeric")
        return v

    model_config = ConfigDict(use_enum_values=True)


class ConfigManager:
    """
    Manages blobdelta configuration loading and validation.

    Configuration precedence (highest to lowest):
    1. Explicit overrides
    2. Environment variables (BLOBDELTA_*)
    3. Configuration file (YAML/JSON)
    4. Defaults
    """

    def __init__(self):
        self._config: Optional[BlobDeltaConfig] = None
        self._config_file: Optional[Path] = None
        self._overrides: Optional[Dict[str, Any]] = None

    def load(
        self,
        config_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None
    ) -> BlobDeltaConfig:
        """
        Load and validate configuration from multiple sources.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            overrides: Dictionary of explicit overrides

        Returns:
            Validated BlobDeltaConfig instance

        Raises:
            ValidationError: If configuration is invalid
            FileNotFoundError: If specified config file doesn't exist
        """
        logger.info("Loading blobdelta configuration")

        config_dict: Dict[str, Any] = {}

        if config_file:
            config_dict = self._load_from_file(config_file)
            self._config_file = Path(config_file)
            logger.info(f"Loaded configuration from file: {config_file}")

        env_config = self._load_from_env()
        config_dict = self._merge_configs(config_dict, env_config)
        if env_config:
            logger.info(f"Applied {len(env_config)} environment variable overrides")

        self._overrides = overrides
        if overrides:
            config_dict = self._merge_configs(config_dict, overrides)
            logger.info(f"Applied {len(overrides)} explicit overrides")

        try:
            self._config = BlobDeltaConfig(**config_dict)
            logger.info("Configuration validated successfully")
            self._log_configuration()
            return self._config
        except ValidationError as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(path, 'r') as f:
            if path.suffix in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if log_level := os.getenv("BLOBDELTA_LOG_LEVEL"):
            config.setdefault("logging", {})["level"] = log_level.upper()
        if log_file := os.getenv("BLOBDELTA_LOG_FILE"):
            config.setdefault("logging", {})["file"] = log_file

        if page_size := os.getenv("BLOBDELTA_PAGE_SIZE"):
            config.setdefault("listing", {})["page_size"] = int(page_size)

        if account_url := os.getenv("BLOBDELTA_ACCOUNT_URL"):
            config.setdefault("client", {})["account_url"] = account_url
        if timeout := os.getenv("BLOBDELTA_TIMEOUT"):
            config.setdefault("client", {})["timeout"] = float(timeout)

        return config

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def _log_configuration(self) -> None:
        """Log the loaded configuration (with SAS credentials redacted)."""
        if not self._config:
            return

        config_dict = self._config.model_dump()

        account_url = config_dict["client"].get("account_url")
        if account_url and "?" in account_url:
            config_dict["client"]["account_url"] = account_url.split("?", 1)[0] + "?***REDACTED***"

        logger.info(f"Active configuration: {json.dumps(config_dict, indent=2)}")

    def get_config(self) -> BlobDeltaConfig:
        """
        Get the loaded configuration.

        Returns:
            BlobDeltaConfig instance

        Raises:
            RuntimeError: If configuration hasn't been loaded
        """
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call load() first.")
        return self._config

    def reload(self) -> BlobDeltaConfig:
        """
        Reload configuration from the same sources.

        The file and environment are read again; overrides given to the last
        load() are applied on top as before.

        Returns:
            Reloaded BlobDeltaConfig instance
        """
        config_file = str(self._config_file) if self._config_file else None
        return self.load(config_file=config_file, overrides=self._overrides)
