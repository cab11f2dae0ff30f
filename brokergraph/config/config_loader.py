"""
Broker Graph Configuration Loader

This module provides functionality to load and validate Broker Graph
configuration from YAML files. It supports loading from multiple possible
locations, environment variable overrides and provides default values for
missing configuration sections.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATHS = [
    "brokergraph-config.yaml",
    "brokergraph_config/brokergraph-config.yaml",
    os.path.expanduser("~/.brokergraph/brokergraph-config.yaml"),
]


class ConfigurationError(Exception):
    """Raised when there are configuration loading or validation errors."""
    pass


class BrokerGraphConfig:
    """
    Broker Graph configuration loader and manager.

    Environment variables (a .env file in the working directory is loaded
    first when present):
        BROKERGRAPH_SPARQL_URL: Fuseki dataset URL, empty selects the local store
        BROKERGRAPH_LOG_LEVEL: Log level for the command line tools
    """

    def __init__(self, config_path: Optional[str] = None, load_env: bool = True):
        """
        Initialize the configuration loader.

        Args:
            config_path: Path to configuration file. If None, uses default locations or built-in defaults.
            load_env: Whether to read a .env file before applying environment overrides
        """
        self.config_data: Dict[str, Any] = {}
        self.config_path: Optional[str] = None

        if load_env:
            load_dotenv(dotenv_path=Path.cwd() / '.env')

        if config_path is not None:
            self.load_config(config_path)
        else:
            self._load_default_config()

    def load_config(self, config_path: str) -> None:
        """
        Read repository and app settings from a YAML file.

        An empty file is treated as an empty mapping, so every setting falls
        back to its built-in default.

        Raises:
            ConfigurationError: If the file is missing, unreadable, not valid
                YAML, or its top level is not a mapping
        """
        config_file = Path(config_path)
        if not config_file.is_file():
            raise ConfigurationError(f"Broker graph config file not found: {config_path}")

        try:
            data = yaml.safe_load(config_file.read_text(encoding='utf-8'))
        except OSError as e:
            raise ConfigurationError(f"Cannot read broker graph config {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Broker graph config {config_path} is not valid YAML: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Broker graph config {config_path} must map section names to settings, "
                f"got {type(data).__name__}"
            )

        self.config_data = data
        self.config_path = str(config_file.resolve())
        logger.info(f"Broker graph settings read from {self.config_path}")

    def _load_default_config(self) -> None:
        for path in DEFAULT_CONFIG_PATHS:
            if os.path.exists(path):
                self.load_config(path)
                return

        self.config_data = self._get_default_config()
        self.config_path = "<built-in defaults>"
        logger.debug("Using built-in default configuration")

    def _get_default_config(self) -> Dict[str, Any]:
        return {
            'repository': {
                'sparql_url': '',
                'timeout': None,
                'username': None,
                'password': None
            },
            'app': {
                'log_level': 'INFO'
            }
        }

    def get_repository_config(self) -> Dict[str, Any]:
        defaults = self._get_default_config()['repository']
        config = self.config_data.get('repository') or {}
        return {**defaults, **config}

    def get_app_config(self) -> Dict[str, Any]:
        defaults = self._get_default_config()['app']
        config = self.config_data.get('app') or {}
        return {**defaults, **config}

    def get_sparql_url(self) -> str:
        """
        SPARQL endpoint of the remote store.

        BROKERGRAPH_SPARQL_URL overrides the file, an empty value selects the
        local in-memory repository.
        """
        url = os.getenv('BROKERGRAPH_SPARQL_URL', self.get_repository_config().get('sparql_url'))
        return (url or '').strip()

    def get_timeout(self) -> Optional[float]:
        timeout = self.get_repository_config().get('timeout')
        if timeout is None:
            return None
        return float(timeout)

    def get_log_level(self) -> str:
        return os.getenv('BROKERGRAPH_LOG_LEVEL', self.get_app_config().get('log_level', 'INFO'))

    def validate_config(self) -> None:
        """
        Validate the loaded configuration.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        sparql_url = self.get_sparql_url()
        if sparql_url and not sparql_url.startswith(('http://', 'https://')):
            raise ConfigurationError(f"SPARQL URL must be an http(s) URL: {sparql_url}")

        try:
            timeout = self.get_timeout()
        except (TypeError, ValueError):
            raise ConfigurationError("Repository timeout must be a number")
        if timeout is not None and timeout <= 0:
            raise ConfigurationError(f"Invalid repository timeout: {timeout}")

        logger.info("Configuration validation passed")

    def __str__(self) -> str:
        return f"BrokerGraphConfig(path={self.config_path}, sections={list(self.config_data.keys())})"


# Global configuration instance
_config_instance: Optional[BrokerGraphConfig] = None


def get_config(config_path: Optional[str] = None) -> BrokerGraphConfig:
    """
    Get the global configuration instance.

    Args:
        config_path: Optional path to configuration file. Only used on first call.
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = BrokerGraphConfig(config_path)
        _config_instance.validate_config()

    return _config_instance


def reload_config(config_path: Optional[str] = None) -> BrokerGraphConfig:
    """Reload the global configuration instance."""
    global _config_instance

    _config_instance = BrokerGraphConfig(config_path)
    _config_instance.validate_config()

    return _config_instance
