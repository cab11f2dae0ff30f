from .config_loader import BrokerGraphConfig, ConfigurationError, get_config, reload_config

__all__ = [
    'BrokerGraphConfig',
    'ConfigurationError',
    'get_config',
    'reload_config',
]
