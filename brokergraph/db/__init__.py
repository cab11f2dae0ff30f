from .store_connection_inf import StoreConnection
from .connection_provider import ConnectionProvider

__all__ = [
    'StoreConnection',
    'ConnectionProvider',
]
