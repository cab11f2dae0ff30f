"""
Broker Graph Utilities

Shared error types and logging helpers.
"""

from .errors import (
    ErrorKind,
    RegistryError,
    NotFoundError,
    MalformedInputError,
    BackendUnavailableError,
    BackendError,
    InternalError,
    describe_error,
)

__all__ = [
    'ErrorKind',
    'RegistryError',
    'NotFoundError',
    'MalformedInputError',
    'BackendUnavailableError',
    'BackendError',
    'InternalError',
    'describe_error',
]
