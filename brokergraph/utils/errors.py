"""
Broker Graph Errors

Exception taxonomy shared by the repository, the connection layer and the
registration handler. Every exception carries an ErrorKind so callers can
map failures onto rejection reasons without inspecting the class.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of failure reported to the immediate caller."""
    NOT_FOUND = "not_found"
    MALFORMED_INPUT = "malformed_input"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    INTERNAL_ERROR = "internal_error"


class RegistryError(Exception):
    """Base exception for broker graph repository errors."""

    kind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None):
        if not message:
            message = f"{self.__class__.__name__} with empty message."
        super().__init__(message)


class NotFoundError(RegistryError):
    """Raised when a graph has no active admin fact or was never registered."""
    kind = ErrorKind.NOT_FOUND


class MalformedInputError(RegistryError):
    """Raised when a caller-supplied graph or URI is missing or unusable."""
    kind = ErrorKind.MALFORMED_INPUT


class BackendUnavailableError(RegistryError):
    """Raised when the triple store refuses the connection."""
    kind = ErrorKind.BACKEND_UNAVAILABLE


class BackendError(RegistryError):
    """Raised for any other triple store or query failure."""
    kind = ErrorKind.INTERNAL_ERROR


class InternalError(RegistryError):
    """Raised when an unexpected failure is wrapped for the caller."""
    kind = ErrorKind.INTERNAL_ERROR


def describe_error(error: BaseException) -> str:
    """
    Return a non-empty, human readable description of an exception.

    Some network exceptions carry no message at all. In that case the message
    of the underlying cause is used, and failing that the class name.

    Args:
        error: The exception to describe

    Returns:
        Description string, never empty
    """
    message = str(error)
    if message:
        return message

    cause = error.__cause__ or error.__context__
    if cause is not None and str(cause):
        return str(cause)

    return f"{error.__class__.__name__} with empty message."
