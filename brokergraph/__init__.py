# -*- coding: utf-8 -*-
import logging


__version__ = "0.1.0"


logging.getLogger("brokergraph").addHandler(logging.NullHandler())


from .repository.repository_facade import RepositoryFacade
from .repository.admin_graph import ADMIN_GRAPH_URI, GRAPH_IS_ACTIVE
from .db.connection_provider import ConnectionProvider
from .utils.errors import (
    ErrorKind,
    RegistryError,
    NotFoundError,
    MalformedInputError,
    BackendUnavailableError,
    BackendError,
    InternalError,
)

__all__ = [
    'RepositoryFacade',
    'ConnectionProvider',
    'ADMIN_GRAPH_URI',
    'GRAPH_IS_ACTIVE',
    'ErrorKind',
    'RegistryError',
    'NotFoundError',
    'MalformedInputError',
    'BackendUnavailableError',
    'BackendError',
    'InternalError',
]
