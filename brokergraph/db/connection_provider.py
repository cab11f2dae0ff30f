"""
Store connection provider for Broker Graph.

Hands out one StoreConnection per logical operation, either to a remote
Fuseki dataset or to a local in-memory pyoxigraph store. The endpoint may be
downgraded from remote to local exactly once; the downgrade is a
compare-and-set under a lock and is never reverted.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import pyoxigraph as px

from .store_connection_inf import StoreConnection
from .fuseki.fuseki_connection import FusekiConnection
from .oxigraph.oxigraph_connection import OxigraphConnection

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """
    Provides scoped connections to the configured triple store.

    A non-empty sparql_url selects the remote Fuseki dataset; an empty or
    missing one selects the local in-memory store, which is created lazily
    and shared by all connections of this provider.
    """

    def __init__(self, sparql_url: Optional[str] = None, timeout: Optional[float] = None,
                 username: Optional[str] = None, password: Optional[str] = None):
        self._lock = threading.Lock()
        self._sparql_url = sparql_url or ""
        self._local_store: Optional[px.Store] = None
        self.timeout = timeout
        self.username = username
        self.password = password

        if self._sparql_url:
            logger.info(f"Setting SPARQL repository to be used: '{self._sparql_url}'")
        else:
            logger.info("Preparing memory repository")

    @property
    def sparql_url(self) -> str:
        return self._sparql_url

    @property
    def is_local(self) -> bool:
        return not self._sparql_url

    def _get_local_store(self) -> px.Store:
        with self._lock:
            if self._local_store is None:
                self._local_store = px.Store()
            return self._local_store

    def fall_back_to_local(self, reason: str = "") -> bool:
        """
        Permanently switch this provider to the local in-memory store.

        Args:
            reason: Description of the failure that triggered the switch

        Returns:
            True if this call performed the switch, False if already local
        """
        with self._lock:
            if not self._sparql_url:
                return False
            logger.warning(
                f"Could not establish connection to {self._sparql_url} - "
                f"changing configuration to use local repository instead. {reason}".rstrip()
            )
            self._sparql_url = ""
        return True

    def acquire(self) -> StoreConnection:
        """Open a new connection to the currently configured dataset."""
        sparql_url = self._sparql_url
        if sparql_url:
            return FusekiConnection(sparql_url, timeout=self.timeout,
                                    username=self.username, password=self.password)
        return OxigraphConnection(self._get_local_store())

    def release(self, connection: StoreConnection) -> None:
        connection.close()

    @contextmanager
    def connection(self) -> Iterator[StoreConnection]:
        """Acquire a connection and release it on every exit path."""
        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)
