"""
Admin graph management for Broker Graph.

The admin graph is one reserved named graph holding, for every other named
graph, a single fact (graphUri, graphIsActive, true|false). A graph without
any fact is unknown; a false fact marks it passive (soft-deleted).
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING

from rdflib import Graph, Literal, URIRef

from ..sparql.sparql_utils import format_uri
from ..utils.errors import BackendUnavailableError, NotFoundError, describe_error

if TYPE_CHECKING:
    from .repository_facade import RepositoryFacade

logger = logging.getLogger(__name__)


ADMIN_GRAPH_URI = "https://broker.ids.isst.fraunhofer.de/admin"
GRAPH_IS_ACTIVE = "https://w3id.org/idsa/core/graphIsActive"


class AdminGraphState(Enum):
    UNINITIALIZED = "uninitialized"
    BOOTSTRAPPED = "bootstrapped"


class AdminGraphManager:
    """
    Owns the admin graph: bootstraps it and flips graphs between active and
    passive.

    Writes go through the repository's append and remove paths; appending to
    the admin graph itself never triggers another flip.
    """

    def __init__(self, repository: "RepositoryFacade", admin_graph_uri: str = ADMIN_GRAPH_URI):
        self.repository = repository
        self.admin_graph_uri = admin_graph_uri
        self.state = AdminGraphState.UNINITIALIZED

    @property
    def queries(self):
        return self.repository.queries

    def is_admin_graph(self, graph_uri: str) -> bool:
        return str(graph_uri) == self.admin_graph_uri

    def _admin_graph_exists(self) -> bool:
        return self.queries.ask(
            f"ASK WHERE {{ GRAPH {format_uri(self.admin_graph_uri)} {{ ?s ?p ?o . }} }}"
        )

    def init_admin_graph(self) -> None:
        """
        Make sure the admin graph exists.

        If the remote store refuses the connection, the provider is switched
        to the local repository for good and the check is repeated there.
        Any other failure propagates.
        """
        logger.info(f"Admin graph set to {self.admin_graph_uri}")
        logger.debug("Asking whether admin graph exists yet.")

        try:
            graph_exists = self._admin_graph_exists()
        except BackendUnavailableError as e:
            self.repository.provider.fall_back_to_local(describe_error(e))
            graph_exists = self._admin_graph_exists()

        if not graph_exists:
            logger.info("Admin graph does not yet exist. Initializing it with one statement.")
            # the admin graph records itself as passive
            admin_graph = Graph()
            admin_graph.add((URIRef(self.admin_graph_uri), URIRef(GRAPH_IS_ACTIVE), Literal(False)))
            with self.repository.provider.connection() as conn:
                conn.put(self.admin_graph_uri, admin_graph)
        else:
            logger.debug("Admin graph found.")

        self.state = AdminGraphState.BOOTSTRAPPED

    def has_admin_fact(self, graph_uri: str) -> bool:
        """True if the admin graph holds any fact about graph_uri, active or not."""
        return self.queries.ask(
            f"ASK WHERE {{ GRAPH {format_uri(self.admin_graph_uri)} "
            f"{{ {format_uri(graph_uri)} {format_uri(GRAPH_IS_ACTIVE)} ?active . }} }}"
        )

    def graph_is_active(self, graph_uri: str) -> bool:
        logger.debug(f"Asking whether graph {graph_uri} is active.")
        return self.queries.ask(
            f"ASK WHERE {{ GRAPH {format_uri(self.admin_graph_uri)} "
            f"{{ {format_uri(graph_uri)} {format_uri(GRAPH_IS_ACTIVE)} true . }} }}"
        )

    def get_active_graphs(self) -> set:
        rows = self.queries.select(
            f"SELECT ?graph WHERE {{ GRAPH {format_uri(self.admin_graph_uri)} "
            f"{{ ?graph {format_uri(GRAPH_IS_ACTIVE)} true . }} }}"
        )
        return {str(row['graph']) for row in rows if 'graph' in row}

    def remove_graph_from_admin_graph(self, graph_uri: str) -> None:
        """Remove every statement about graph_uri from the admin graph."""
        subject = URIRef(str(graph_uri))
        rows = self.queries.select(
            f"SELECT ?p ?o WHERE {{ GRAPH {format_uri(self.admin_graph_uri)} "
            f"{{ {format_uri(graph_uri)} ?p ?o . }} }}"
        )
        statements = [(subject, row['p'], row['o']) for row in rows]
        self.repository.remove_statements(statements, self.admin_graph_uri)

    def change_passivation_of_graph(self, graph_uri: str, active: bool) -> None:
        """
        Flip a named graph between active and passive.

        The old fact is removed and the new one appended as two separate
        store operations. Repeating the call converges on exactly one fact.

        Raises:
            NotFoundError: If deactivation is requested for a graph that was
                never registered
        """
        format_uri(graph_uri)

        if not active and not self.is_admin_graph(graph_uri):
            if not self.repository.graph_exists(graph_uri) and not self.has_admin_fact(graph_uri):
                raise NotFoundError(f"The graph {graph_uri} does not exist")

        logger.info(f"Changing passivation of graph {graph_uri}. Is now active: {active}")
        self.remove_graph_from_admin_graph(graph_uri)

        new_statements = Graph()
        new_statements.add((URIRef(str(graph_uri)), URIRef(GRAPH_IS_ACTIVE), Literal(bool(active))))
        self.repository.add_statements(new_statements, self.admin_graph_uri)
