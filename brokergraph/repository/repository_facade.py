"""
Repository facade for Broker Graph.

Entry point for everything stored about registered connectors and
participants. Each entity lives in its own named graph; the admin graph
records which of those graphs are currently active.

Architecture:
- QueryPrimitives open one connection per query or update
- AdminGraphManager bootstraps the admin graph and performs flips
- Mutations (add / replace) mark their target graph active
- Reads reject graphs without an active admin fact
"""

import logging
from typing import Iterable, List, Optional, Set, Union

from rdflib import Graph

from .admin_graph import ADMIN_GRAPH_URI, AdminGraphManager
from .query_primitives import QueryPrimitives
from ..db.connection_provider import ConnectionProvider
from ..sparql.sparql_utils import (
    Triple,
    build_delete_statements,
    format_uri,
    graph_triples,
    join_updates,
)
from ..utils.errors import MalformedInputError, NotFoundError

logger = logging.getLogger(__name__)


Statements = Union[Graph, Iterable[Triple]]


class RepositoryFacade:
    """
    Facade over the triple store managing per-entity named graphs and their
    active / passive state.
    """

    def __init__(self, sparql_url: Optional[str] = None, provider: Optional[ConnectionProvider] = None,
                 admin_graph_uri: str = ADMIN_GRAPH_URI):
        """
        Initialize the repository and bootstrap the admin graph.

        Args:
            sparql_url: URL of the Fuseki dataset to use. If this is None or
                empty, a local in-memory repository is used
            provider: Pre-built connection provider, takes precedence over sparql_url
            admin_graph_uri: URI of the reserved admin graph
        """
        self.provider = provider if provider is not None else ConnectionProvider(sparql_url)
        self.queries = QueryPrimitives(self.provider)
        self.admin = AdminGraphManager(self, admin_graph_uri)
        self.admin.init_admin_graph()

    @classmethod
    def from_config(cls, config) -> "RepositoryFacade":
        """Build a repository from a BrokerGraphConfig."""
        repository_config = config.get_repository_config()
        provider = ConnectionProvider(
            config.get_sparql_url(),
            timeout=config.get_timeout(),
            username=repository_config.get('username'),
            password=repository_config.get('password')
        )
        return cls(provider=provider)

    @property
    def admin_graph_uri(self) -> str:
        return self.admin.admin_graph_uri

    # ========================================
    # Query primitives
    # ========================================

    def boolean_query(self, query: str) -> bool:
        return self.queries.ask(query)

    def select_query(self, query: str) -> List[dict]:
        return self.queries.select(query)

    def construct_query(self, query: str) -> Graph:
        return self.queries.construct(query)

    def describe_query(self, query: str) -> Graph:
        return self.queries.describe(query)

    # ========================================
    # Graph lifecycle
    # ========================================

    def graph_is_active(self, graph_uri: str) -> bool:
        """
        Determine whether a graph is active.

        A graph that was never registered and a graph that was deactivated
        both report False.
        """
        return self.admin.graph_is_active(graph_uri)

    def get_active_graphs(self) -> Set[str]:
        """Return the URIs of all active (non-passivated) named graphs."""
        return self.admin.get_active_graphs()

    def graph_exists(self, graph_uri: str) -> bool:
        """True if the named graph holds any triple, regardless of its active flag."""
        logger.debug(f"Asking whether graph {graph_uri} exists.")
        return self.queries.ask(f"ASK WHERE {{ GRAPH {format_uri(graph_uri)} {{ ?s ?p ?o . }} }}")

    def change_passivation_of_graph(self, graph_uri: str, active: bool) -> None:
        """
        Mark a named graph active or passive, e.g. when a connector becomes
        unavailable.

        Raises:
            NotFoundError: If a never registered graph is deactivated
        """
        self.admin.change_passivation_of_graph(graph_uri, active)

    def get_all_statements(self) -> Graph:
        """
        Return the union of all active graphs as one anonymous graph.

        Passive graphs are not included.
        """
        active_graphs = sorted(self.get_active_graphs())
        if not active_graphs:
            return Graph()

        from_named = " ".join(f"FROM NAMED {format_uri(g)}" for g in active_graphs)
        query = f"CONSTRUCT {{ ?s ?p ?o . }} {from_named} WHERE {{ GRAPH ?g {{ ?s ?p ?o . }} }}"
        return self.queries.construct(query)

    def get_size(self) -> int:
        """Number of active graphs."""
        return len(self.get_active_graphs())

    def get_context_ids(self) -> List[str]:
        """Return every named graph present in the dataset, active or not."""
        rows = self.queries.select("SELECT DISTINCT ?g WHERE { GRAPH ?g { ?s ?p ?o . } }")
        return [str(row['g']) for row in rows if 'g' in row]

    # ========================================
    # Graph mutation
    # ========================================

    def _to_triples(self, statements: Optional[Statements]) -> List[Triple]:
        if statements is None:
            raise MalformedInputError("Missing statements")
        if isinstance(statements, Graph):
            return graph_triples(statements)
        return list(statements)

    def _to_graph(self, statements: Optional[Statements]) -> Graph:
        if isinstance(statements, Graph):
            return statements
        graph = Graph()
        for triple in self._to_triples(statements):
            graph.add(triple)
        return graph

    def _mark_active(self, graph_uri: str) -> None:
        if not self.admin.is_admin_graph(graph_uri):
            logger.debug(f"Statements added to {graph_uri}, which is not the admin graph. Marking it as available.")
            self.change_passivation_of_graph(graph_uri, True)

    def add_statements(self, statements: Statements, graph_uri: str) -> None:
        """
        Add statements to a named graph without removing existing content.

        The graph is marked active afterwards unless it is the admin graph.
        """
        graph = self._to_graph(statements)
        format_uri(graph_uri)
        with self.provider.connection() as conn:
            conn.load(graph_uri, graph)
        self._mark_active(graph_uri)

    def replace_statements(self, statements: Statements, graph_uri: str) -> None:
        """
        Replace all statements of a named graph.

        The store receives the clear and the insert as one request and
        applies them as a single transaction, so a failed replace keeps the
        previous content. The graph is marked active afterwards unless it is
        the admin graph.
        """
        graph = self._to_graph(statements)
        format_uri(graph_uri)
        with self.provider.connection() as conn:
            conn.put(graph_uri, graph)
        self._mark_active(graph_uri)

    def remove_statements(self, statements: Statements, graph_uri: str) -> None:
        """
        Remove exactly the given statements from a named graph.

        Does nothing, and opens no connection, when there is nothing to remove.
        Does not change the active flag.
        """
        triples = self._to_triples(statements)
        if not triples:
            return
        self.queries.update(join_updates(build_delete_statements(graph_uri, triples)))

    # ========================================
    # Entity reads
    # ========================================

    def fetch_entity(self, entity_uri: str, entity_type: str = "entity") -> Graph:
        """
        Return the raw triples stored for an active entity.

        Raises:
            NotFoundError: If the entity graph is not active or holds no triples
        """
        if not self.graph_is_active(entity_uri):
            raise NotFoundError(f"The {entity_type} with URI {entity_uri} is not known to this broker or unavailable.")

        graph_ref = format_uri(entity_uri)
        result = self.queries.construct(
            f"CONSTRUCT {{ ?s ?p ?o . }} WHERE {{ GRAPH {graph_ref} {{ ?s ?p ?o . }} }}"
        )

        if len(result) == 0:
            raise NotFoundError(f"The {entity_type} with URI {entity_uri} has no statements.")

        return result

    def get_connector_graph(self, connector_uri: str) -> Graph:
        return self.fetch_entity(connector_uri, entity_type="connector")

    def get_participant_graph(self, participant_uri: str) -> Graph:
        return self.fetch_entity(participant_uri, entity_type="participant")
