"""
Abstract interface for Broker Graph triple store connections.

A connection is bound to one dataset (a remote Fuseki dataset or the local
in-memory store) and lives for exactly one logical operation. Results are
always fully materialized before a method returns, so closing the connection
never invalidates a result.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from rdflib import Graph
from rdflib.term import Identifier

from ..sparql.sparql_utils import build_clear_graph, build_insert_data, graph_triples, join_updates


class StoreConnection(ABC):
    """
    Abstract connection to a SPARQL-capable dataset.

    Query methods cover the four SPARQL query forms; update() executes a
    SPARQL 1.1 Update request. load() and put() mirror the graph store
    protocol: load appends to a named graph, put overwrites it.
    """

    @abstractmethod
    def query_ask(self, query: str) -> bool:
        """Execute an ASK query."""
        pass

    @abstractmethod
    def query_select_table(self, query: str) -> Tuple[List[str], List[Dict[str, Identifier]]]:
        """
        Execute a SELECT query.

        Returns:
            The projected variable names (without '?') in query order, and
            the rows mapping variable names to rdflib terms. Unbound variables
            are absent from a row but still listed in the projection.
        """
        pass

    def query_select(self, query: str) -> List[Dict[str, Identifier]]:
        """Execute a SELECT query and return only its rows."""
        return self.query_select_table(query)[1]

    @abstractmethod
    def query_construct(self, query: str) -> Graph:
        """Execute a CONSTRUCT query and return the triples as an anonymous graph."""
        pass

    @abstractmethod
    def query_describe(self, query: str) -> Graph:
        """Execute a DESCRIBE query and return the triples as an anonymous graph."""
        pass

    @abstractmethod
    def update(self, update: str) -> None:
        """Execute a SPARQL 1.1 Update request."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release any resources held by the connection."""
        pass

    def load(self, graph_uri: str, graph: Graph) -> None:
        """Add the triples of graph to the named graph, keeping existing content."""
        insert = build_insert_data(graph_uri, graph_triples(graph))
        if insert:
            self.update(insert)

    def put(self, graph_uri: str, graph: Graph) -> None:
        """Replace the content of the named graph with the triples of graph."""
        self.update(join_updates([
            build_clear_graph(graph_uri),
            build_insert_data(graph_uri, graph_triples(graph)),
        ]))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False
