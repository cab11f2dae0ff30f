"""
Query primitives for Broker Graph.

Uniform wrappers for the four SPARQL query forms plus SPARQL Update. Every
call acquires a connection, executes, captures the full result and releases
the connection, so no query handle outlives the call that opened it.
"""

import logging
from typing import Dict, List, TextIO, Tuple

from rdflib import Graph
from rdflib.term import Identifier

from ..db.connection_provider import ConnectionProvider

logger = logging.getLogger(__name__)


class QueryPrimitives:

    def __init__(self, provider: ConnectionProvider):
        self.provider = provider

    def ask(self, query: str) -> bool:
        """Evaluate an ASK query."""
        with self.provider.connection() as conn:
            return conn.query_ask(query)

    def select(self, query: str) -> List[Dict[str, Identifier]]:
        """Evaluate a SELECT query into a fully materialized list of binding rows."""
        with self.provider.connection() as conn:
            return conn.query_select(query)

    def select_table(self, query: str) -> Tuple[List[str], List[Dict[str, Identifier]]]:
        """Evaluate a SELECT query into its projected variables and binding rows."""
        with self.provider.connection() as conn:
            return conn.query_select_table(query)

    def construct(self, query: str) -> Graph:
        """Evaluate a CONSTRUCT query into an anonymous graph."""
        with self.provider.connection() as conn:
            return conn.query_construct(query)

    def describe(self, query: str) -> Graph:
        """Evaluate a DESCRIBE query into an anonymous graph."""
        with self.provider.connection() as conn:
            return conn.query_describe(query)

    def update(self, update: str) -> None:
        """Execute a SPARQL 1.1 Update request."""
        with self.provider.connection() as conn:
            conn.update(update)

    def select_to_tsv(self, query: str, output: TextIO) -> int:
        """
        Evaluate a SELECT query and write the result as TSV.

        The header row lists the projected variables in query order, each
        prefixed with '?', even when the result is empty. Terms are written
        in N-Triples syntax and unbound values are left empty.

        Args:
            query: SELECT query
            output: Text stream receiving the TSV

        Returns:
            Number of result rows written
        """
        variables, rows = self.select_table(query)

        output.write("\t".join(f"?{var}" for var in variables) + "\n")
        for row in rows:
            output.write("\t".join(row[var].n3() if var in row else "" for var in variables) + "\n")

        return len(rows)
