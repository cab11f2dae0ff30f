"""
Local in-memory connection backed by pyoxigraph.

The pyoxigraph Store is owned by the connection provider and shared by every
connection it hands out; a connection only borrows it.
"""

import logging
from typing import Dict, List, Tuple

import pyoxigraph as px
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import XSD
from rdflib.term import Identifier

from ..store_connection_inf import StoreConnection
from ...utils.errors import BackendError

logger = logging.getLogger(__name__)


def to_rdflib_term(term) -> Identifier:
    """
    Convert a pyoxigraph term to the equivalent rdflib term.

    Oxigraph reports every plain literal with the xsd:string datatype, so
    xsd:string literals come back as plain rdflib Literals. Fuseki results
    omit xsd:string the same way, so both backends return Literal("x") for
    a triple stored as Literal("x", datatype=XSD.string).
    """
    if isinstance(term, px.NamedNode):
        return URIRef(term.value)
    if isinstance(term, px.BlankNode):
        return BNode(term.value)
    if isinstance(term, px.Literal):
        if term.language:
            return Literal(term.value, lang=term.language)
        datatype = term.datatype.value
        if datatype == str(XSD.string):
            return Literal(term.value)
        return Literal(term.value, datatype=URIRef(datatype))
    raise BackendError(f"Unsupported pyoxigraph term: {term!r}")


class OxigraphConnection(StoreConnection):
    """Connection to the local in-memory dataset."""

    def __init__(self, store: px.Store):
        self.store = store
        self.closed = False

    def _query(self, query: str):
        logger.debug(f"Query: {query}")
        try:
            return self.store.query(query)
        except (SyntaxError, ValueError, OSError) as e:
            raise BackendError(f"Local SPARQL query failed: {e}") from e

    def query_ask(self, query: str) -> bool:
        result = self._query(query)
        # older pyoxigraph releases return a plain bool for ASK
        if isinstance(result, bool):
            return result
        return bool(result)

    def query_select_table(self, query: str) -> Tuple[List[str], List[Dict[str, Identifier]]]:
        solutions = self._query(query)
        variables = list(solutions.variables)
        rows = []
        for solution in solutions:
            row = {}
            for var in variables:
                value = solution[var]
                if value is not None:
                    row[var.value] = to_rdflib_term(value)
            rows.append(row)
        return [var.value for var in variables], rows

    def _query_graph(self, query: str) -> Graph:
        graph = Graph()
        for triple in self._query(query):
            graph.add((
                to_rdflib_term(triple.subject),
                to_rdflib_term(triple.predicate),
                to_rdflib_term(triple.object)
            ))
        return graph

    def query_construct(self, query: str) -> Graph:
        return self._query_graph(query)

    def query_describe(self, query: str) -> Graph:
        return self._query_graph(query)

    def update(self, update: str) -> None:
        logger.debug(f"Update: {update}")
        try:
            self.store.update(update)
        except (SyntaxError, ValueError, OSError) as e:
            raise BackendError(f"Local SPARQL update failed: {e}") from e

    def close(self) -> None:
        self.closed = True
