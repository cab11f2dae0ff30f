"""
SPARQL Helper Utilities for Broker Graph

Builds query and update strings from caller-supplied URIs and rdflib terms.
Every term is rendered through rdflib's N3 serialization after validation, so
a graph URI can never break out of its IRI reference.
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple, Union

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.term import Identifier

from ..utils.errors import MalformedInputError


Triple = Tuple[Identifier, Identifier, Identifier]

# Characters that may not appear inside a SPARQL IRIREF.
_INVALID_IRI_CHARS = re.compile(r'[\x00-\x20<>"{}|^`\\]')

_BNODE_LABEL = re.compile(r'^[A-Za-z0-9_]([A-Za-z0-9_.\-]*[A-Za-z0-9_\-])?$')


def format_uri(uri: Union[str, URIRef]) -> str:
    """
    Render a URI as a SPARQL IRI reference.

    Args:
        uri: URI string or URIRef

    Returns:
        The URI enclosed in angle brackets

    Raises:
        MalformedInputError: If the URI is empty or contains characters
            that are not allowed in an IRI reference
    """
    if uri is None or str(uri) == "":
        raise MalformedInputError("Graph or resource URI is missing")

    value = str(uri)
    if _INVALID_IRI_CHARS.search(value):
        raise MalformedInputError(f"Not a valid IRI: {value!r}")

    return URIRef(value).n3()


def format_term(term: Identifier, bnode_vars: Optional[Dict[BNode, str]] = None) -> str:
    """
    Render an rdflib term for use in a SPARQL query or update.

    Args:
        term: URIRef, BNode or Literal
        bnode_vars: When given, blank nodes are rendered as variables and the
            mapping is filled in as new blank nodes are seen

    Returns:
        SPARQL representation of the term
    """
    if isinstance(term, URIRef):
        return format_uri(term)

    if isinstance(term, BNode):
        if bnode_vars is not None:
            if term not in bnode_vars:
                bnode_vars[term] = f"?b{len(bnode_vars)}"
            return bnode_vars[term]
        if not _BNODE_LABEL.match(str(term)):
            raise MalformedInputError(f"Not a valid blank node label: {str(term)!r}")
        return term.n3()

    if isinstance(term, Literal):
        if term.datatype is not None:
            format_uri(term.datatype)
        return term.n3()

    raise MalformedInputError(f"Unsupported RDF term: {term!r}")


def format_triple(triple: Triple, bnode_vars: Optional[Dict[BNode, str]] = None) -> str:
    """Render one triple pattern terminated by a dot."""
    s, p, o = triple
    return f"{format_term(s, bnode_vars)} {format_term(p, bnode_vars)} {format_term(o, bnode_vars)} ."


def has_blank_node(triple: Triple) -> bool:
    return any(isinstance(term, BNode) for term in triple)


def triples_block(triples: Iterable[Triple], bnode_vars: Optional[Dict[BNode, str]] = None) -> str:
    return "\n".join(format_triple(t, bnode_vars) for t in triples)


def build_insert_data(graph_uri: str, triples: Iterable[Triple]) -> Optional[str]:
    """
    Build an INSERT DATA operation placing triples into a named graph.

    Returns None when there is nothing to insert.
    """
    block = triples_block(triples)
    if not block:
        return None
    return f"INSERT DATA {{ GRAPH {format_uri(graph_uri)} {{\n{block}\n}} }}"


def build_clear_graph(graph_uri: str) -> str:
    return f"CLEAR SILENT GRAPH {format_uri(graph_uri)}"


def build_delete_statements(graph_uri: str, triples: Iterable[Triple]) -> List[str]:
    """
    Build update operations removing exactly the given triples from a graph.

    Ground triples are removed with DELETE DATA. Blank nodes cannot appear in
    DELETE DATA, so triples mentioning them are matched structurally with a
    DELETE WHERE in which every blank node becomes a variable.

    Returns:
        List of update operations, empty when there is nothing to delete
    """
    ground = []
    with_bnodes = []
    for triple in triples:
        if has_blank_node(triple):
            with_bnodes.append(triple)
        else:
            ground.append(triple)

    graph_ref = format_uri(graph_uri)
    operations = []

    if ground:
        operations.append(f"DELETE DATA {{ GRAPH {graph_ref} {{\n{triples_block(ground)}\n}} }}")

    if with_bnodes:
        bnode_vars: Dict[BNode, str] = {}
        pattern = triples_block(with_bnodes, bnode_vars)
        operations.append(f"DELETE WHERE {{ GRAPH {graph_ref} {{\n{pattern}\n}} }}")

    return operations


def join_updates(operations: Iterable[Optional[str]]) -> str:
    """Join update operations into a single request."""
    return " ;\n".join(op for op in operations if op)


def graph_triples(graph: Graph) -> List[Triple]:
    """Materialize the triples of an rdflib graph in a stable order."""
    return sorted(graph, key=lambda t: (str(t[0]), str(t[1]), str(t[2])))
