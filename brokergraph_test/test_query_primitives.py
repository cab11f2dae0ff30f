#!/usr/bin/env python3
"""Tests for the query primitives and the local pyoxigraph connection."""

from io import StringIO
from unittest.mock import patch

import pyoxigraph as px
import pytest
from rdflib import BNode, Literal, URIRef
from rdflib.namespace import XSD

from brokergraph.db.connection_provider import ConnectionProvider
from brokergraph.db.oxigraph.oxigraph_connection import to_rdflib_term
from brokergraph.repository.query_primitives import QueryPrimitives
from brokergraph.utils.errors import BackendError


@pytest.fixture
def queries():
    primitives = QueryPrimitives(ConnectionProvider())
    primitives.update(
        'INSERT DATA { GRAPH <urn:g> { '
        '<urn:a> <urn:name> "Alpha"@en . '
        '<urn:a> <urn:rank> 1 . '
        '<urn:b> <urn:name> "Beta" . } }'
    )
    return primitives


def test_term_conversion():
    assert to_rdflib_term(px.NamedNode("urn:a")) == URIRef("urn:a")
    assert isinstance(to_rdflib_term(px.BlankNode("b0")), BNode)
    assert to_rdflib_term(px.Literal("x")) == Literal("x")
    assert to_rdflib_term(px.Literal("x", language="en")) == Literal("x", lang="en")
    assert to_rdflib_term(px.Literal("1", datatype=px.NamedNode(str(XSD.integer)))) == Literal(1)


def test_select_leaves_unbound_variables_out(queries):
    rows = queries.select(
        "SELECT ?s ?rank WHERE { GRAPH <urn:g> { ?s <urn:name> ?n OPTIONAL { ?s <urn:rank> ?rank } } } ORDER BY ?s"
    )

    assert rows == [{'s': URIRef("urn:a"), 'rank': Literal(1)}, {'s': URIRef("urn:b")}]


def test_each_call_releases_its_connection(queries):
    provider = queries.provider
    with patch.object(provider, 'release', wraps=provider.release) as release:
        queries.ask("ASK { GRAPH <urn:g> { ?s ?p ?o } }")
        queries.select("SELECT * WHERE { GRAPH <urn:g> { ?s ?p ?o } }")
        queries.construct("CONSTRUCT { ?s ?p ?o } WHERE { GRAPH <urn:g> { ?s ?p ?o } }")

    assert release.call_count == 3
    assert all(call.args[0].closed for call in release.call_args_list)


def test_syntax_error_is_backend_error(queries):
    with pytest.raises(BackendError):
        queries.select("SELEKT nothing")
    with pytest.raises(BackendError):
        queries.update("INSERT NOTHING")


def test_select_to_tsv(queries):
    output = StringIO()

    count = queries.select_to_tsv(
        "SELECT ?s ?n WHERE { GRAPH <urn:g> { ?s <urn:name> ?n } } ORDER BY ?s", output
    )

    assert count == 2
    assert output.getvalue().splitlines() == [
        "?s\t?n",
        '<urn:a>\t"Alpha"@en',
        '<urn:b>\t"Beta"',
    ]


def test_select_to_tsv_of_empty_result_keeps_header(queries):
    output = StringIO()

    count = queries.select_to_tsv("SELECT ?s ?o WHERE { GRAPH <urn:none> { ?s ?p ?o } }", output)

    assert count == 0
    assert output.getvalue() == "?s\t?o\n"


def test_select_to_tsv_lists_never_bound_variables(queries):
    output = StringIO()

    queries.select_to_tsv(
        "SELECT ?s ?missing WHERE { GRAPH <urn:g> { ?s <urn:rank> ?r OPTIONAL { ?s <urn:none> ?missing } } }",
        output
    )

    assert output.getvalue().splitlines() == ["?s\t?missing", "<urn:a>\t"]


def test_select_table_reports_projection(queries):
    variables, rows = queries.select_table("SELECT ?n ?s WHERE { GRAPH <urn:g> { ?s <urn:name> ?n } } ORDER BY ?s")

    assert variables == ['n', 's']
    assert len(rows) == 2
