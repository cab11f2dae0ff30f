#!/usr/bin/env python3
"""
Tests for the Fuseki HTTP connection: request shape, result conversion and
error mapping.
"""

from unittest.mock import Mock, patch

import pytest
import requests
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import XSD

from brokergraph.db.fuseki.fuseki_connection import FusekiConnection
from brokergraph.utils.errors import BackendError, BackendUnavailableError, MalformedInputError


DATASET = "http://localhost:3030/broker/"


def fake_response(status_code=200, json_data=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = json_data
    return response


@pytest.fixture
def connection():
    conn = FusekiConnection(DATASET, timeout=10)
    yield conn
    conn.close()


def test_endpoint_urls(connection):
    assert connection.query_url == "http://localhost:3030/broker/sparql"
    assert connection.update_url == "http://localhost:3030/broker/update"
    assert connection.graph_store_url == "http://localhost:3030/broker/data"


def test_ask(connection):
    with patch.object(connection.session, 'request',
                      return_value=fake_response(json_data={'head': {}, 'boolean': True})) as request:
        assert connection.query_ask("ASK { ?s ?p ?o }") is True

    method, url = request.call_args.args
    assert (method, url) == ('POST', connection.query_url)
    assert request.call_args.kwargs['data'] == b"ASK { ?s ?p ?o }"
    assert request.call_args.kwargs['headers']['Accept'] == 'application/sparql-results+json'
    assert request.call_args.kwargs['timeout'] == 10


def test_select_converts_bindings(connection):
    results = {
        'head': {'vars': ['s', 'label', 'n', 'b', 'missing']},
        'results': {'bindings': [
            {
                's': {'type': 'uri', 'value': 'urn:c1'},
                'label': {'type': 'literal', 'value': 'Konnektor', 'xml:lang': 'de'},
                'n': {'type': 'typed-literal', 'value': '42', 'datatype': str(XSD.integer)},
                'b': {'type': 'bnode', 'value': 'b0'},
            },
            {
                's': {'type': 'uri', 'value': 'urn:c2'},
                'label': {'type': 'literal', 'value': 'plain'},
            },
        ]}
    }

    with patch.object(connection.session, 'request', return_value=fake_response(json_data=results)):
        rows = connection.query_select("SELECT * WHERE { ?s ?p ?o }")

    assert rows[0] == {
        's': URIRef('urn:c1'),
        'label': Literal('Konnektor', lang='de'),
        'n': Literal(42),
        'b': BNode('b0'),
    }
    assert rows[1] == {'s': URIRef('urn:c2'), 'label': Literal('plain')}


def test_select_rejects_unknown_term_type(connection):
    results = {'results': {'bindings': [{'x': {'type': 'triple', 'value': ''}}]}}
    with patch.object(connection.session, 'request', return_value=fake_response(json_data=results)):
        with pytest.raises(BackendError):
            connection.query_select("SELECT ?x WHERE { ?x ?p ?o }")


def test_construct_parses_ntriples(connection):
    body = '<urn:c1> <urn:p> "value" .\n<urn:c1> <urn:q> <urn:o> .\n'
    with patch.object(connection.session, 'request', return_value=fake_response(text=body)) as request:
        graph = connection.query_construct("CONSTRUCT { ?s ?p ?o } WHERE { ?s ?p ?o }")

    assert request.call_args.kwargs['headers']['Accept'] == 'application/n-triples'
    assert len(graph) == 2
    assert (URIRef('urn:c1'), URIRef('urn:p'), Literal('value')) in graph


def test_describe_with_empty_body(connection):
    with patch.object(connection.session, 'request', return_value=fake_response(text="")):
        graph = connection.query_describe("DESCRIBE <urn:nothing>")
    assert len(graph) == 0


def test_update(connection):
    update = 'INSERT DATA { GRAPH <urn:g> { <urn:s> <urn:p> "ä" . } }'
    with patch.object(connection.session, 'request', return_value=fake_response(204)) as request:
        connection.update(update)

    assert request.call_args.args == ('POST', connection.update_url)
    assert request.call_args.kwargs['data'] == update.encode('utf-8')
    assert request.call_args.kwargs['headers']['Content-Type'] == 'application/sparql-update; charset=utf-8'


def test_load_and_put_use_graph_store(connection):
    graph = Graph()
    graph.add((URIRef('urn:s'), URIRef('urn:p'), Literal('o')))

    with patch.object(connection.session, 'request', return_value=fake_response(201)) as request:
        connection.load('urn:g', graph)
        connection.put('urn:g', graph)

    load_call, put_call = request.call_args_list
    assert load_call.args == ('POST', connection.graph_store_url)
    assert put_call.args == ('PUT', connection.graph_store_url)
    for call in (load_call, put_call):
        assert call.kwargs['params'] == {'graph': 'urn:g'}
        assert call.kwargs['headers']['Content-Type'] == 'application/n-triples'
        assert b'<urn:s> <urn:p> "o" .' in call.kwargs['data']


def test_load_of_empty_graph_sends_nothing(connection):
    with patch.object(connection.session, 'request') as request:
        connection.load('urn:g', Graph())
    request.assert_not_called()


def test_put_rejects_invalid_graph_uri(connection):
    with patch.object(connection.session, 'request') as request:
        with pytest.raises(MalformedInputError):
            connection.put('urn:g>', Graph())
    request.assert_not_called()


def test_connection_refused_is_unavailable(connection):
    refused = requests.exceptions.ConnectionError("Connection refused")
    with patch.object(connection.session, 'request', side_effect=refused):
        with pytest.raises(BackendUnavailableError) as excinfo:
            connection.query_ask("ASK { ?s ?p ?o }")
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)


def test_read_timeout_is_backend_error(connection):
    with patch.object(connection.session, 'request', side_effect=requests.exceptions.ReadTimeout()):
        with pytest.raises(BackendError) as excinfo:
            connection.update("CLEAR ALL")
    assert not isinstance(excinfo.value, BackendUnavailableError)


def test_http_error_status(connection):
    with patch.object(connection.session, 'request',
                      return_value=fake_response(400, text="Parse error")):
        with pytest.raises(BackendError) as excinfo:
            connection.query_select("SELECT")
    assert "400" in str(excinfo.value)
    assert "Parse error" in str(excinfo.value)


def test_invalid_json_results(connection):
    response = fake_response()
    response.json.side_effect = ValueError("Expecting value")
    with patch.object(connection.session, 'request', return_value=response):
        with pytest.raises(BackendError):
            connection.query_ask("ASK { ?s ?p ?o }")


def test_basic_auth():
    conn = FusekiConnection(DATASET, username="admin", password="secret")
    assert conn.session.auth == ("admin", "secret")
    conn.close()


def test_select_table_uses_head_vars(connection):
    results = {'head': {'vars': ['s', 'o']}, 'results': {'bindings': []}}
    with patch.object(connection.session, 'request', return_value=fake_response(json_data=results)):
        variables, rows = connection.query_select_table("SELECT ?s ?o WHERE { ?s ?p ?o }")

    assert variables == ['s', 'o']
    assert rows == []


@pytest.mark.parametrize("failure", [
    requests.exceptions.SSLError("certificate verify failed"),
    requests.exceptions.ProxyError("Cannot connect to proxy"),
    requests.exceptions.ConnectTimeout("timed out"),
])
def test_non_refusal_connection_errors_are_backend_errors(connection, failure):
    with patch.object(connection.session, 'request', side_effect=failure):
        with pytest.raises(BackendError) as excinfo:
            connection.query_ask("ASK { ?s ?p ?o }")
    assert not isinstance(excinfo.value, BackendUnavailableError)
