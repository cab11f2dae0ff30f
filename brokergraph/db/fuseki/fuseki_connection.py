"""
Fuseki Connection Implementation for Broker Graph

This module provides the remote StoreConnection using Apache Jena Fuseki's
HTTP endpoints for query, update and graph store operations.

Endpoints, relative to the dataset URL:
- {dataset}/sparql  SPARQL query
- {dataset}/update  SPARQL update
- {dataset}/data    Graph store protocol (load / put)
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from rdflib import BNode, Graph, Literal, URIRef
from rdflib.term import Identifier

from ..store_connection_inf import StoreConnection
from ...sparql.sparql_utils import format_uri
from ...utils.errors import BackendError, BackendUnavailableError


SPARQL_RESULTS_JSON = 'application/sparql-results+json'
N_TRIPLES = 'application/n-triples'


class FusekiConnection(StoreConnection):
    """
    Connection to a Fuseki dataset over HTTP.

    Each connection owns its own requests Session; close() closes it, so no
    HTTP connection is shared between two logical operations.
    """

    def __init__(self, dataset_url: str, timeout: Optional[float] = None,
                 username: Optional[str] = None, password: Optional[str] = None):
        """
        Initialize a Fuseki connection.

        Args:
            dataset_url: Dataset URL (e.g., 'http://localhost:3030/broker')
            timeout: Optional request timeout in seconds, None waits indefinitely
            username: Optional username for basic authentication
            password: Optional password for basic authentication
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self.dataset_url = dataset_url.rstrip('/')
        self.timeout = timeout

        self.query_url = f"{self.dataset_url}/sparql"
        self.update_url = f"{self.dataset_url}/update"
        self.graph_store_url = f"{self.dataset_url}/data"

        self.session = requests.Session()
        if username and password:
            self.session.auth = (username, password)

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Send one HTTP request to Fuseki and check the response status.

        TLS, proxy and connect-timeout failures are subclasses of
        requests' ConnectionError but do not mean the endpoint refused the
        connection, so they are reported as BackendError.

        Raises:
            BackendUnavailableError: If the connection is refused
            BackendError: On any other transport failure or a non-2xx status
        """
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.exceptions.SSLError,
                requests.exceptions.ProxyError,
                requests.exceptions.ConnectTimeout) as e:
            raise BackendError(f"Request to {url} failed: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise BackendUnavailableError(f"Could not connect to {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise BackendError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 300:
            self.logger.error(f"Fuseki request failed: {response.status_code} - {response.text}")
            raise BackendError(f"Fuseki request to {url} failed: {response.status_code} - {response.text}")

        return response

    def _post_query(self, query: str, accept: str) -> requests.Response:
        self.logger.debug(f"Query: {query}")
        return self._request(
            'POST',
            self.query_url,
            data=query.encode('utf-8'),
            headers={
                'Content-Type': 'application/sparql-query; charset=utf-8',
                'Accept': accept
            }
        )

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid SPARQL JSON results from {self.query_url}: {e}") from e

    def _parse_graph(self, response: requests.Response) -> Graph:
        graph = Graph()
        if response.text.strip():
            try:
                graph.parse(data=response.text, format='nt')
            except Exception as e:
                raise BackendError(f"Invalid N-Triples response from {self.query_url}: {e}") from e
        return graph

    def query_ask(self, query: str) -> bool:
        result = self._json(self._post_query(query, SPARQL_RESULTS_JSON))
        return bool(result.get('boolean', False))

    def query_select_table(self, query: str) -> Tuple[List[str], List[Dict[str, Identifier]]]:
        result = self._json(self._post_query(query, SPARQL_RESULTS_JSON))
        variables = list(result.get('head', {}).get('vars', []))
        bindings = result.get('results', {}).get('bindings', [])
        return variables, [
            {var: self._convert_binding(value_info) for var, value_info in binding.items()}
            for binding in bindings
        ]

    def query_construct(self, query: str) -> Graph:
        return self._parse_graph(self._post_query(query, N_TRIPLES))

    def query_describe(self, query: str) -> Graph:
        return self._parse_graph(self._post_query(query, N_TRIPLES))

    def update(self, update: str) -> None:
        self.logger.debug(f"Update: {update}")
        self._request(
            'POST',
            self.update_url,
            data=update.encode('utf-8'),
            headers={'Content-Type': 'application/sparql-update; charset=utf-8'}
        )

    def load(self, graph_uri: str, graph: Graph) -> None:
        if len(graph) == 0:
            return
        format_uri(graph_uri)
        self._request(
            'POST',
            self.graph_store_url,
            params={'graph': str(graph_uri)},
            data=graph.serialize(format='nt').encode('utf-8'),
            headers={'Content-Type': N_TRIPLES}
        )

    def put(self, graph_uri: str, graph: Graph) -> None:
        format_uri(graph_uri)
        self._request(
            'PUT',
            self.graph_store_url,
            params={'graph': str(graph_uri)},
            data=graph.serialize(format='nt').encode('utf-8'),
            headers={'Content-Type': N_TRIPLES}
        )

    def close(self) -> None:
        self.session.close()

    @staticmethod
    def _convert_binding(value_info: Dict[str, Any]) -> Identifier:
        """Convert one SPARQL JSON result value to an rdflib term."""
        value_type = value_info.get('type')
        value = value_info.get('value', '')

        if value_type == 'uri':
            return URIRef(value)
        if value_type == 'bnode':
            return BNode(value)
        if value_type in ('literal', 'typed-literal'):
            lang = value_info.get('xml:lang')
            if lang:
                return Literal(value, lang=lang)
            datatype = value_info.get('datatype')
            return Literal(value, datatype=URIRef(datatype) if datatype else None)

        raise BackendError(f"Unsupported SPARQL result term type: {value_type}")
