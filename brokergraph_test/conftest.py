import logging
import sys
from pathlib import Path

import pytest
from rdflib import Graph, Literal, Namespace, URIRef
from rdflib.namespace import RDF

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from brokergraph.repository.repository_facade import RepositoryFacade

logging.basicConfig(level=logging.INFO, format='%(levelname)s:%(name)s:%(message)s')


IDS = Namespace("https://w3id.org/idsa/core/")


def connector_graph(uri: str, title: str = None) -> Graph:
    """Minimal connector self-description."""
    graph = Graph()
    graph.add((URIRef(uri), RDF.type, IDS.Connector))
    if title is not None:
        graph.add((URIRef(uri), IDS.title, Literal(title)))
    return graph


@pytest.fixture(autouse=True)
def no_remote_endpoint(monkeypatch):
    """Keep a developer's environment from pointing tests at a real store."""
    monkeypatch.delenv("BROKERGRAPH_SPARQL_URL", raising=False)
    monkeypatch.delenv("BROKERGRAPH_LOG_LEVEL", raising=False)


@pytest.fixture
def repository():
    """Repository over a fresh local in-memory store."""
    return RepositoryFacade()
