#!/usr/bin/env python3
"""
Broker Graph Admin Command Line Interface

Inspect and maintain the named graphs of a broker repository: list active
graphs, flip graphs between active and passive, load entity graphs and dump
everything currently visible.
"""

import argparse
import os
import sys
from typing import List, Optional

from rdflib import Graph
from rdflib.exceptions import ParserError
from rdflib.plugin import PluginException
from rdflib.plugins.parsers.notation3 import BadSyntax

from brokergraph.config.config_loader import BrokerGraphConfig, ConfigurationError
from brokergraph.repository.repository_facade import RepositoryFacade
from brokergraph.utils.errors import MalformedInputError, RegistryError
from brokergraph.utils.logging_utils import setup_logging


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the admin tool."""
    parser = argparse.ArgumentParser(
        description="Broker Graph admin - manage active and passive entity graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  brokergraph-admin status                           # Show backend and active graph count
  brokergraph-admin list                             # List active graphs
  brokergraph-admin deactivate urn:c1                # Passivate a graph
  brokergraph-admin load urn:c1 c1.ttl --replace     # Replace a graph from a file
  brokergraph-admin --sparql-url http://localhost:3030/broker dump
        """
    )

    parser.add_argument("--config", "-c", type=str, help="Path to YAML configuration file")
    parser.add_argument(
        "--sparql-url",
        type=str,
        help="Fuseki dataset URL (overrides configuration). Empty selects the local store"
    )
    parser.add_argument("--log-level", type=str, help="Log level (overrides configuration)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show backend and number of active graphs")
    subparsers.add_parser("list", help="List active graphs")
    subparsers.add_parser("contexts", help="List all named graphs, active or not")
    subparsers.add_parser("count", help="Print the number of active graphs")

    activate = subparsers.add_parser("activate", help="Mark a graph active")
    activate.add_argument("graph_uri")

    deactivate = subparsers.add_parser("deactivate", help="Mark a graph passive")
    deactivate.add_argument("graph_uri")

    dump = subparsers.add_parser("dump", help="Serialize the union of all active graphs")
    dump.add_argument("--format", default="turtle", help="rdflib serialization format (default: turtle)")

    load = subparsers.add_parser("load", help="Load an RDF file into a graph")
    load.add_argument("graph_uri")
    load.add_argument("file")
    load.add_argument("--replace", action="store_true", help="Replace the graph instead of appending")

    select = subparsers.add_parser("select", help="Run a SELECT query and print TSV")
    select.add_argument("query")

    return parser.parse_args(argv)


def load_rdf_file(path: str) -> Graph:
    """Parse an RDF file, guessing the format from its extension."""
    if not os.path.isfile(path):
        raise MalformedInputError(f"RDF file not found: {path}")

    graph = Graph()
    try:
        graph.parse(path)
    except (OSError, SyntaxError, BadSyntax, ParserError, PluginException) as e:
        raise MalformedInputError(f"Could not parse {path}: {e}") from e
    return graph


def run_command(repository: RepositoryFacade, args: argparse.Namespace) -> None:
    if args.command == "status":
        backend = "local in-memory" if repository.provider.is_local else repository.provider.sparql_url
        print(f"Backend: {backend}")
        print(f"Admin graph: {repository.admin_graph_uri}")
        print(f"Active graphs: {repository.get_size()}")
    elif args.command == "list":
        for graph_uri in sorted(repository.get_active_graphs()):
            print(graph_uri)
    elif args.command == "contexts":
        for graph_uri in sorted(repository.get_context_ids()):
            print(graph_uri)
    elif args.command == "count":
        print(repository.get_size())
    elif args.command == "activate":
        repository.change_passivation_of_graph(args.graph_uri, True)
        print(f"Graph {args.graph_uri} is now active")
    elif args.command == "deactivate":
        repository.change_passivation_of_graph(args.graph_uri, False)
        print(f"Graph {args.graph_uri} is now passive")
    elif args.command == "dump":
        print(repository.get_all_statements().serialize(format=args.format))
    elif args.command == "load":
        graph = load_rdf_file(args.file)
        if args.replace:
            repository.replace_statements(graph, args.graph_uri)
        else:
            repository.add_statements(graph, args.graph_uri)
        print(f"Loaded {len(graph)} statements into {args.graph_uri}")
    elif args.command == "select":
        repository.queries.select_to_tsv(args.query, sys.stdout)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the Broker Graph admin command."""
    args = parse_args(argv)

    # Override environment variables with command line arguments if provided
    if args.sparql_url is not None:
        os.environ['BROKERGRAPH_SPARQL_URL'] = args.sparql_url

    try:
        config = BrokerGraphConfig(args.config)
        setup_logging(args.log_level or config.get_log_level())
        config.validate_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        repository = RepositoryFacade.from_config(config)
        run_command(repository, args)
    except RegistryError as e:
        print(f"Error ({e.kind.value}): {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
