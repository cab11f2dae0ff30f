from .admin_graph import ADMIN_GRAPH_URI, GRAPH_IS_ACTIVE, AdminGraphManager, AdminGraphState
from .query_primitives import QueryPrimitives
from .repository_facade import RepositoryFacade

__all__ = [
    'ADMIN_GRAPH_URI',
    'GRAPH_IS_ACTIVE',
    'AdminGraphManager',
    'AdminGraphState',
    'QueryPrimitives',
    'RepositoryFacade',
]
