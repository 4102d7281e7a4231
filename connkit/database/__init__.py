"""
Relational database package.

This package turns resolved relational descriptors into SQLAlchemy engines
(psycopg for PostgreSQL, PyMySQL for MySQL) with read/write splitting
across replicas.
"""

from .client import RelationalClient, RoutingSession
from .config import get_engine_kwargs, create_node_engine
from .factory import open_relational, create_relational_client
from .postgres import to_conninfo, connect_kwargs, make_creator

__all__ = [
    # Client
    'RelationalClient',
    'RoutingSession',

    # Configuration
    'get_engine_kwargs',
    'create_node_engine',

    # Factory
    'open_relational',
    'create_relational_client',

    # PostgreSQL driver glue
    'to_conninfo',
    'connect_kwargs',
    'make_creator',
]
