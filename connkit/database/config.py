"""
SQLAlchemy engine configuration for resolved relational descriptors.

Maps resolved pool settings and behavior flags onto create_engine()
arguments, and builds one engine per topology node.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from ..core.dsn import redact_dsn
from ..models.enums import BackendFamily, NodeRole
from ..models.resolved import ResolvedNode, ResolvedRelational
from .postgres import make_creator

logger = logging.getLogger(__name__)

_SECOND = timedelta(seconds=1)


def get_engine_kwargs(resolved: ResolvedRelational, role: NodeRole) -> Dict[str, Any]:
    """
    Get pool and isolation configuration for one node's engine.

    Pool sizing follows database/sql semantics: max_idle_conns connections
    stay in the pool, up to max_pool_size may be open at once.

    Args:
        resolved: Resolved relational descriptor
        role: Primary or replica; replicas recycle within their idle window

    Returns:
        Dictionary of create_engine() keyword arguments
    """
    pool = resolved.pool
    pool_size = pool.max_idle_conns
    if pool.max_pool_size > 0:
        pool_size = min(pool_size, pool.max_pool_size)

    kwargs: Dict[str, Any] = {
        'poolclass': QueuePool,
        'pool_size': pool_size,
        'max_overflow': max(pool.max_pool_size - pool_size, 0),
        'pool_pre_ping': resolved.health_check_period > timedelta(0),
    }

    recycle = pool.conn_max_lifetime
    retention = resolved.replica_conn_max_idle_time
    if role is NodeRole.REPLICA and retention > timedelta(0):
        recycle = min(recycle, retention) if recycle > timedelta(0) else retention
    if recycle > timedelta(0):
        kwargs['pool_recycle'] = recycle // _SECOND

    if resolved.behavior.skip_default_transaction:
        kwargs['isolation_level'] = 'AUTOCOMMIT'

    return kwargs


def create_node_engine(resolved: ResolvedRelational, node: ResolvedNode) -> Engine:
    """
    Create the SQLAlchemy engine for a single topology node.

    PostgreSQL connections are made by a psycopg creator so the keyword DSN
    and behavior flags reach the driver; MySQL uses the DSN as engine URL.
    """
    kwargs = get_engine_kwargs(resolved, node.role)
    logger.debug(f"Creating {node.role.value} engine: {redact_dsn(node.dsn)}")

    if resolved.family is BackendFamily.POSTGRES:
        return create_engine(
            "postgresql+psycopg://",
            creator=make_creator(node.dsn, resolved.behavior),
            **kwargs,
        )
    return create_engine(node.dsn, **kwargs)
