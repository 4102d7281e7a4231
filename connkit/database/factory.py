"""
Relational client factory.

Resolves the descriptor first, then creates the engines. A failure on the
primary or on any replica aborts construction: engines created so far are
disposed and no client is returned.
"""

import logging
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from ..core.resolver import resolve_relational
from ..core.topology import RandomPolicy
from ..exceptions import ClientFactoryError
from ..models.descriptor import RelationalDescriptor
from ..models.enums import FactoryStage
from ..models.resolved import ResolvedRelational
from .client import RelationalClient
from .config import create_node_engine

logger = logging.getLogger(__name__)


def open_relational(
    descriptor: RelationalDescriptor,
    verify: bool = False,
    read_policy: Optional[RandomPolicy] = None,
) -> RelationalClient:
    """
    Resolve a relational descriptor and open its client.

    Args:
        descriptor: Relational backend configuration
        verify: Run SELECT 1 against every node before returning
        read_policy: Replica selection policy, RandomPolicy when omitted

    Returns:
        RelationalClient for the primary and its replicas

    Raises:
        ConfigurationError: If the descriptor does not resolve
        ClientFactoryError: If the driver fails, with the failing stage
    """
    return create_relational_client(resolve_relational(descriptor, read_policy), verify=verify)


def create_relational_client(resolved: ResolvedRelational, verify: bool = False) -> RelationalClient:
    """
    Open engines for an already resolved relational descriptor.

    Raises:
        ClientFactoryError: stage "master-open" or "replica-open"
    """
    for warning in resolved.warnings:
        logger.warning(warning)

    primary: Optional[Engine] = None
    try:
        primary = create_node_engine(resolved, resolved.primary)
        if verify:
            _check_engine(primary)
    except Exception as e:
        logger.error(f"Failed to create master connection: {e}")
        if primary is not None:
            primary.dispose()
        raise ClientFactoryError(
            FactoryStage.MASTER_OPEN, "failed to create master connection", e
        ) from e

    replicas: List[Engine] = []
    for index, node in enumerate(resolved.replicas, start=1):
        try:
            engine = create_node_engine(resolved, node)
            replicas.append(engine)
            if verify:
                _check_engine(engine)
        except Exception as e:
            logger.error(f"Failed to create replica {index} connection: {e}")
            for opened in (primary, *replicas):
                opened.dispose()
            raise ClientFactoryError(
                FactoryStage.REPLICA_OPEN,
                f"failed to create replica {index} connection ({node.endpoint.address})",
                e,
            ) from e

    client = RelationalClient(primary, replicas, resolved.read_policy)
    logger.info(
        f"Relational client ready ({resolved.family.value}, "
        f"database={resolved.database}, replicas={len(replicas)})"
    )
    return client


def _check_engine(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
