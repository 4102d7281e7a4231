"""
Primary/replica topology assembly.

A topology is one primary node plus zero or more replicas. Replicas get a
read policy and a separate idle retention window; without replicas every
query goes to the primary and no policy is attached. Assembly is all or
nothing: one bad replica fails the whole topology.
"""

import random
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple, TypeVar

from ..exceptions import ConfigurationError
from ..models.descriptor import RelationalDescriptor
from ..models.endpoint import ConnectionEndpoint
from ..models.enums import NodeRole
from ..models.pool import PoolSettings
from ..models.resolved import ResolvedNode
from .dsn import DsnStyle, dsn_pairs, grammar_for, redact_dsn, render_keyword, render_url
from .escaping import parse_keyword_dsn

T = TypeVar("T")

REPLICA_CONN_MAX_IDLE_TIME = timedelta(hours=1)


class RandomPolicy:
    """Pick a replica uniformly at random for each read."""

    name = "random"

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def choose(self, candidates: Sequence[T]) -> T:
        if not candidates:
            raise ValueError("no candidates to choose from")
        return self._rng.choice(candidates)

    def __repr__(self) -> str:
        return "RandomPolicy()"


@dataclass(frozen=True)
class Topology:
    """Resolved nodes plus read routing for a relational backend."""

    primary: ResolvedNode
    replicas: Tuple[ResolvedNode, ...]
    read_policy: Optional[RandomPolicy]
    replica_conn_max_idle_time: timedelta


def resolve_node(
    endpoint: ConnectionEndpoint,
    descriptor: RelationalDescriptor,
    pool: PoolSettings,
    role: NodeRole,
    label: str,
) -> ResolvedNode:
    """
    Validate an endpoint and build its connection string.

    Keyword strings are parsed back and compared with the parameters that
    went in, which catches parameter names that break the grammar.

    Raises:
        ConfigurationError: With the node label prefixed to the message
    """
    endpoint.validate(label)
    grammar = grammar_for(descriptor.family)

    try:
        pairs = dsn_pairs(endpoint, descriptor, pool, grammar)
    except ConfigurationError as e:
        raise ConfigurationError(f"{label}: {e}") from e

    if grammar.style is DsnStyle.URL:
        dsn = render_url(grammar.scheme, endpoint, descriptor.database, pairs)
        return ResolvedNode(role=role, endpoint=endpoint, dsn=dsn)

    dsn = render_keyword(pairs)
    try:
        parsed = parse_keyword_dsn(dsn)
    except ConfigurationError as e:
        raise ConfigurationError(f"{label}: malformed connection string: {e}") from e
    if parsed != dict(pairs):
        raise ConfigurationError(
            f"{label}: malformed connection string {redact_dsn(dsn)!r}, "
            f"check parameter names for spaces or '='"
        )
    return ResolvedNode(role=role, endpoint=endpoint, dsn=dsn)


def assemble_topology(
    descriptor: RelationalDescriptor,
    pool: PoolSettings,
    read_policy: Optional[RandomPolicy] = None,
) -> Topology:
    """
    Resolve the primary and every replica of a relational descriptor.

    Args:
        descriptor: Relational descriptor with primary and replicas
        pool: Already defaulted pool settings
        read_policy: Policy to attach when replicas exist, defaults to RandomPolicy

    Returns:
        Topology: read_policy is None when there are no replicas

    Raises:
        ConfigurationError: If the primary or any replica cannot be resolved
    """
    primary = resolve_node(descriptor.primary, descriptor, pool, NodeRole.PRIMARY, "primary")

    replicas: List[ResolvedNode] = []
    for index, endpoint in enumerate(descriptor.replicas, start=1):
        replicas.append(
            resolve_node(endpoint, descriptor, pool, NodeRole.REPLICA, f"replica {index}")
        )

    if not replicas:
        return Topology(
            primary=primary,
            replicas=(),
            read_policy=None,
            replica_conn_max_idle_time=timedelta(0),
        )

    return Topology(
        primary=primary,
        replicas=tuple(replicas),
        read_policy=read_policy or RandomPolicy(),
        replica_conn_max_idle_time=REPLICA_CONN_MAX_IDLE_TIME,
    )
