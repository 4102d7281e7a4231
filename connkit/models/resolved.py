"""
Resolved descriptors: defaults, presets and overrides fully applied.

These are what the client factories consume. They never flow back into
the partial descriptor types.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Tuple, TYPE_CHECKING

from .behavior import BehaviorBundle
from .endpoint import ConnectionEndpoint
from .enums import BackendFamily, NodeRole
from .pool import PoolSettings

if TYPE_CHECKING:
    from ..core.topology import RandomPolicy


@dataclass(frozen=True)
class ResolvedNode:
    """One node of a relational topology with its connection string."""

    role: NodeRole
    endpoint: ConnectionEndpoint
    dsn: str


@dataclass(frozen=True)
class ResolvedRelational:
    """Everything the relational factory needs to open primary and replicas."""

    family: BackendFamily
    database: str
    primary: ResolvedNode
    replicas: Tuple[ResolvedNode, ...]
    pool: PoolSettings
    behavior: BehaviorBundle
    health_check_period: timedelta
    read_policy: Optional["RandomPolicy"]
    replica_conn_max_idle_time: timedelta
    warnings: Tuple[str, ...] = ()

    @property
    def is_replicated(self) -> bool:
        return bool(self.replicas)


@dataclass(frozen=True)
class ResolvedDocument:
    """Connection URI plus defaulted pool settings for MongoDB."""

    uri: str
    pool: PoolSettings
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ResolvedKeyValue:
    """Options for one of the three key-value topologies. No DSN involved."""

    family: BackendFamily
    addresses: Tuple[str, ...]
    username: str = ""
    password: str = ""
    db: int = 0
    master_name: str = ""
    sentinel_username: str = ""
    sentinel_password: str = ""
    pool: PoolSettings = field(default_factory=PoolSettings)
    health_check_interval: timedelta = timedelta(0)

    def __str__(self) -> str:
        """String representation hiding sensitive information."""
        password_display = "***" if self.password else "None"
        return (
            f"ResolvedKeyValue(family={self.family.value}, "
            f"addresses={','.join(self.addresses)}, db={self.db}, "
            f"password={password_display}, max_pool_size={self.pool.max_pool_size})"
        )
