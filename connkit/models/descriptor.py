"""
Backend descriptors: the partially specified input of resolution.

One descriptor type per client factory. They are built once by whatever
loads configuration and are never mutated by the engine.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Mapping, Tuple, Union

from .behavior import OverrideBundle
from .endpoint import ConnectionEndpoint
from .enums import BackendFamily
from .pool import PoolSettings


@dataclass(frozen=True)
class RelationalDescriptor:
    """
    Relational backend with an optional set of read replicas.

    Replicas share the primary's database, pool settings and parameters;
    only the endpoint differs. Replica order carries no meaning.
    """

    family: BackendFamily = BackendFamily.POSTGRES
    primary: ConnectionEndpoint = field(default_factory=ConnectionEndpoint)
    replicas: Tuple[ConnectionEndpoint, ...] = ()
    database: str = ""
    pool: PoolSettings = field(default_factory=PoolSettings)

    # PostgreSQL
    search_path: str = ""
    ssl_mode: str = ""
    statement_timeout: timedelta = timedelta(0)
    lock_timeout: timedelta = timedelta(0)
    idle_in_transaction_session_timeout: timedelta = timedelta(0)
    application_name: str = ""

    # MySQL
    charset: str = ""

    # Open-ended parameters, emitted after the fixed ones in key order
    params: Mapping[str, str] = field(default_factory=dict)

    health_check_period: timedelta = timedelta(0)
    preset: str = ""
    overrides: OverrideBundle = field(default_factory=OverrideBundle)


@dataclass(frozen=True)
class DocumentDescriptor:
    """MongoDB deployment: seed hosts, credentials and URI options."""

    hosts: Tuple[str, ...] = ()
    username: str = ""
    password: str = ""
    auth_db: str = ""
    pool: PoolSettings = field(default_factory=PoolSettings)
    options: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class KeyValueDescriptor:
    """Single-node Valkey/Redis server."""

    address: str = ""
    username: str = ""
    password: str = ""
    db: int = 0
    pool: PoolSettings = field(default_factory=PoolSettings)
    health_check_interval: timedelta = timedelta(0)


@dataclass(frozen=True)
class SentinelDescriptor:
    """
    Sentinel-managed deployment.

    Empty sentinel credentials fall back to the data-node credentials.
    """

    sentinel_addresses: Tuple[str, ...] = ()
    master_name: str = ""
    username: str = ""
    password: str = ""
    sentinel_username: str = ""
    sentinel_password: str = ""
    db: int = 0
    pool: PoolSettings = field(default_factory=PoolSettings)
    health_check_interval: timedelta = timedelta(0)


@dataclass(frozen=True)
class ClusterDescriptor:
    """Cluster deployment, addressed by its startup nodes."""

    addresses: Tuple[str, ...] = ()
    username: str = ""
    password: str = ""
    pool: PoolSettings = field(default_factory=PoolSettings)
    health_check_interval: timedelta = timedelta(0)


AnyKeyValueDescriptor = Union[KeyValueDescriptor, SentinelDescriptor, ClusterDescriptor]
