"""
Resolution entry points: descriptor in, resolved descriptor out.

Every function here is pure. Nothing touches the network, the environment
or shared state, so calls can run concurrently without coordination.
"""

from typing import List, Optional

from ..exceptions import ConfigurationError
from ..models.descriptor import (
    AnyKeyValueDescriptor,
    ClusterDescriptor,
    DocumentDescriptor,
    KeyValueDescriptor,
    RelationalDescriptor,
    SentinelDescriptor,
)
from ..models.endpoint import split_address
from ..models.enums import BackendFamily
from ..models.resolved import ResolvedDocument, ResolvedKeyValue, ResolvedRelational
from .dsn import build_mongo_uri
from .pool_defaults import apply_pool_defaults
from .presets import resolve_behavior
from .topology import RandomPolicy, assemble_topology

DEFAULT_KV_ADDRESS = "127.0.0.1:6379"
DEFAULT_KV_PORT = 6379
DEFAULT_SENTINEL_PORT = 26379
DEFAULT_MONGO_PORT = 27017


def resolve_relational(
    descriptor: RelationalDescriptor,
    read_policy: Optional[RandomPolicy] = None,
) -> ResolvedRelational:
    """
    Resolve a relational descriptor into DSNs, pool settings and behavior.

    Args:
        descriptor: Relational backend configuration
        read_policy: Replica selection policy, RandomPolicy when omitted

    Returns:
        ResolvedRelational: Ready for the relational client factory

    Raises:
        ConfigurationError: Missing database name, bad endpoint or malformed
        parameters on the primary or any replica
    """
    if not descriptor.family.is_relational:
        raise ConfigurationError(f"{descriptor.family.value} is not a relational family")
    if not descriptor.database:
        raise ConfigurationError("database name is required")

    pool = apply_pool_defaults(descriptor.pool, descriptor.family)
    behavior = resolve_behavior(descriptor.preset, descriptor.family, descriptor.overrides)
    topology = assemble_topology(descriptor, pool, read_policy)

    return ResolvedRelational(
        family=descriptor.family,
        database=descriptor.database,
        primary=topology.primary,
        replicas=topology.replicas,
        pool=pool,
        behavior=behavior.behavior,
        health_check_period=descriptor.health_check_period,
        read_policy=topology.read_policy,
        replica_conn_max_idle_time=topology.replica_conn_max_idle_time,
        warnings=behavior.warnings,
    )


def resolve_document(descriptor: DocumentDescriptor) -> ResolvedDocument:
    """
    Resolve a MongoDB descriptor into a URI and defaulted pool settings.

    Raises:
        ConfigurationError: If no host is configured or a host is malformed
    """
    if not descriptor.hosts:
        raise ConfigurationError("at least one MongoDB host is required")
    for host in descriptor.hosts:
        split_address(host, DEFAULT_MONGO_PORT)

    warnings: List[str] = []
    if bool(descriptor.username) != bool(descriptor.password):
        warnings.append("MongoDB credentials ignored: username and password must both be set")

    return ResolvedDocument(
        uri=build_mongo_uri(descriptor),
        pool=apply_pool_defaults(descriptor.pool, BackendFamily.MONGO),
        warnings=tuple(warnings),
    )


def resolve_key_value(descriptor: AnyKeyValueDescriptor) -> ResolvedKeyValue:
    """
    Resolve any of the three key-value descriptors into client options.

    Raises:
        ConfigurationError: On missing or malformed addresses, a missing
        sentinel master name, or an unsupported descriptor type
    """
    if isinstance(descriptor, KeyValueDescriptor):
        address = descriptor.address or DEFAULT_KV_ADDRESS
        split_address(address, DEFAULT_KV_PORT)
        return ResolvedKeyValue(
            family=BackendFamily.KV_SINGLE,
            addresses=(address,),
            username=descriptor.username,
            password=descriptor.password,
            db=descriptor.db,
            pool=apply_pool_defaults(descriptor.pool, BackendFamily.KV_SINGLE),
            health_check_interval=descriptor.health_check_interval,
        )

    if isinstance(descriptor, SentinelDescriptor):
        if not descriptor.sentinel_addresses:
            raise ConfigurationError("at least one sentinel address is required")
        if not descriptor.master_name:
            raise ConfigurationError("sentinel master name is required")
        for address in descriptor.sentinel_addresses:
            split_address(address, DEFAULT_SENTINEL_PORT)
        return ResolvedKeyValue(
            family=BackendFamily.KV_SENTINEL,
            addresses=tuple(descriptor.sentinel_addresses),
            username=descriptor.username,
            password=descriptor.password,
            db=descriptor.db,
            master_name=descriptor.master_name,
            sentinel_username=descriptor.sentinel_username or descriptor.username,
            sentinel_password=descriptor.sentinel_password or descriptor.password,
            pool=apply_pool_defaults(descriptor.pool, BackendFamily.KV_SENTINEL),
            health_check_interval=descriptor.health_check_interval,
        )

    if isinstance(descriptor, ClusterDescriptor):
        if not descriptor.addresses:
            raise ConfigurationError("at least one cluster address is required")
        for address in descriptor.addresses:
            split_address(address, DEFAULT_KV_PORT)
        return ResolvedKeyValue(
            family=BackendFamily.KV_CLUSTER,
            addresses=tuple(descriptor.addresses),
            username=descriptor.username,
            password=descriptor.password,
            pool=apply_pool_defaults(descriptor.pool, BackendFamily.KV_CLUSTER),
            health_check_interval=descriptor.health_check_interval,
        )

    raise ConfigurationError(f"unsupported key-value descriptor: {type(descriptor).__name__}")
