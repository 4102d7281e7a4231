"""
Valkey client factories for single-node, sentinel and cluster topologies.

Resolution supplies addresses and defaulted pool settings; this module maps
them onto valkey-py connection keyword arguments. Single-node and sentinel
clients connect lazily, cluster clients contact a startup node immediately.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Tuple, Union

import valkey
from valkey.cluster import ClusterNode, ValkeyCluster
from valkey.connection import ConnectionPool
from valkey.exceptions import ValkeyError
from valkey.sentinel import Sentinel

from ..core.resolver import (
    DEFAULT_KV_PORT,
    DEFAULT_SENTINEL_PORT,
    resolve_key_value,
)
from ..exceptions import ClientFactoryError, ConfigurationError
from ..models.descriptor import AnyKeyValueDescriptor
from ..models.endpoint import split_address
from ..models.enums import BackendFamily, FactoryStage
from ..models.resolved import ResolvedKeyValue

logger = logging.getLogger(__name__)

KeyValueClient = Union[valkey.Valkey, ValkeyCluster]


def _seconds(value: timedelta) -> float:
    return value.total_seconds()


def connection_kwargs(resolved: ResolvedKeyValue) -> Dict[str, Any]:
    """
    Get connection keyword arguments shared by every topology.

    valkey-py has a single socket timeout, so the larger of the read and
    write timeouts is used.

    Returns:
        Dictionary of connection and pool arguments
    """
    pool = resolved.pool
    kwargs: Dict[str, Any] = {
        'username': resolved.username or None,
        'password': resolved.password or None,
        'max_connections': pool.max_pool_size,
    }
    if pool.connect_timeout > timedelta(0):
        kwargs['socket_connect_timeout'] = _seconds(pool.connect_timeout)
    socket_timeout = max(pool.read_timeout, pool.write_timeout)
    if socket_timeout > timedelta(0):
        kwargs['socket_timeout'] = _seconds(socket_timeout)
    if resolved.health_check_interval > timedelta(0):
        kwargs['health_check_interval'] = _seconds(resolved.health_check_interval)
    return kwargs


def open_single(resolved: ResolvedKeyValue) -> valkey.Valkey:
    """Create a single-node client over its own connection pool."""
    host, port = split_address(resolved.addresses[0], DEFAULT_KV_PORT)
    kwargs = connection_kwargs(resolved)
    try:
        pool = ConnectionPool(host=host, port=port, db=resolved.db, **kwargs)
        client = valkey.Valkey(connection_pool=pool)
    except (ValkeyError, ValueError) as e:
        raise _factory_error("single-node", e) from e
    logger.info(f"Valkey client ready ({host}:{port}, db={resolved.db})")
    return client


def open_sentinel(resolved: ResolvedKeyValue) -> valkey.Valkey:
    """Create a client for the current master of a sentinel-managed group."""
    sentinels: List[Tuple[str, int]] = [
        split_address(address, DEFAULT_SENTINEL_PORT) for address in resolved.addresses
    ]
    kwargs = connection_kwargs(resolved)
    max_connections = kwargs.pop('max_connections')

    sentinel_kwargs = {
        'username': resolved.sentinel_username or None,
        'password': resolved.sentinel_password or None,
    }
    for key in ('socket_connect_timeout', 'socket_timeout'):
        if key in kwargs:
            sentinel_kwargs[key] = kwargs[key]

    try:
        sentinel = Sentinel(sentinels, sentinel_kwargs=sentinel_kwargs, db=resolved.db, **kwargs)
        client = sentinel.master_for(resolved.master_name, max_connections=max_connections)
    except (ValkeyError, ValueError) as e:
        raise _factory_error("sentinel", e) from e
    logger.info(
        f"Valkey sentinel client ready (master={resolved.master_name}, "
        f"sentinels={len(sentinels)})"
    )
    return client


def open_cluster(resolved: ResolvedKeyValue) -> ValkeyCluster:
    """Create a cluster client seeded with the configured startup nodes."""
    startup_nodes = [
        ClusterNode(*split_address(address, DEFAULT_KV_PORT)) for address in resolved.addresses
    ]
    try:
        client = ValkeyCluster(startup_nodes=startup_nodes, **connection_kwargs(resolved))
    except (ValkeyError, OSError) as e:
        raise _factory_error("cluster", e) from e
    logger.info(f"Valkey cluster client ready ({len(startup_nodes)} startup nodes)")
    return client


_OPENERS = {
    BackendFamily.KV_SINGLE: open_single,
    BackendFamily.KV_SENTINEL: open_sentinel,
    BackendFamily.KV_CLUSTER: open_cluster,
}


def open_key_value(descriptor: AnyKeyValueDescriptor) -> KeyValueClient:
    """
    Resolve any key-value descriptor and open the matching client.

    Raises:
        ConfigurationError: If the descriptor does not resolve
        ClientFactoryError: stage "kv-open" if the driver fails
    """
    resolved = resolve_key_value(descriptor)
    logger.debug(f"Opening key-value client: {resolved}")
    return create_key_value_client(resolved)


def create_key_value_client(resolved: ResolvedKeyValue) -> KeyValueClient:
    """Open the client for an already resolved key-value descriptor."""
    opener = _OPENERS.get(resolved.family)
    if opener is None:
        raise ConfigurationError(f"{resolved.family.value} is not a key-value family")
    return opener(resolved)


def ping(client: KeyValueClient) -> bool:
    """
    Test the client's connection.

    Returns:
        True if the server answered PING, False otherwise
    """
    try:
        return bool(client.ping())
    except ValkeyError as e:
        logger.error(f"Valkey ping failed: {e}")
        return False


def close(client: KeyValueClient) -> None:
    """Close the client and disconnect its connection pool."""
    client.close()
    pool = getattr(client, 'connection_pool', None)
    if pool is not None:
        pool.disconnect()
    logger.info("Valkey connections closed")


def _factory_error(topology: str, error: Exception) -> ClientFactoryError:
    logger.error(f"Failed to open Valkey {topology} client: {error}")
    return ClientFactoryError(FactoryStage.KV_OPEN, f"failed to open {topology} client", error)
