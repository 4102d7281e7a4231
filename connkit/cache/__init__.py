"""
Key-value store package.

Builds valkey-py clients for single-node, sentinel and cluster deployments
from resolved key-value descriptors.
"""

from .factory import (
    KeyValueClient,
    connection_kwargs,
    open_single,
    open_sentinel,
    open_cluster,
    open_key_value,
    create_key_value_client,
    ping,
    close,
)

__all__ = [
    'KeyValueClient',
    'connection_kwargs',
    'open_single',
    'open_sentinel',
    'open_cluster',
    'open_key_value',
    'create_key_value_client',
    'ping',
    'close',
]
