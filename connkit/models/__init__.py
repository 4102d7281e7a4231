"""
Data model for connkit.

This package provides the descriptor types that describe a backend, the
pool and behavior settings they carry, and the resolved forms handed to
client factories.
"""

from .enums import BackendFamily, Preset, DurationStyle, NodeRole, FactoryStage
from .endpoint import ConnectionEndpoint, split_address
from .pool import PoolSettings
from .behavior import BehaviorBundle, OverrideBundle
from .descriptor import (
    RelationalDescriptor,
    DocumentDescriptor,
    KeyValueDescriptor,
    SentinelDescriptor,
    ClusterDescriptor,
    AnyKeyValueDescriptor,
)
from .resolved import (
    ResolvedNode,
    ResolvedRelational,
    ResolvedDocument,
    ResolvedKeyValue,
)

__all__ = [
    # Enums
    'BackendFamily',
    'Preset',
    'DurationStyle',
    'NodeRole',
    'FactoryStage',

    # Settings
    'ConnectionEndpoint',
    'split_address',
    'PoolSettings',
    'BehaviorBundle',
    'OverrideBundle',

    # Descriptors
    'RelationalDescriptor',
    'DocumentDescriptor',
    'KeyValueDescriptor',
    'SentinelDescriptor',
    'ClusterDescriptor',
    'AnyKeyValueDescriptor',

    # Resolved forms
    'ResolvedNode',
    'ResolvedRelational',
    'ResolvedDocument',
    'ResolvedKeyValue',
]
