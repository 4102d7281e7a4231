"""
connkit: connection resolution and client factories.

Turns partially specified backend descriptors (PostgreSQL, MySQL, MongoDB,
Valkey single/sentinel/cluster) into fully resolved connection settings,
then into live clients.
"""

__version__ = "0.1.0"

from .exceptions import ConnectionResolutionError, ConfigurationError, ClientFactoryError
from .models import (
    BackendFamily,
    Preset,
    ConnectionEndpoint,
    PoolSettings,
    BehaviorBundle,
    OverrideBundle,
    RelationalDescriptor,
    DocumentDescriptor,
    KeyValueDescriptor,
    SentinelDescriptor,
    ClusterDescriptor,
    ResolvedRelational,
    ResolvedDocument,
    ResolvedKeyValue,
)
from .core import (
    RandomPolicy,
    build_dsn,
    build_mongo_uri,
    resolve_relational,
    resolve_document,
    resolve_key_value,
)
from .database import RelationalClient, open_relational
from .document import open_document
from .cache import open_key_value

__all__ = [
    '__version__',

    # Errors
    'ConnectionResolutionError',
    'ConfigurationError',
    'ClientFactoryError',

    # Model
    'BackendFamily',
    'Preset',
    'ConnectionEndpoint',
    'PoolSettings',
    'BehaviorBundle',
    'OverrideBundle',
    'RelationalDescriptor',
    'DocumentDescriptor',
    'KeyValueDescriptor',
    'SentinelDescriptor',
    'ClusterDescriptor',
    'ResolvedRelational',
    'ResolvedDocument',
    'ResolvedKeyValue',

    # Resolution
    'RandomPolicy',
    'build_dsn',
    'build_mongo_uri',
    'resolve_relational',
    'resolve_document',
    'resolve_key_value',

    # Client factories
    'RelationalClient',
    'open_relational',
    'open_document',
    'open_key_value',
]
