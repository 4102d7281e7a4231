"""
MongoDB client factory.

The connection URI comes from resolution; pool settings are passed to
pymongo as client options so they win over anything in the URI options.
"""

import logging
from datetime import timedelta
from typing import Any, Dict

from pymongo import MongoClient
from pymongo.errors import PyMongoError

from ..core.dsn import redact_dsn
from ..core.resolver import resolve_document
from ..exceptions import ClientFactoryError
from ..models.descriptor import DocumentDescriptor
from ..models.enums import FactoryStage
from ..models.pool import PoolSettings
from ..models.resolved import ResolvedDocument

logger = logging.getLogger(__name__)

_MILLISECOND = timedelta(milliseconds=1)


def mongo_client_kwargs(pool: PoolSettings) -> Dict[str, Any]:
    """
    Get MongoClient keyword arguments from defaulted pool settings.

    Durations are only passed when set, leaving pymongo's own defaults
    in place otherwise.
    """
    kwargs: Dict[str, Any] = {
        'maxPoolSize': pool.max_pool_size,
        'minPoolSize': pool.min_pool_size,
    }
    if pool.conn_max_idle_time > timedelta(0):
        kwargs['maxIdleTimeMS'] = pool.conn_max_idle_time // _MILLISECOND
    if pool.connect_timeout > timedelta(0):
        kwargs['connectTimeoutMS'] = pool.connect_timeout // _MILLISECOND
    if pool.read_timeout > timedelta(0):
        kwargs['socketTimeoutMS'] = pool.read_timeout // _MILLISECOND
    return kwargs


def open_document(descriptor: DocumentDescriptor) -> MongoClient:
    """
    Resolve a MongoDB descriptor and create its client.

    Raises:
        ConfigurationError: If the descriptor does not resolve
        ClientFactoryError: stage "mongo-connect" if pymongo rejects the URI
        or the pool options (for example minPoolSize above maxPoolSize)
    """
    return create_document_client(resolve_document(descriptor))


def create_document_client(resolved: ResolvedDocument) -> MongoClient:
    """Create a MongoClient for an already resolved descriptor."""
    for warning in resolved.warnings:
        logger.warning(warning)

    kwargs = mongo_client_kwargs(resolved.pool)
    logger.debug(f"Creating MongoDB client: {redact_dsn(resolved.uri)}")
    try:
        client = MongoClient(resolved.uri, **kwargs)
    except (PyMongoError, ValueError, TypeError) as e:
        logger.error(f"MongoDB connect failed: {e}")
        raise ClientFactoryError(FactoryStage.DOCUMENT_CONNECT, "mongo connect failed", e) from e

    logger.info(
        f"MongoDB client ready (maxPoolSize={kwargs['maxPoolSize']}, "
        f"minPoolSize={kwargs['minPoolSize']})"
    )
    return client
