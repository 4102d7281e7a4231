"""
Enums for the connection resolution engine.

This module contains the closed sets of tokens used across resolution:
backend families, preset names, duration encodings and node roles.
"""

from enum import Enum


class BackendFamily(str, Enum):
    """Backend families, one per client factory grammar."""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    MONGO = "mongo"
    KV_SINGLE = "kv_single"
    KV_SENTINEL = "kv_sentinel"
    KV_CLUSTER = "kv_cluster"

    @property
    def is_relational(self) -> bool:
        return self in (BackendFamily.POSTGRES, BackendFamily.MYSQL)

    @property
    def is_key_value(self) -> bool:
        return self in (
            BackendFamily.KV_SINGLE,
            BackendFamily.KV_SENTINEL,
            BackendFamily.KV_CLUSTER,
        )


class Preset(str, Enum):
    """Named behavior presets. NONE is the empty token."""
    NONE = ""
    TRANSACTION_POOLER = "transaction-pooler"  # PgBouncer / Supabase pooler


class DurationStyle(str, Enum):
    """How a duration is written into a connection string."""
    TOKEN = "token"                # 1m30s, 250ms
    SECONDS = "seconds"            # whole seconds, truncated
    MILLISECONDS = "milliseconds"  # whole milliseconds, truncated


class NodeRole(str, Enum):
    """Role of a node inside a relational topology."""
    PRIMARY = "primary"
    REPLICA = "replica"


class FactoryStage(str, Enum):
    """Step of client construction named in wrapped driver errors."""
    MASTER_OPEN = "master-open"
    REPLICA_OPEN = "replica-open"
    POOL_INTROSPECTION = "pool-introspection"
    DOCUMENT_CONNECT = "mongo-connect"
    KV_OPEN = "kv-open"
