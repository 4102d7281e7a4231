"""
Core module for connection resolution.

Provides the pure resolution engine:
- Value escaping and duration encoding
- DSN/URI construction per backend grammar
- Pool defaulting, presets and overrides
- Primary/replica topology assembly
"""

from .escaping import escape_value, parse_keyword_dsn
from .durations import format_duration, parse_duration
from .dsn import (
    DsnGrammar,
    DsnStyle,
    POSTGRES_GRAMMAR,
    MYSQL_GRAMMAR,
    grammar_for,
    build_dsn,
    build_mongo_uri,
    redact_dsn,
)
from .pool_defaults import HARD_DEFAULTS, apply_pool_defaults
from .presets import (
    HARD_DEFAULT_BEHAVIOR,
    TRANSACTION_POOLER_BEHAVIOR,
    PresetResolution,
    resolve_preset,
    merge_overrides,
    resolve_behavior,
)
from .topology import RandomPolicy, Topology, REPLICA_CONN_MAX_IDLE_TIME, assemble_topology
from .resolver import resolve_relational, resolve_document, resolve_key_value

__all__ = [
    "escape_value",
    "parse_keyword_dsn",
    "format_duration",
    "parse_duration",
    "DsnGrammar",
    "DsnStyle",
    "POSTGRES_GRAMMAR",
    "MYSQL_GRAMMAR",
    "grammar_for",
    "build_dsn",
    "build_mongo_uri",
    "redact_dsn",
    "HARD_DEFAULTS",
    "apply_pool_defaults",
    "HARD_DEFAULT_BEHAVIOR",
    "TRANSACTION_POOLER_BEHAVIOR",
    "PresetResolution",
    "resolve_preset",
    "merge_overrides",
    "resolve_behavior",
    "RandomPolicy",
    "Topology",
    "REPLICA_CONN_MAX_IDLE_TIME",
    "assemble_topology",
    "resolve_relational",
    "resolve_document",
    "resolve_key_value",
]
