"""
PostgreSQL driver glue for psycopg.

The resolved keyword DSN mixes libpq connection keywords with server
runtime parameters (search_path, statement_timeout, ...). libpq rejects
unknown keywords, so runtime parameters are moved into the "options"
keyword as "-c name=value" switches before the driver sees them.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Tuple

import psycopg
from psycopg.conninfo import make_conninfo

from ..core.escaping import parse_keyword_dsn
from ..models.behavior import BehaviorBundle

logger = logging.getLogger(__name__)

LIBPQ_KEYWORDS = frozenset({
    "host", "hostaddr", "port", "dbname", "user", "password", "passfile",
    "require_auth", "channel_binding", "connect_timeout", "client_encoding",
    "options", "application_name", "fallback_application_name",
    "keepalives", "keepalives_idle", "keepalives_interval", "keepalives_count",
    "tcp_user_timeout", "replication", "gssencmode", "sslmode", "requiressl",
    "sslcompression", "sslcert", "sslkey", "sslpassword", "sslcertmode",
    "sslrootcert", "sslcrl", "sslcrldir", "sslsni", "requirepeer",
    "ssl_min_protocol_version", "ssl_max_protocol_version", "krbsrvname",
    "gsslib", "gssdelegation", "service", "target_session_attrs",
    "load_balance_hosts",
})


def split_runtime_params(params: Mapping[str, str]) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Separate libpq keywords from server runtime parameters.

    Returns:
        Tuple of (connection keywords, runtime parameters), both in input order
    """
    connection: Dict[str, str] = {}
    runtime: Dict[str, str] = {}
    for key, value in params.items():
        if key in LIBPQ_KEYWORDS:
            connection[key] = value
        else:
            runtime[key] = value
    return connection, runtime


def _escape_option(value: str) -> str:
    # The options keyword splits on unescaped whitespace
    return value.replace("\\", "\\\\").replace(" ", "\\ ")


def build_options(runtime: Mapping[str, str]) -> str:
    """Render runtime parameters as libpq "-c name=value" switches."""
    return " ".join(f"-c {key}={_escape_option(value)}" for key, value in runtime.items())


def to_conninfo(dsn: str) -> str:
    """
    Convert a resolved keyword DSN into a conninfo string libpq accepts.

    Raises:
        ConfigurationError: If the DSN cannot be parsed
        psycopg.ProgrammingError: If libpq rejects the result
    """
    connection, runtime = split_runtime_params(parse_keyword_dsn(dsn))
    if runtime:
        switches = build_options(runtime)
        existing = connection.get("options")
        connection["options"] = f"{existing} {switches}" if existing else switches
    return make_conninfo(**connection)


def connect_kwargs(behavior: BehaviorBundle) -> Dict[str, Any]:
    """
    Translate the behavior bundle into psycopg.connect() arguments.

    prepare_threshold=None turns server-side prepared statements off, and
    ClientCursor binds parameters client-side so every query goes over the
    simple query protocol.
    """
    kwargs: Dict[str, Any] = {}
    if not behavior.prepare_statements or behavior.statement_cache_capacity <= 0:
        kwargs["prepare_threshold"] = None
    if behavior.simple_protocol:
        kwargs["cursor_factory"] = psycopg.ClientCursor
    return kwargs


def make_creator(dsn: str, behavior: BehaviorBundle) -> Callable[[], "psycopg.Connection"]:
    """
    Build the connection callable handed to SQLAlchemy's create_engine.

    The conninfo is converted up front so a bad DSN fails while the engine
    is being built rather than on first checkout.
    """
    conninfo = to_conninfo(dsn)
    kwargs = connect_kwargs(behavior)
    prepared_max = 0 if "prepare_threshold" in kwargs else behavior.statement_cache_capacity

    def connect() -> "psycopg.Connection":
        conn = psycopg.connect(conninfo, **kwargs)
        if prepared_max:
            conn.prepared_max = prepared_max
        return conn

    return connect
