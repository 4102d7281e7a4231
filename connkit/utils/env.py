"""
Descriptor builders reading PREFIX_* environment variables.

Every builder takes an optional mapping in place of os.environ. Lists are
comma separated, durations use tokens such as "30s" or "1m30s" (a bare
number means seconds), and PREFIX_PARAM_<NAME> / PREFIX_OPTION_<NAME>
variables become open-ended parameters with lower-cased names.

Example (.env):
    DB_FAMILY=postgres
    DB_HOST=db1
    DB_USER=app
    DB_PASSWORD=s3cret
    DB_NAME=orders
    DB_REPLICAS=db2:5432,db3:5432
    DB_STATEMENT_TIMEOUT=30s
    DB_PRESET=transaction-pooler
"""

import os
from datetime import timedelta
from typing import Dict, Mapping, Optional, Tuple

from ..core.durations import parse_duration
from ..exceptions import ConfigurationError
from ..models.behavior import OverrideBundle
from ..models.descriptor import (
    AnyKeyValueDescriptor,
    ClusterDescriptor,
    DocumentDescriptor,
    KeyValueDescriptor,
    RelationalDescriptor,
    SentinelDescriptor,
)
from ..models.endpoint import ConnectionEndpoint, split_address
from ..models.enums import BackendFamily
from ..models.pool import PoolSettings

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")

DEFAULT_RELATIONAL_PORTS = {
    BackendFamily.POSTGRES: "5432",
    BackendFamily.MYSQL: "3306",
}


class _EnvReader:
    """Typed access to PREFIX_NAME variables of one mapping."""

    def __init__(self, prefix: str, environ: Optional[Mapping[str, str]]):
        self.prefix = prefix.rstrip("_").upper()
        self.environ = os.environ if environ is None else environ

    def key(self, name: str) -> str:
        return f"{self.prefix}_{name}"

    def get_str(self, name: str, default: str = "") -> str:
        return self.environ.get(self.key(name), default).strip()

    def get_int(self, name: str, default: int = 0) -> int:
        value = self.get_str(name)
        if not value:
            return default
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"{self.key(name)} must be an integer, got {value!r}")

    def get_bool(self, name: str) -> Optional[bool]:
        value = self.get_str(name).lower()
        if not value:
            return None
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{self.key(name)} must be a boolean, got {value!r}")

    def get_duration(self, name: str) -> timedelta:
        value = self.get_str(name)
        if not value:
            return timedelta(0)
        try:
            return parse_duration(value)
        except ConfigurationError as e:
            raise ConfigurationError(f"{self.key(name)}: {e}") from e

    def get_list(self, name: str) -> Tuple[str, ...]:
        return tuple(item.strip() for item in self.get_str(name).split(",") if item.strip())

    def prefixed(self, group: str) -> Dict[str, str]:
        """Collect PREFIX_GROUP_<NAME> variables as {name.lower(): value}."""
        start = self.key(f"{group}_")
        return {
            key[len(start):].lower(): value
            for key, value in self.environ.items()
            if key.startswith(start) and len(key) > len(start)
        }


def _pool_from_env(reader: _EnvReader) -> PoolSettings:
    """Read the pool settings shared by every backend family."""
    return PoolSettings(
        max_pool_size=reader.get_int("MAX_POOL_SIZE"),
        min_pool_size=reader.get_int("MIN_POOL_SIZE"),
        max_idle_conns=reader.get_int("MAX_IDLE_CONNS"),
        min_idle_conns=reader.get_int("MIN_IDLE_CONNS"),
        conn_max_lifetime=reader.get_duration("CONN_MAX_LIFETIME"),
        conn_max_idle_time=reader.get_duration("CONN_MAX_IDLE_TIME"),
        connect_timeout=reader.get_duration("CONNECT_TIMEOUT"),
        read_timeout=reader.get_duration("READ_TIMEOUT"),
        write_timeout=reader.get_duration("WRITE_TIMEOUT"),
    )


def relational_from_env(
    prefix: str = "DB",
    environ: Optional[Mapping[str, str]] = None,
) -> RelationalDescriptor:
    """
    Build a relational descriptor from environment variables.

    Replicas are listed in PREFIX_REPLICAS as host[:port] and share the
    primary's credentials. A replica without a port uses the primary's.

    Raises:
        ConfigurationError: On an unknown family or a malformed value
    """
    env = _EnvReader(prefix, environ)

    family_token = env.get_str("FAMILY", BackendFamily.POSTGRES.value).lower()
    try:
        family = BackendFamily(family_token)
    except ValueError:
        raise ConfigurationError(f"{env.key('FAMILY')}: unknown family {family_token!r}")
    if not family.is_relational:
        raise ConfigurationError(f"{env.key('FAMILY')}: {family_token} is not relational")

    username = env.get_str("USER")
    password = env.get_str("PASSWORD")
    port = env.get_str("PORT", DEFAULT_RELATIONAL_PORTS[family])
    primary = ConnectionEndpoint(env.get_str("HOST"), port, username, password)

    replicas = []
    for address in env.get_list("REPLICAS"):
        host, replica_port = split_address(address, int(port) if port.isdigit() else 0)
        replicas.append(ConnectionEndpoint(host, str(replica_port), username, password))

    overrides = OverrideBundle(
        skip_default_transaction=env.get_bool("SKIP_DEFAULT_TRANSACTION"),
        prepare_statements=env.get_bool("PREPARE_STATEMENTS"),
        statement_cache_capacity=(
            env.get_int("STATEMENT_CACHE_CAPACITY") if env.get_str("STATEMENT_CACHE_CAPACITY") else None
        ),
        simple_protocol=env.get_bool("SIMPLE_PROTOCOL"),
    )

    return RelationalDescriptor(
        family=family,
        primary=primary,
        replicas=tuple(replicas),
        database=env.get_str("NAME"),
        pool=_pool_from_env(env),
        search_path=env.get_str("SEARCH_PATH"),
        ssl_mode=env.get_str("SSLMODE"),
        statement_timeout=env.get_duration("STATEMENT_TIMEOUT"),
        lock_timeout=env.get_duration("LOCK_TIMEOUT"),
        idle_in_transaction_session_timeout=env.get_duration("IDLE_IN_TRANSACTION_SESSION_TIMEOUT"),
        application_name=env.get_str("APPLICATION_NAME"),
        charset=env.get_str("CHARSET"),
        params=env.prefixed("PARAM"),
        health_check_period=env.get_duration("HEALTH_CHECK_PERIOD"),
        preset=env.get_str("PRESET"),
        overrides=overrides,
    )


def document_from_env(
    prefix: str = "MONGO",
    environ: Optional[Mapping[str, str]] = None,
) -> DocumentDescriptor:
    """Build a MongoDB descriptor from PREFIX_HOSTS, credentials and PREFIX_OPTION_*."""
    env = _EnvReader(prefix, environ)
    return DocumentDescriptor(
        hosts=env.get_list("HOSTS"),
        username=env.get_str("USERNAME"),
        password=env.get_str("PASSWORD"),
        auth_db=env.get_str("AUTH_DB"),
        pool=_pool_from_env(env),
        options=env.prefixed("OPTION"),
    )


def key_value_from_env(
    prefix: str = "VALKEY",
    environ: Optional[Mapping[str, str]] = None,
) -> AnyKeyValueDescriptor:
    """
    Build a key-value descriptor from environment variables.

    PREFIX_MODE selects the topology: "single" (default), "sentinel" or
    "cluster". Single mode reads PREFIX_ADDRESS; the other two read the
    comma-separated PREFIX_ADDRESSES.

    Raises:
        ConfigurationError: On an unknown mode or a malformed value
    """
    env = _EnvReader(prefix, environ)
    mode = env.get_str("MODE", "single").lower()
    pool = _pool_from_env(env)
    health_check_interval = env.get_duration("HEALTH_CHECK_INTERVAL")

    if mode == "single":
        return KeyValueDescriptor(
            address=env.get_str("ADDRESS"),
            username=env.get_str("USERNAME"),
            password=env.get_str("PASSWORD"),
            db=env.get_int("DB"),
            pool=pool,
            health_check_interval=health_check_interval,
        )
    if mode == "sentinel":
        return SentinelDescriptor(
            sentinel_addresses=env.get_list("ADDRESSES"),
            master_name=env.get_str("MASTER_NAME"),
            username=env.get_str("USERNAME"),
            password=env.get_str("PASSWORD"),
            sentinel_username=env.get_str("SENTINEL_USERNAME"),
            sentinel_password=env.get_str("SENTINEL_PASSWORD"),
            db=env.get_int("DB"),
            pool=pool,
            health_check_interval=health_check_interval,
        )
    if mode == "cluster":
        return ClusterDescriptor(
            addresses=env.get_list("ADDRESSES"),
            username=env.get_str("USERNAME"),
            password=env.get_str("PASSWORD"),
            pool=pool,
            health_check_interval=health_check_interval,
        )
    raise ConfigurationError(f"{env.key('MODE')}: unknown mode {mode!r}")
