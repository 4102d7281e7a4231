"""
Hard pool defaults per backend family and the defaulting rule.
"""

from dataclasses import fields, replace
from datetime import timedelta
from types import MappingProxyType
from typing import Mapping, Optional

from ..models.enums import BackendFamily
from ..models.pool import PoolSettings

_RELATIONAL_DEFAULTS = PoolSettings(
    max_pool_size=25,
    max_idle_conns=25,
    conn_max_lifetime=timedelta(minutes=5),
)

_DOCUMENT_DEFAULTS = PoolSettings(
    max_pool_size=100,
    min_pool_size=10,
    conn_max_idle_time=timedelta(minutes=5),
)

_KEY_VALUE_DEFAULTS = PoolSettings(
    max_pool_size=25,
    min_idle_conns=10,
    max_idle_conns=25,
    conn_max_idle_time=timedelta(minutes=5),
    connect_timeout=timedelta(seconds=5),
    read_timeout=timedelta(seconds=3),
    write_timeout=timedelta(seconds=3),
)

HARD_DEFAULTS: Mapping[BackendFamily, PoolSettings] = MappingProxyType({
    BackendFamily.POSTGRES: _RELATIONAL_DEFAULTS,
    BackendFamily.MYSQL: _RELATIONAL_DEFAULTS,
    BackendFamily.MONGO: _DOCUMENT_DEFAULTS,
    BackendFamily.KV_SINGLE: _KEY_VALUE_DEFAULTS,
    BackendFamily.KV_SENTINEL: _KEY_VALUE_DEFAULTS,
    BackendFamily.KV_CLUSTER: _KEY_VALUE_DEFAULTS,
})


def apply_pool_defaults(settings: Optional[PoolSettings], family: BackendFamily) -> PoolSettings:
    """
    Replace every zero-valued field with the family's hard default.

    Non-zero fields pass through untouched, so applying this twice gives the
    same result as applying it once.

    Args:
        settings: Pool settings from configuration, None meaning all unset
        family: Backend family selecting the defaults table entry

    Returns:
        PoolSettings: A new, fully defaulted settings object
    """
    settings = settings or PoolSettings()
    defaults = HARD_DEFAULTS[family]
    updates = {
        f.name: getattr(defaults, f.name)
        for f in fields(PoolSettings)
        if not getattr(settings, f.name)
    }
    return replace(settings, **updates)
