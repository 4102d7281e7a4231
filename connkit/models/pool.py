"""
Connection pool settings shared by every backend family.
"""

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class PoolSettings:
    """
    Pool sizing and timeout knobs.

    Every field's zero value means "unset, use the family default". An
    explicit zero therefore cannot be expressed; the defaulter treats it as
    unset.
    """

    max_pool_size: int = 0
    min_pool_size: int = 0
    max_idle_conns: int = 0
    min_idle_conns: int = 0
    conn_max_lifetime: timedelta = timedelta(0)
    conn_max_idle_time: timedelta = timedelta(0)
    connect_timeout: timedelta = timedelta(0)
    read_timeout: timedelta = timedelta(0)
    write_timeout: timedelta = timedelta(0)
