"""
Driver behavior flags and their per-field overrides.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BehaviorBundle:
    """Fully resolved driver/ORM behavior for a relational client."""

    skip_default_transaction: bool = False
    prepare_statements: bool = True
    statement_cache_capacity: int = 100
    simple_protocol: bool = False


@dataclass(frozen=True)
class OverrideBundle:
    """
    Explicit overrides layered over the preset.

    None means "not provided"; False and 0 are real values and win over the
    preset like any other.
    """

    skip_default_transaction: Optional[bool] = None
    prepare_statements: Optional[bool] = None
    statement_cache_capacity: Optional[int] = None
    simple_protocol: Optional[bool] = None
