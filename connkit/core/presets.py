"""
Behavior presets and explicit overrides.

Precedence, highest first: an override field that is not None, then the
active preset's bundle, then the hard default bundle.
"""

from dataclasses import dataclass, fields, replace
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from ..models.behavior import BehaviorBundle, OverrideBundle
from ..models.enums import BackendFamily, Preset

HARD_DEFAULT_BEHAVIOR = BehaviorBundle()

# Statement-level poolers (PgBouncer in transaction mode, Supabase) cannot
# keep server-side prepared statements or session state between statements.
TRANSACTION_POOLER_BEHAVIOR = BehaviorBundle(
    skip_default_transaction=True,
    prepare_statements=False,
    statement_cache_capacity=0,
    simple_protocol=True,
)

PRESETS: Mapping[BackendFamily, Mapping[Preset, BehaviorBundle]] = MappingProxyType({
    BackendFamily.POSTGRES: MappingProxyType({
        Preset.NONE: HARD_DEFAULT_BEHAVIOR,
        Preset.TRANSACTION_POOLER: TRANSACTION_POOLER_BEHAVIOR,
    }),
})

_NO_PRESETS: Mapping[Preset, BehaviorBundle] = MappingProxyType({Preset.NONE: HARD_DEFAULT_BEHAVIOR})


@dataclass(frozen=True)
class PresetResolution:
    """Resolved behavior plus any non-fatal warnings raised on the way."""

    behavior: BehaviorBundle
    warnings: Tuple[str, ...] = ()


def resolve_preset(token: Optional[str], family: BackendFamily) -> PresetResolution:
    """
    Map a preset token to its behavior bundle.

    Unknown tokens never fail: they resolve to the hard default bundle and
    the returned resolution carries a warning describing the token.

    Args:
        token: Preset name from configuration; empty or None means no preset
        family: Backend family; only PostgreSQL knows a named preset

    Returns:
        PresetResolution: Bundle and warnings
    """
    normalized = (token or "").strip().lower()
    recognized = PRESETS.get(family, _NO_PRESETS)

    for preset, behavior in recognized.items():
        if preset.value == normalized:
            return PresetResolution(behavior=behavior)

    known = ", ".join(repr(p.value) for p in recognized if p.value) or "none"
    warning = (
        f"unknown preset {token!r} for {family.value} (known: {known}); "
        f"using default behavior"
    )
    return PresetResolution(behavior=HARD_DEFAULT_BEHAVIOR, warnings=(warning,))


def merge_overrides(behavior: BehaviorBundle, overrides: Optional[OverrideBundle]) -> BehaviorBundle:
    """
    Layer explicit overrides on top of a preset bundle.

    Only fields that are not None replace the preset value, so an explicit
    False still wins over a preset's True.
    """
    if overrides is None:
        return behavior
    updates = {
        f.name: getattr(overrides, f.name)
        for f in fields(OverrideBundle)
        if getattr(overrides, f.name) is not None
    }
    return replace(behavior, **updates)


def resolve_behavior(
    token: Optional[str],
    family: BackendFamily,
    overrides: Optional[OverrideBundle] = None,
) -> PresetResolution:
    """Resolve the preset and apply overrides in one step."""
    resolution = resolve_preset(token, family)
    return PresetResolution(
        behavior=merge_overrides(resolution.behavior, overrides),
        warnings=resolution.warnings,
    )
