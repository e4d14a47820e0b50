"""
Feature modifier resolution and modifier arithmetic.

A feature contributes a static ``modifiers`` set and, optionally, a
``scaledModifiers`` annex in its metadata that is multiplied by proficiency,
level, or a trait score before use. Optional fields stay optional while
merging: two absent values merge to absent, not zero.
"""

import logging
import math
from typing import Any, Iterable

from pydantic import ValidationError

from .models import (
    STAT_FIELDS,
    TRAITS,
    AggregatedModifiers,
    FeatureStatModifiers,
    ModifierContext,
    ScaledModifiersMetadata,
)

logger = logging.getLogger("daggersheet")

# Identity for combine_modifiers (frozen)
EMPTY_MODIFIERS = AggregatedModifiers()


def empty_modifiers() -> AggregatedModifiers:
    """Return an all-zero aggregate."""
    return AggregatedModifiers()


# ---------------------------------------------------------------------------
# Optional arithmetic
# ---------------------------------------------------------------------------

def sum_optional(a: int | None, b: int | None) -> int | None:
    """Add two optional numbers; absent only when both are absent."""
    if a is None and b is None:
        return None
    return (a or 0) + (b or 0)


def merge_trait_modifiers(
    base: dict[str, int] | None,
    extra: dict[str, int] | None,
) -> dict[str, int] | None:
    if base is None and extra is None:
        return None
    base = base or {}
    extra = extra or {}
    merged: dict[str, int] = {}
    for trait in TRAITS:
        value = sum_optional(base.get(trait), extra.get(trait))
        if value is not None:
            merged[trait] = value
    return merged


def merge_feature_modifiers(
    base: FeatureStatModifiers | None,
    extra: FeatureStatModifiers | None,
) -> FeatureStatModifiers | None:
    """Merge two optional modifier sets field by field."""
    if base is None and extra is None:
        return None
    if base is None:
        return extra
    if extra is None:
        return base
    merged = {
        field: sum_optional(getattr(base, field), getattr(extra, field))
        for field in STAT_FIELDS
    }
    merged["traits"] = merge_trait_modifiers(base.traits, extra.traits)
    return FeatureStatModifiers(**merged)


def scale_feature_modifiers(
    modifiers: FeatureStatModifiers, multiplier: int
) -> FeatureStatModifiers:
    """Multiply every present field by ``multiplier``; absent fields stay absent."""
    scaled: dict[str, Any] = {}
    for field in STAT_FIELDS:
        value = getattr(modifiers, field)
        scaled[field] = None if value is None else value * multiplier
    if modifiers.traits is not None:
        scaled["traits"] = {
            trait: value * multiplier for trait, value in modifiers.traits.items()
        }
    return FeatureStatModifiers(**scaled)


# ---------------------------------------------------------------------------
# Scaled modifiers
# ---------------------------------------------------------------------------

def _round(value: float, mode: str) -> int:
    if mode == "ceil":
        return math.ceil(value)
    if mode == "round":
        # Half rounds up, matching the sheet's rounding
        return math.floor(value + 0.5)
    return math.floor(value)


def resolve_scaled_multiplier(
    scaled: ScaledModifiersMetadata, context: ModifierContext
) -> int:
    """Resolve the integer multiplier for a scaled modifier set (never negative)."""
    if scaled.per == "proficiency":
        return max(0, math.floor(context.proficiency or 0))
    if scaled.per == "level":
        return max(0, math.floor(context.level or 0))

    if not scaled.trait or scaled.trait not in TRAITS:
        return 0
    trait_score = (context.trait_scores or {}).get(scaled.trait)
    if trait_score is None:
        return 0
    factor = 1 if scaled.factor is None else scaled.factor
    return max(0, _round(trait_score * factor, scaled.round or "floor"))


def _scaled_metadata(feature: Any) -> ScaledModifiersMetadata | None:
    metadata = getattr(feature, "metadata", None)
    if not isinstance(metadata, dict):
        return None
    raw = metadata.get("scaledModifiers", metadata.get("scaled_modifiers"))
    if raw is None:
        return None
    if isinstance(raw, ScaledModifiersMetadata):
        return raw
    if not isinstance(raw, dict):
        return None
    try:
        return ScaledModifiersMetadata.model_validate(raw)
    except ValidationError as e:
        logger.debug(
            f"Ignoring malformed scaled modifiers on "
            f"{getattr(feature, 'name', 'feature')!r}: {e.error_count()} error(s)"
        )
        return None


def resolve_scaled_modifiers(
    feature: Any, context: ModifierContext
) -> FeatureStatModifiers | None:
    """Resolve a feature's scaled modifier annex.

    Returns None when there is no annex or the multiplier is 0, so a
    suppressed annex never turns an absent field into an explicit zero.
    """
    scaled = _scaled_metadata(feature)
    if scaled is None or scaled.modifiers is None:
        return None

    multiplier = resolve_scaled_multiplier(scaled, context)
    if multiplier == 0:
        return None
    return scale_feature_modifiers(scaled.modifiers, multiplier)


def resolve_modifiers(
    feature: Any, context: ModifierContext | None = None
) -> FeatureStatModifiers | None:
    """Resolve the full modifier contribution of a single feature.

    Args:
        feature: Any object with optional ``modifiers`` and ``metadata``
            attributes (Feature, DomainCard, ...).
        context: Proficiency, level and trait scores used for scaling.

    Returns:
        The merged static and scaled modifiers, or None if the feature
        contributes nothing.
    """
    context = context or ModifierContext()
    base = getattr(feature, "modifiers", None)
    scaled = resolve_scaled_modifiers(feature, context)
    return merge_feature_modifiers(base, scaled)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def add_feature_modifiers(
    target: AggregatedModifiers, modifiers: FeatureStatModifiers | None
) -> AggregatedModifiers:
    """Return ``target`` plus an optional modifier set; absent fields add 0."""
    if modifiers is None:
        return target
    fields = {
        field: getattr(target, field) + (getattr(modifiers, field) or 0)
        for field in STAT_FIELDS
    }
    traits = dict(target.traits)
    for trait, value in (modifiers.traits or {}).items():
        traits[trait] += value
    return AggregatedModifiers(**fields, traits=traits)


def combine_modifiers(
    base: AggregatedModifiers, extra: AggregatedModifiers
) -> AggregatedModifiers:
    """Field-wise sum of two aggregates. Neither input is modified."""
    combined = {
        field: getattr(base, field) + getattr(extra, field) for field in STAT_FIELDS
    }
    combined["traits"] = {
        trait: base.traits[trait] + extra.traits[trait] for trait in TRAITS
    }
    return AggregatedModifiers(**combined)


def to_aggregate(modifiers: FeatureStatModifiers | None) -> AggregatedModifiers:
    """Materialize an optional modifier set as an aggregate (absent -> 0)."""
    return add_feature_modifiers(EMPTY_MODIFIERS, modifiers)


def fold_modifiers(
    modifier_sets: Iterable[FeatureStatModifiers | None],
) -> AggregatedModifiers:
    """Fold modifier sets into one aggregate via combine_modifiers."""
    total = empty_modifiers()
    for modifiers in modifier_sets:
        total = combine_modifiers(total, to_aggregate(modifiers))
    return total
