"""
Auto-calculated resource defaults.

Derives default max HP, Evasion, Armor Score and damage thresholds from class
and armor base numbers, level, and aggregated equipment-feature modifiers.
Results are defaults only; the sheet may override each one manually.

Formulas:
- HP: class base (HP growth comes from level-up choices, not from here)
- Evasion: class base + armor evasion modifier + feature evasion
- Armor Score: armor base + feature armor score
- Thresholds: armor base + level + feature threshold modifier
"""

from typing import Any

from pydantic import BaseModel

from .models import AggregatedModifiers, SheetModel


DEFAULT_CLASS_HP = 6
DEFAULT_CLASS_EVASION = 10
DEFAULT_MAJOR_THRESHOLD = 5
DEFAULT_SEVERE_THRESHOLD = 11
DEFAULT_LEVEL = 1


class AutoCalculateContext(SheetModel):
    """Inputs for resource auto-calculation. Missing values fall back to defaults."""
    class_hp: int | None = None
    class_tier: int | None = None
    class_evasion: int | None = None
    level: int | None = None
    armor_score: int | None = None
    armor_evasion_modifier: int | None = None
    armor_thresholds_major: int | None = None
    armor_thresholds_severe: int | None = None
    equipment_feature_modifiers: AggregatedModifiers | None = None


class ComputedAutoValues(SheetModel):
    max_hp: int
    evasion: int
    armor_score: int
    thresholds_major: int
    thresholds_severe: int


class ThresholdModifiers(SheetModel):
    major_threshold: int = 0
    severe_threshold: int = 0


class ThresholdContext(SheetModel):
    """Narrow input for recomputing just the damage thresholds."""
    armor_thresholds_major: int | None = None
    armor_thresholds_severe: int | None = None
    level: int | None = None
    equipment_modifiers: ThresholdModifiers | None = None
    bonus_modifiers: ThresholdModifiers | None = None


class ComputedThresholds(BaseModel):
    major: int
    severe: int


def _coerce(model: type[SheetModel], value: Any) -> Any:
    if isinstance(value, model):
        return value
    return model.model_validate(value or {})


def _default(value: int | None, fallback: int) -> int:
    return fallback if value is None else value


def level_threshold_bonus(level: int | None) -> int:
    """Level adds its full value to each threshold; negatives add nothing."""
    return max(0, _default(level, DEFAULT_LEVEL))


def compute_auto_resources(
    ctx: AutoCalculateContext | dict[str, Any] | None = None,
) -> ComputedAutoValues:
    """Compute default resource values. Pure: the context is not modified."""
    ctx = _coerce(AutoCalculateContext, ctx)
    feature_mods = ctx.equipment_feature_modifiers or AggregatedModifiers()
    level_bonus = level_threshold_bonus(ctx.level)

    return ComputedAutoValues(
        max_hp=_default(ctx.class_hp, DEFAULT_CLASS_HP),
        evasion=(
            _default(ctx.class_evasion, DEFAULT_CLASS_EVASION)
            + _default(ctx.armor_evasion_modifier, 0)
            + feature_mods.evasion
        ),
        armor_score=_default(ctx.armor_score, 0) + feature_mods.armor_score,
        thresholds_major=(
            _default(ctx.armor_thresholds_major, DEFAULT_MAJOR_THRESHOLD)
            + level_bonus
            + feature_mods.major_threshold
        ),
        thresholds_severe=(
            _default(ctx.armor_thresholds_severe, DEFAULT_SEVERE_THRESHOLD)
            + level_bonus
            + feature_mods.severe_threshold
        ),
    )


def compute_thresholds(
    ctx: ThresholdContext | dict[str, Any] | None = None,
) -> ComputedThresholds:
    """Recompute only the damage thresholds.

    Equipment and bonus modifiers are summed before being added, so the result
    agrees with ``compute_auto_resources`` given the same total modifier.
    """
    ctx = _coerce(ThresholdContext, ctx)
    equipment = ctx.equipment_modifiers or ThresholdModifiers()
    bonus = ctx.bonus_modifiers or ThresholdModifiers()
    level_bonus = level_threshold_bonus(ctx.level)

    return ComputedThresholds(
        major=(
            _default(ctx.armor_thresholds_major, DEFAULT_MAJOR_THRESHOLD)
            + level_bonus
            + equipment.major_threshold
            + bonus.major_threshold
        ),
        severe=(
            _default(ctx.armor_thresholds_severe, DEFAULT_SEVERE_THRESHOLD)
            + level_bonus
            + equipment.severe_threshold
            + bonus.severe_threshold
        ),
    )


class ExtendedAutoValues(ComputedAutoValues):
    """Auto values plus the equipment modifiers that are not resources."""
    proficiency_modifier: int
    trait_modifiers: dict[str, int]
    attack_roll_modifier: int
    spellcast_roll_modifier: int
    feature_modifiers: AggregatedModifiers


def compute_extended_auto_values(
    ctx: AutoCalculateContext | dict[str, Any] | None = None,
) -> ExtendedAutoValues:
    """``compute_auto_resources`` plus proficiency, trait and roll modifiers."""
    ctx = _coerce(AutoCalculateContext, ctx)
    base = compute_auto_resources(ctx)
    feature_mods = ctx.equipment_feature_modifiers or AggregatedModifiers()

    return ExtendedAutoValues(
        **base.model_dump(),
        proficiency_modifier=feature_mods.proficiency,
        trait_modifiers=dict(feature_mods.traits),
        attack_roll_modifier=feature_mods.attack_rolls,
        spellcast_roll_modifier=feature_mods.spellcast_rolls,
        feature_modifiers=feature_mods,
    )
