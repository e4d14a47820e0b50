"""
Equipment feature parsing.

Armor, weapons and other equipment describe their stat effects in prose.
This module reads those descriptions into ``FeatureStatModifiers`` and folds
the active equipment into the ``AggregatedModifiers`` that resource
auto-calculation consumes.

Supported description patterns (case-insensitive; Unicode minus signs and
dashes read as ``-``):
    "+X to Evasion", "-X to Finesse", "+X to Armor Score"
    "+X to Major damage threshold", "+X to Severe damage threshold"
    "+X to Proficiency", "+X to attack rolls", "+X to Spellcast Rolls"
    "You gain a +X bonus to your Agility."
    "-X Proficiency" (signed value, no "to")
    "-X to all character traits" (optionally "... and Evasion")
    Combined: "+X to Armor Score; -Y to Evasion"

Functions:
    parse_feature_description: Extract stat modifiers from one description.
    parse_feature_modifiers: Same, as a FeatureStatModifiers set.
    get_equipment_feature_modifiers: Aggregate modifiers of all active equipment.
    build_auto_calculate_context: Assemble an AutoCalculateContext.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Literal

from pydantic import BaseModel, Field

from .models import TRAITS, AggregatedModifiers, Feature, FeatureStatModifiers, SheetModel
from .modifiers import fold_modifiers, merge_feature_modifiers
from .resources import AutoCalculateContext

logger = logging.getLogger("daggersheet.equipment")


# ---------------------------------------------------------------------------
# Description parsing
# ---------------------------------------------------------------------------

# Unicode minus sign, en dash and em dash
_MINUS_SIGNS = str.maketrans({"\u2212": "-", "\u2013": "-", "\u2014": "-"})

_STAT_NAMES: dict[str, str] = {
    "evasion": "evasion",
    "proficiency": "proficiency",
    "armor score": "armor_score",
    "major damage threshold": "major_threshold",
    "severe damage threshold": "severe_threshold",
    "attack rolls": "attack_rolls",
    "spellcast rolls": "spellcast_rolls",
    **{trait.lower(): trait for trait in TRAITS},
}

_TRAIT_ALTERNATION = "|".join(TRAITS)

_TO_RE = re.compile(
    r"([+-]?\d+)\s*to\s+(Evasion|Proficiency|Armor Score|Major damage threshold|"
    r"Severe damage threshold|attack rolls|Spellcast Rolls|" + _TRAIT_ALTERNATION + r")",
    re.IGNORECASE,
)
_BONUS_RE = re.compile(
    r"gain\s+a\s+([+-]?\d+)\s*bonus\s+to\s+(?:your\s+)?("
    + _TRAIT_ALTERNATION + r"|Evasion|Proficiency)",
    re.IGNORECASE,
)
_STANDALONE_RE = re.compile(
    r"([+-]\d+)\s+(Proficiency|Evasion|" + _TRAIT_ALTERNATION + r")(?:[,.\s]|$)",
    re.IGNORECASE,
)
_ALL_TRAITS_RE = re.compile(r"([+-]?\d+)\s*to\s+all\s+character\s+traits", re.IGNORECASE)
_AND_EVASION_RE = re.compile(r"and\s+Evasion", re.IGNORECASE)
_VALUE_RE = re.compile(r"([+-])?(\d+)")


class StatModifier(BaseModel):
    """One stat change read from a description.

    ``stat`` is a ``FeatureStatModifiers`` field name or a trait name.
    """
    stat: str
    value: int
    applies_to_all_traits: bool = False


def normalize_minus_signs(text: str) -> str:
    return text.translate(_MINUS_SIGNS)


def parse_modifier_value(text: str) -> int:
    """Parse a signed number such as '+1', '-2' or '−1'; 0 if none."""
    m = _VALUE_RE.match(normalize_minus_signs(text.strip()))
    if not m:
        return 0
    value = int(m.group(2))
    return -value if m.group(1) == "-" else value


def _scan(pattern: re.Pattern[str], text: str) -> list[StatModifier]:
    found: list[StatModifier] = []
    for m in pattern.finditer(text):
        value = parse_modifier_value(m.group(1))
        stat = _STAT_NAMES.get(m.group(2).strip().lower())
        if stat and value != 0:
            found.append(StatModifier(stat=stat, value=value))
    return found


def _scan_all_traits(text: str) -> list[StatModifier]:
    found: list[StatModifier] = []
    for m in _ALL_TRAITS_RE.finditer(text):
        value = parse_modifier_value(m.group(1))
        if value == 0:
            continue
        found.extend(
            StatModifier(stat=trait, value=value, applies_to_all_traits=True)
            for trait in TRAITS
        )
        if _AND_EVASION_RE.search(text):
            found.append(StatModifier(stat="evasion", value=value, applies_to_all_traits=True))
    return found


def parse_feature_description(description: str | None) -> list[StatModifier]:
    """Extract every stat modifier stated in a feature description.

    The "all character traits" form takes precedence; the other patterns are
    only read when it is absent. Each stat is reported once, keeping the
    first match.
    """
    if not description:
        return []
    text = normalize_minus_signs(description)

    found = _scan_all_traits(text)
    if not found:
        found = _scan(_TO_RE, text) + _scan(_BONUS_RE, text) + _scan(_STANDALONE_RE, text)

    seen: set[str] = set()
    unique: list[StatModifier] = []
    for modifier in found:
        if modifier.stat in seen:
            continue
        seen.add(modifier.stat)
        unique.append(modifier)
    return unique


def to_feature_modifiers(modifiers: list[StatModifier]) -> FeatureStatModifiers | None:
    """Convert parsed stat modifiers to an optional modifier set (None if empty)."""
    if not modifiers:
        return None
    fields: dict[str, Any] = {}
    traits: dict[str, int] = {}
    for modifier in modifiers:
        if modifier.stat in TRAITS:
            traits[modifier.stat] = traits.get(modifier.stat, 0) + modifier.value
        else:
            fields[modifier.stat] = fields.get(modifier.stat, 0) + modifier.value
    if traits:
        fields["traits"] = traits
    return FeatureStatModifiers(**fields)


def parse_feature_modifiers(description: str | None) -> FeatureStatModifiers | None:
    return to_feature_modifiers(parse_feature_description(description))


# ---------------------------------------------------------------------------
# Equipment state
# ---------------------------------------------------------------------------

EquipmentMode = Literal["standard", "homebrew"]


class EquipmentItem(SheetModel):
    """Armor, a weapon, a combat wheelchair or a custom piece of equipment.

    Explicit ``stat_modifiers`` take precedence over anything read from
    ``features``.
    """
    name: str | None = None
    description: str = ""
    stat_modifiers: FeatureStatModifiers | None = None
    features: list[Feature] = Field(default_factory=list)


class CustomEquipmentSlot(EquipmentItem):
    """A user-defined slot; counts unless explicitly deactivated."""
    activated: bool | None = None


class EquipmentState(SheetModel):
    """Equipped gear. Each slot has a standard and a homebrew variant."""
    armor_mode: EquipmentMode = "standard"
    armor: EquipmentItem | None = None
    homebrew_armor: EquipmentItem | None = None
    primary_weapon_mode: EquipmentMode = "standard"
    primary_weapon: EquipmentItem | None = None
    homebrew_primary_weapon: EquipmentItem | None = None
    secondary_weapon_mode: EquipmentMode = "standard"
    secondary_weapon: EquipmentItem | None = None
    homebrew_secondary_weapon: EquipmentItem | None = None
    use_combat_wheelchair: bool = False
    wheelchair_mode: EquipmentMode = "standard"
    combat_wheelchair: EquipmentItem | None = None
    homebrew_wheelchair: EquipmentItem | None = None
    custom_slots: list[CustomEquipmentSlot] = Field(default_factory=list)


def active_equipment(equipment: EquipmentState) -> list[EquipmentItem]:
    """Items currently in effect, honoring each slot's standard/homebrew mode."""
    def pick(mode: EquipmentMode, standard, homebrew):
        return homebrew if mode == "homebrew" else standard

    items = [
        pick(equipment.armor_mode, equipment.armor, equipment.homebrew_armor),
        pick(equipment.primary_weapon_mode, equipment.primary_weapon,
             equipment.homebrew_primary_weapon),
        pick(equipment.secondary_weapon_mode, equipment.secondary_weapon,
             equipment.homebrew_secondary_weapon),
    ]
    if equipment.use_combat_wheelchair:
        items.append(pick(equipment.wheelchair_mode, equipment.combat_wheelchair,
                          equipment.homebrew_wheelchair))
    items.extend(slot for slot in equipment.custom_slots if slot.activated is not False)
    return [item for item in items if item is not None]


def item_feature_modifiers(item: EquipmentItem) -> FeatureStatModifiers | None:
    """Modifiers of one item.

    Uses ``stat_modifiers`` when set. Otherwise each feature contributes its
    own ``modifiers`` or, failing that, what its description states; a custom
    slot's own description is read as well.
    """
    if item.stat_modifiers is not None:
        return item.stat_modifiers

    result: FeatureStatModifiers | None = None
    for feature in item.features:
        modifiers = feature.modifiers
        if modifiers is None:
            modifiers = parse_feature_modifiers(feature.description)
        result = merge_feature_modifiers(result, modifiers)
    if isinstance(item, CustomEquipmentSlot):
        result = merge_feature_modifiers(result, parse_feature_modifiers(item.description))
    return result


def get_equipment_feature_modifiers(
    equipment: EquipmentState | dict[str, Any] | None,
) -> AggregatedModifiers:
    """Aggregate stat modifiers from all active equipment."""
    if equipment is None:
        return AggregatedModifiers()
    if not isinstance(equipment, EquipmentState):
        equipment = EquipmentState.model_validate(equipment)

    items = active_equipment(equipment)
    total = fold_modifiers(item_feature_modifiers(item) for item in items)
    logger.debug(f"Equipment modifiers from {len(items)} active item(s): {total}")
    return total


def build_auto_calculate_context(
    *,
    class_hp: int,
    class_evasion: int,
    armor_score: int,
    armor_evasion_modifier: int,
    armor_thresholds_major: int,
    armor_thresholds_severe: int,
    level: int,
    tier: int,
    equipment: EquipmentState | dict[str, Any] | None,
) -> AutoCalculateContext:
    """Assemble an auto-calculation context with equipment feature modifiers."""
    return AutoCalculateContext(
        class_hp=class_hp,
        class_tier=tier,
        class_evasion=class_evasion,
        level=level,
        armor_score=armor_score,
        armor_evasion_modifier=armor_evasion_modifier,
        armor_thresholds_major=armor_thresholds_major,
        armor_thresholds_severe=armor_thresholds_severe,
        equipment_feature_modifiers=get_equipment_feature_modifiers(equipment),
    )
