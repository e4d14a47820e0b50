"""
Character stats engine.

Turns class, armor, equipment, progression and trait inputs into final stat
values, each with a breakdown of where its parts came from.

Calculation rules:
- HP: class base + (tier - 1)
- Evasion: class base + armor modifier + equipment modifiers
- Armor Score: armor base + equipment modifiers
- Proficiency: base (1) + equipment modifiers
- Thresholds: armor base + level + equipment modifiers
- Traits: value + bonus + equipment trait modifier
  (+ armor agility modifier, for Agility only)
"""

from pydantic import BaseModel, Field

from .catalog import ContentLookup
from .models import TRAITS, AggregatedModifiers, ClassSelection, SheetModel
from .resources import (
    DEFAULT_CLASS_EVASION,
    DEFAULT_CLASS_HP,
    DEFAULT_LEVEL,
    DEFAULT_MAJOR_THRESHOLD,
    DEFAULT_SEVERE_THRESHOLD,
    level_threshold_bonus,
)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class ClassInput(SheetModel):
    base_hp: int = DEFAULT_CLASS_HP
    base_evasion: int = DEFAULT_CLASS_EVASION
    tier: int = 1


class BaseThresholds(SheetModel):
    major: int = DEFAULT_MAJOR_THRESHOLD
    severe: int = DEFAULT_SEVERE_THRESHOLD


class ArmorInput(SheetModel):
    base_score: int = 0
    evasion_modifier: int = 0
    agility_modifier: int = 0
    base_thresholds: BaseThresholds = Field(default_factory=BaseThresholds)


class ProgressionInput(SheetModel):
    level: int = DEFAULT_LEVEL


class TraitState(SheetModel):
    value: int = 0
    bonus: int = 0
    marked: bool = False


def _default_trait_states() -> dict[str, TraitState]:
    return {trait: TraitState() for trait in TRAITS}


class TraitsInput(SheetModel):
    traits: dict[str, TraitState] = Field(default_factory=_default_trait_states)


class CharacterStatsInput(SheetModel):
    class_input: ClassInput = Field(default_factory=ClassInput)
    armor: ArmorInput = Field(default_factory=ArmorInput)
    equipment_modifiers: AggregatedModifiers = Field(default_factory=AggregatedModifiers)
    progression: ProgressionInput = Field(default_factory=ProgressionInput)
    traits: TraitsInput = Field(default_factory=TraitsInput)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class CalculatedHp(BaseModel):
    class_base: int
    tier_bonus: int
    total: int


class CalculatedEvasion(BaseModel):
    class_base: int
    armor_modifier: int
    equipment_modifier: int
    total: int


class CalculatedArmorScore(BaseModel):
    base: int
    equipment_modifier: int
    total: int


class CalculatedProficiency(BaseModel):
    base: int
    equipment_modifier: int
    total: int


class CalculatedThreshold(BaseModel):
    base: int
    level_bonus: int
    equipment_modifier: int
    total: int


class CalculatedThresholds(BaseModel):
    major: CalculatedThreshold
    severe: CalculatedThreshold


class CalculatedTrait(BaseModel):
    base: int
    bonus: int
    equipment_modifier: int
    total: int
    marked: bool


class RollModifiers(BaseModel):
    attack: int
    spellcast: int


class CharacterStatsOutput(BaseModel):
    hp: CalculatedHp
    evasion: CalculatedEvasion
    armor_score: CalculatedArmorScore
    proficiency: CalculatedProficiency
    thresholds: CalculatedThresholds
    traits: dict[str, CalculatedTrait]
    roll_modifiers: RollModifiers


class StatTotals(BaseModel):
    hp: int
    evasion: int
    armor_score: int
    proficiency: int
    thresholds_major: int
    thresholds_severe: int
    traits: dict[str, int]


# ---------------------------------------------------------------------------
# Calculators
# ---------------------------------------------------------------------------

def calculate_hp(class_input: ClassInput) -> CalculatedHp:
    tier_bonus = max(0, class_input.tier - 1)
    return CalculatedHp(
        class_base=class_input.base_hp,
        tier_bonus=tier_bonus,
        total=class_input.base_hp + tier_bonus,
    )


def calculate_evasion(
    class_input: ClassInput, armor: ArmorInput, equipment: AggregatedModifiers
) -> CalculatedEvasion:
    return CalculatedEvasion(
        class_base=class_input.base_evasion,
        armor_modifier=armor.evasion_modifier,
        equipment_modifier=equipment.evasion,
        total=class_input.base_evasion + armor.evasion_modifier + equipment.evasion,
    )


def calculate_armor_score(
    armor: ArmorInput, equipment: AggregatedModifiers
) -> CalculatedArmorScore:
    return CalculatedArmorScore(
        base=armor.base_score,
        equipment_modifier=equipment.armor_score,
        total=armor.base_score + equipment.armor_score,
    )


def calculate_proficiency(
    equipment: AggregatedModifiers, base_proficiency: int = 1
) -> CalculatedProficiency:
    return CalculatedProficiency(
        base=base_proficiency,
        equipment_modifier=equipment.proficiency,
        total=base_proficiency + equipment.proficiency,
    )


def _calculate_threshold(base: int, level: int, equipment_modifier: int) -> CalculatedThreshold:
    level_bonus = level_threshold_bonus(level)
    return CalculatedThreshold(
        base=base,
        level_bonus=level_bonus,
        equipment_modifier=equipment_modifier,
        total=base + level_bonus + equipment_modifier,
    )


def calculate_thresholds(
    armor: ArmorInput, progression: ProgressionInput, equipment: AggregatedModifiers
) -> CalculatedThresholds:
    return CalculatedThresholds(
        major=_calculate_threshold(
            armor.base_thresholds.major, progression.level, equipment.major_threshold
        ),
        severe=_calculate_threshold(
            armor.base_thresholds.severe, progression.level, equipment.severe_threshold
        ),
    )


def calculate_traits(
    traits: TraitsInput, armor: ArmorInput, equipment: AggregatedModifiers
) -> dict[str, CalculatedTrait]:
    result: dict[str, CalculatedTrait] = {}
    for trait in TRAITS:
        state = traits.traits.get(trait, TraitState())
        armor_agility = armor.agility_modifier if trait == "Agility" else 0
        equipment_modifier = equipment.traits[trait] + armor_agility
        result[trait] = CalculatedTrait(
            base=state.value,
            bonus=state.bonus,
            equipment_modifier=equipment_modifier,
            total=state.value + state.bonus + equipment_modifier,
            marked=state.marked,
        )
    return result


def calculate_character_stats(
    stats_input: CharacterStatsInput | None = None,
) -> CharacterStatsOutput:
    """Calculate every character stat with its breakdown.

    Missing inputs fall back to defaults: a 6 HP / 10 Evasion class at tier 1,
    no armor (thresholds 5/11), no equipment modifiers, level 1, zeroed traits.
    """
    stats_input = stats_input or CharacterStatsInput()
    class_input = stats_input.class_input
    armor = stats_input.armor
    equipment = stats_input.equipment_modifiers

    return CharacterStatsOutput(
        hp=calculate_hp(class_input),
        evasion=calculate_evasion(class_input, armor, equipment),
        armor_score=calculate_armor_score(armor, equipment),
        proficiency=calculate_proficiency(equipment),
        thresholds=calculate_thresholds(armor, stats_input.progression, equipment),
        traits=calculate_traits(stats_input.traits, armor, equipment),
        roll_modifiers=RollModifiers(
            attack=equipment.attack_rolls,
            spellcast=equipment.spellcast_rolls,
        ),
    )


def get_stat_totals(output: CharacterStatsOutput) -> StatTotals:
    """Strip the breakdowns, keeping only the final values."""
    return StatTotals(
        hp=output.hp.total,
        evasion=output.evasion.total,
        armor_score=output.armor_score.total,
        proficiency=output.proficiency.total,
        thresholds_major=output.thresholds.major.total,
        thresholds_severe=output.thresholds.severe.total,
        traits={trait: calc.total for trait, calc in output.traits.items()},
    )


def has_equipment_modifiers(output: CharacterStatsOutput) -> bool:
    """Whether any equipment modifier contributes to the output."""
    if any((
        output.evasion.equipment_modifier,
        output.armor_score.equipment_modifier,
        output.proficiency.equipment_modifier,
        output.thresholds.major.equipment_modifier,
        output.thresholds.severe.equipment_modifier,
        output.roll_modifiers.attack,
        output.roll_modifiers.spellcast,
    )):
        return True
    return any(calc.equipment_modifier for calc in output.traits.values())


# ---------------------------------------------------------------------------
# Input builders
# ---------------------------------------------------------------------------

def get_tier_from_level(level: int) -> int:
    """Tier 1: level 1; tier 2: 2-4; tier 3: 5-7; tier 4: 8 and up."""
    if level <= 1:
        return 1
    if level <= 4:
        return 2
    if level <= 7:
        return 3
    return 4


def build_class_input(
    selection: ClassSelection | None,
    catalog: ContentLookup,
    level: int = DEFAULT_LEVEL,
) -> ClassInput:
    """Derive base HP/Evasion from the selected class; tier comes from level."""
    tier = get_tier_from_level(level)
    if selection is None:
        return ClassInput(tier=tier)

    if selection.is_homebrew and selection.homebrew_class is not None:
        class_def = selection.homebrew_class
    elif selection.class_name:
        class_def = catalog.get_class_by_name(selection.class_name)
    else:
        class_def = None

    if class_def is None:
        return ClassInput(tier=tier)
    return ClassInput(
        base_hp=(
            DEFAULT_CLASS_HP if class_def.starting_hit_points is None
            else class_def.starting_hit_points
        ),
        base_evasion=(
            DEFAULT_CLASS_EVASION if class_def.starting_evasion is None
            else class_def.starting_evasion
        ),
        tier=tier,
    )
