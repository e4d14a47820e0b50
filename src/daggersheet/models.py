"""
Data models for the daggersheet rules engine.

Character selections (class, ancestry, community, loadout, inventory) arrive
as plain data from the character sheet and are validated here. Field names
are snake_case; the camelCase names used by the sheet (``armorScore``,
``isEquipped``, ...) are accepted as aliases.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from shortuuid import random


TraitName = Literal["Agility", "Strength", "Finesse", "Instinct", "Presence", "Knowledge"]

TRAITS: tuple[str, ...] = (
    "Agility",
    "Strength",
    "Finesse",
    "Instinct",
    "Presence",
    "Knowledge",
)

# Scalar stat fields shared by FeatureStatModifiers and AggregatedModifiers
STAT_FIELDS: tuple[str, ...] = (
    "evasion",
    "proficiency",
    "armor_score",
    "major_threshold",
    "severe_threshold",
    "attack_rolls",
    "spellcast_rolls",
)


class SheetModel(BaseModel):
    """Base model accepting both snake_case names and the sheet's camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

class FeatureStatModifiers(SheetModel):
    """Optional stat deltas contributed by a single feature.

    ``None`` means "this source does not mention the stat", which is
    different from an explicit ``0`` while modifier sets are being merged.
    """
    evasion: int | None = None
    proficiency: int | None = None
    armor_score: int | None = None
    major_threshold: int | None = None
    severe_threshold: int | None = None
    attack_rolls: int | None = None
    spellcast_rolls: int | None = None
    traits: dict[TraitName, int] | None = None


class ScaledModifiersMetadata(SheetModel):
    """A modifier set multiplied by proficiency, level, or a trait score.

    ``factor`` (default 1) and ``round`` (default floor) only apply to
    trait scaling; ``None`` means the default.
    """
    per: Literal["proficiency", "level", "trait"]
    modifiers: FeatureStatModifiers | None = None
    trait: str | None = None
    factor: float | None = None
    round: Literal["floor", "ceil", "round"] | None = None


def _zero_traits() -> dict[str, int]:
    return {trait: 0 for trait in TRAITS}


class AggregatedModifiers(SheetModel):
    """Cumulative stat deltas with every field materialized (default 0).

    Aggregates are immutable; arithmetic helpers return new instances.
    """
    model_config = ConfigDict(frozen=True)

    evasion: int = 0
    proficiency: int = 0
    armor_score: int = 0
    major_threshold: int = 0
    severe_threshold: int = 0
    attack_rolls: int = 0
    spellcast_rolls: int = 0
    traits: dict[TraitName, int] = Field(default_factory=_zero_traits)

    @field_validator("traits", mode="after")
    @classmethod
    def _fill_traits(cls, value: dict[str, int]) -> dict[str, int]:
        """Every trait is present in an aggregate, even if a caller omits some."""
        return {trait: value.get(trait, 0) for trait in TRAITS}


class ModifierContext(SheetModel):
    """Runtime values used to scale modifiers."""
    proficiency: float | None = None
    level: float | None = None
    trait_scores: dict[str, float] | None = None


# ---------------------------------------------------------------------------
# Features and content definitions
# ---------------------------------------------------------------------------

class Feature(SheetModel):
    """A class feature, ancestry trait, subclass feature or item feature."""
    name: str
    description: str = ""
    modifiers: FeatureStatModifiers | None = None
    metadata: dict[str, Any] | None = None


class SubclassDefinition(SheetModel):
    """A subclass and the features it grants."""
    name: str
    description: str = ""
    spellcast_trait: str | None = None
    features: list[Feature] = Field(default_factory=list)


class ClassDefinition(SheetModel):
    """A canonical or homebrew class.

    Homebrew classes may omit ``name``; the selection's class name is used instead.
    """
    name: str | None = None
    description: str = ""
    domains: list[str] = Field(default_factory=list)
    starting_hit_points: int | None = None
    starting_evasion: int | None = None
    class_features: list[Feature] = Field(default_factory=list)
    subclasses: list[SubclassDefinition] = Field(default_factory=list)


class DomainCard(SheetModel):
    """A domain card, either a canonical definition or a loadout instance.

    Loadout instances may override any canonical field; ``is_activated``
    is only meaningful on instances.
    """
    id: str = Field(default_factory=lambda: random(length=8))
    name: str
    domain: str | None = None
    level: int | None = None
    type: str | None = None
    recall_cost: int | None = None
    description: str = ""
    modifiers: FeatureStatModifiers | None = None
    metadata: dict[str, Any] | None = None
    is_activated: bool | None = None


# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------

class ClassSelection(SheetModel):
    """The character's chosen class and subclass."""
    class_name: str | None = None
    subclass_name: str | None = None
    is_homebrew: bool = False
    homebrew_class: ClassDefinition | None = None


class AncestryDefinition(SheetModel):
    """An ancestry with its two features."""
    name: str
    description: str = ""
    primary_feature: Feature
    secondary_feature: Feature


class StandardAncestry(SheetModel):
    mode: Literal["standard"] = "standard"
    ancestry: AncestryDefinition


class MixedAncestry(SheetModel):
    """An ancestry combining features taken from two different ancestries."""
    mode: Literal["mixed"] = "mixed"
    name: str
    primary_from: str
    secondary_from: str
    primary_feature: Feature
    secondary_feature: Feature


class HomebrewAncestry(SheetModel):
    mode: Literal["homebrew"] = "homebrew"
    name: str
    description: str = ""
    primary_feature: Feature
    secondary_feature: Feature


AncestrySelection = Annotated[
    Union[StandardAncestry, MixedAncestry, HomebrewAncestry],
    Field(discriminator="mode"),
]


class CommunityDefinition(SheetModel):
    name: str
    description: str = ""
    feature: Feature


class StandardCommunity(SheetModel):
    mode: Literal["standard"] = "standard"
    community: CommunityDefinition


class HomebrewCommunity(SheetModel):
    mode: Literal["homebrew"] = "homebrew"
    name: str
    description: str = ""
    feature: Feature


CommunitySelection = Annotated[
    Union[StandardCommunity, HomebrewCommunity],
    Field(discriminator="mode"),
]


class LoadoutSelection(SheetModel):
    """Active domain cards (the loadout) and inactive ones (the vault)."""
    active_cards: list[DomainCard] = Field(default_factory=list)
    vault_cards: list[DomainCard] = Field(default_factory=list)


class TraitBonus(SheetModel):
    """A flat trait bonus granted by an item.

    ``trait`` is kept as free text; unknown names contribute nothing.
    """
    trait: str | None = None
    bonus: int | None = None


class InventoryItem(SheetModel):
    """An item definition as stored in the character's inventory."""
    name: str | None = None
    description: str = ""
    category: str | None = None
    stat_modifiers: FeatureStatModifiers | None = None
    features: list[Feature] = Field(default_factory=list)
    trait_bonus: TraitBonus | None = None


class InventoryEntry(SheetModel):
    """One inventory slot."""
    id: str = Field(default_factory=lambda: random(length=8))
    item: InventoryItem | None = None
    quantity: int = 1
    is_equipped: bool = False


class InventoryState(SheetModel):
    items: list[InventoryEntry] = Field(default_factory=list)


class CharacterSelections(SheetModel):
    """Everything the bonus aggregator reads about a character."""
    class_selection: ClassSelection | None = None
    ancestry: AncestrySelection | None = None
    community: CommunitySelection | None = None
    loadout: LoadoutSelection | None = None
    inventory: InventoryState | None = None
    is_wearing_armor: bool = False
    proficiency: float | None = None
    level: float | None = None
    trait_scores: dict[str, float] | None = None

    def modifier_context(self) -> ModifierContext:
        return ModifierContext(
            proficiency=self.proficiency,
            level=self.level,
            trait_scores=self.trait_scores,
        )


# ---------------------------------------------------------------------------
# Bonus breakdown
# ---------------------------------------------------------------------------

class BonusSourceType(str, Enum):
    """Where a bonus came from."""
    CLASS_FEATURE = "class-feature"
    SUBCLASS_FEATURE = "subclass-feature"
    ANCESTRY_FEATURE = "ancestry-feature"
    COMMUNITY_FEATURE = "community-feature"
    DOMAIN_CARD = "domain-card"
    INVENTORY_ITEM = "inventory-item"
    INVENTORY_FEATURE = "inventory-feature"
    EQUIPMENT_ITEM = "equipment-item"
    EQUIPMENT_FEATURE = "equipment-feature"
    EXPERIENCE_BONUS = "experience-bonus"


class ExperienceBonus(SheetModel):
    experience: str
    bonus: int


class BonusSourceEntry(SheetModel):
    """One row of the bonus audit trail."""
    type: BonusSourceType
    source_name: str
    detail: str | None = None
    modifiers: FeatureStatModifiers
    experience_bonus: ExperienceBonus | None = None


class BonusBreakdown(SheetModel):
    """Aggregated total plus the itemized sources that produced it."""
    total: AggregatedModifiers = Field(default_factory=AggregatedModifiers)
    sources: list[BonusSourceEntry] = Field(default_factory=list)

    def sources_by_type(self) -> dict[BonusSourceType, list[BonusSourceEntry]]:
        """Group sources by origin, keeping collection order within each group."""
        grouped: dict[BonusSourceType, list[BonusSourceEntry]] = {}
        for entry in self.sources:
            grouped.setdefault(entry.type, []).append(entry)
        return grouped


__all__ = [
    "TraitName",
    "TRAITS",
    "STAT_FIELDS",
    "SheetModel",
    "FeatureStatModifiers",
    "ScaledModifiersMetadata",
    "AggregatedModifiers",
    "ModifierContext",
    "Feature",
    "SubclassDefinition",
    "ClassDefinition",
    "DomainCard",
    "ClassSelection",
    "AncestryDefinition",
    "StandardAncestry",
    "MixedAncestry",
    "HomebrewAncestry",
    "AncestrySelection",
    "CommunityDefinition",
    "StandardCommunity",
    "HomebrewCommunity",
    "CommunitySelection",
    "LoadoutSelection",
    "TraitBonus",
    "InventoryItem",
    "InventoryEntry",
    "InventoryState",
    "CharacterSelections",
    "BonusSourceType",
    "ExperienceBonus",
    "BonusSourceEntry",
    "BonusBreakdown",
]
