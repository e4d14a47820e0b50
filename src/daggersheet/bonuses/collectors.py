"""
Bonus source collectors.

One collector per origin. Each walks a selection and calls ``push`` once per
feature, passing the resolved (possibly scaled) modifiers; ``push`` decides
whether the entry is recorded.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..catalog import ContentLookup
from ..models import (
    TRAITS,
    BonusSourceType,
    ClassSelection,
    DomainCard,
    Feature,
    FeatureStatModifiers,
    HomebrewAncestry,
    HomebrewCommunity,
    InventoryEntry,
    InventoryState,
    LoadoutSelection,
    MixedAncestry,
    ModifierContext,
    StandardAncestry,
    StandardCommunity,
)
from ..modifiers import resolve_modifiers

logger = logging.getLogger("daggersheet.bonuses")


class PushSource(Protocol):
    def __call__(
        self,
        type: BonusSourceType,
        source_name: str,
        modifiers: FeatureStatModifiers | None,
        detail: str | None = None,
    ) -> None: ...


def _push_features(
    push: PushSource,
    source_type: BonusSourceType,
    source_name: str,
    features: list[Feature],
    context: ModifierContext,
) -> None:
    for feature in features:
        push(
            source_type,
            source_name,
            resolve_modifiers(feature, context),
            detail=feature.name,
        )


# ---------------------------------------------------------------------------
# Class / subclass
# ---------------------------------------------------------------------------

def collect_class_sources(
    selection: ClassSelection | None,
    context: ModifierContext,
    push: PushSource,
    catalog: ContentLookup,
) -> None:
    if selection is None:
        return
    class_name = selection.class_name
    homebrew = selection.homebrew_class

    if selection.is_homebrew and homebrew is not None:
        source_name = homebrew.name if homebrew.name is not None else class_name
        if source_name is None:
            source_name = "Homebrew Class"
        _push_features(
            push, BonusSourceType.CLASS_FEATURE, source_name,
            homebrew.class_features, context,
        )
        return

    if not class_name:
        return
    class_def = catalog.get_class_by_name(class_name)
    if class_def is None:
        return
    _push_features(
        push, BonusSourceType.CLASS_FEATURE, class_name,
        class_def.class_features, context,
    )


def collect_subclass_sources(
    selection: ClassSelection | None,
    context: ModifierContext,
    push: PushSource,
    catalog: ContentLookup,
) -> None:
    if selection is None:
        return
    class_name = selection.class_name
    subclass_name = selection.subclass_name
    if not class_name or not subclass_name:
        return

    homebrew = selection.homebrew_class
    if selection.is_homebrew and homebrew is not None:
        subclass = next(
            (s for s in homebrew.subclasses if s.name == subclass_name), None
        )
    else:
        subclass = catalog.get_subclass_by_name(class_name, subclass_name)
    if subclass is None:
        return

    _push_features(
        push, BonusSourceType.SUBCLASS_FEATURE, subclass_name,
        subclass.features, context,
    )


# ---------------------------------------------------------------------------
# Ancestry / community
# ---------------------------------------------------------------------------

def collect_ancestry_sources(
    ancestry: StandardAncestry | MixedAncestry | HomebrewAncestry | None,
    context: ModifierContext,
    push: PushSource,
) -> None:
    """Push the primary and secondary feature of whichever ancestry mode is active."""
    if ancestry is None:
        return
    if isinstance(ancestry, StandardAncestry):
        name = ancestry.ancestry.name
        features = [ancestry.ancestry.primary_feature, ancestry.ancestry.secondary_feature]
    else:
        name = ancestry.name
        features = [ancestry.primary_feature, ancestry.secondary_feature]
    _push_features(push, BonusSourceType.ANCESTRY_FEATURE, name, features, context)


def collect_community_sources(
    community: StandardCommunity | HomebrewCommunity | None,
    context: ModifierContext,
    push: PushSource,
) -> None:
    if community is None:
        return
    if isinstance(community, StandardCommunity):
        name, feature = community.community.name, community.community.feature
    else:
        name, feature = community.name, community.feature
    _push_features(push, BonusSourceType.COMMUNITY_FEATURE, name, [feature], context)


# ---------------------------------------------------------------------------
# Loadout (domain cards)
# ---------------------------------------------------------------------------

def _meta(metadata: dict[str, Any] | None, camel: str, snake: str) -> Any:
    if not metadata:
        return None
    return metadata.get(camel, metadata.get(snake))


def requires_armor(metadata: dict[str, Any] | None) -> bool:
    return _meta(metadata, "requiresArmor", "requires_armor") is True


def resolve_domain_requirement(
    metadata: dict[str, Any] | None,
) -> tuple[str | None, int | None] | None:
    """Return ``(domain, min_cards)`` from card metadata, or None if absent."""
    raw = _meta(metadata, "domainRequirement", "domain_requirement")
    if not isinstance(raw, dict):
        return None
    domain = raw.get("domain")
    domain = domain if isinstance(domain, str) else None
    min_cards = raw.get("minCards", raw.get("min_cards"))
    min_cards = min_cards if isinstance(min_cards, (int, float)) and not isinstance(min_cards, bool) else None
    if not domain and min_cards is None:
        return None
    return domain, min_cards


def count_domain_cards(cards: list[DomainCard]) -> dict[str, int]:
    """Count cards per domain. Callers pass every active card, eligible or not."""
    counts: dict[str, int] = {}
    for card in cards:
        if not card.domain:
            continue
        counts[card.domain] = counts.get(card.domain, 0) + 1
    return counts


def meets_card_requirements(
    card: DomainCard,
    domain_counts: dict[str, int],
    is_wearing_armor: bool,
) -> bool:
    """Check armor gating and domain-count requirements for a resolved card."""
    if requires_armor(card.metadata) and not is_wearing_armor:
        return False
    requirement = resolve_domain_requirement(card.metadata)
    if requirement is None:
        return True
    domain, min_cards = requirement
    if domain is None:
        domain = card.domain
    if not domain:
        return False
    return domain_counts.get(domain, 0) >= (min_cards or 0)


def merge_metadata(
    base: dict[str, Any] | None,
    override: dict[str, Any] | None,
) -> dict[str, Any] | None:
    """Shallow-merge two metadata bags; the override wins per key."""
    if base is None and override is None:
        return None
    merged = {**(base or {}), **(override or {})}
    return merged or None


def resolve_loadout_card(card: DomainCard, catalog: ContentLookup) -> DomainCard:
    """Patch a canonical card with a loadout instance's overrides.

    Fields explicitly set on the instance win; ``modifiers`` falls back to the
    canonical set when the instance has none; ``metadata`` is merged.
    """
    canonical = catalog.get_card_by_name(card.name)
    if canonical is None:
        return card
    overrides = {field: getattr(card, field) for field in card.model_fields_set}
    overrides["modifiers"] = card.modifiers if card.modifiers is not None else canonical.modifiers
    overrides["metadata"] = merge_metadata(canonical.metadata, card.metadata)
    return canonical.model_copy(update=overrides)


def collect_loadout_sources(
    loadout: LoadoutSelection | None,
    is_wearing_armor: bool,
    context: ModifierContext,
    push: PushSource,
    catalog: ContentLookup,
) -> None:
    if loadout is None:
        return
    active_cards = loadout.active_cards
    # Counted once over all active cards, including ones excluded below
    domain_counts = count_domain_cards(active_cards)

    for card in active_cards:
        if card.is_activated is False:
            continue
        resolved = resolve_loadout_card(card, catalog)
        if not meets_card_requirements(resolved, domain_counts, is_wearing_armor):
            logger.debug(f"Domain card '{resolved.name}' excluded: requirements not met")
            continue
        push(
            BonusSourceType.DOMAIN_CARD,
            resolved.name,
            resolve_modifiers(resolved, context),
            detail=resolved.domain,
        )


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

def _push_trait_bonus(entry: InventoryEntry, item_name: str, push: PushSource) -> None:
    trait_bonus = entry.item.trait_bonus if entry.item else None
    if (
        trait_bonus is None
        or not trait_bonus.trait
        or trait_bonus.bonus is None
        or trait_bonus.trait not in TRAITS
    ):
        return
    push(
        BonusSourceType.INVENTORY_ITEM,
        item_name,
        FeatureStatModifiers(traits={trait_bonus.trait: trait_bonus.bonus}),
        detail=f"Trait Bonus: {trait_bonus.trait}",
    )


def collect_inventory_sources(
    inventory: InventoryState | None,
    context: ModifierContext,
    push: PushSource,
) -> None:
    """Push trait bonus, flat stats and features of each equipped item."""
    if inventory is None:
        return
    for entry in inventory.items:
        if not entry.is_equipped:
            continue
        item = entry.item
        item_name = item.name if item and item.name is not None else "Equipped Item"
        _push_trait_bonus(entry, item_name, push)
        push(
            BonusSourceType.INVENTORY_ITEM,
            item_name,
            item.stat_modifiers if item else None,
        )
        if item is not None:
            _push_features(
                push, BonusSourceType.INVENTORY_FEATURE, item_name,
                item.features, context,
            )
