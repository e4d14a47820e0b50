"""
Bonus aggregator.

Runs every source collector in a fixed order (class, subclass, ancestry,
community, loadout, inventory) and folds the collected modifiers into one
``AggregatedModifiers`` total, keeping each contributing entry for display.
"""

from __future__ import annotations

from typing import Any, Iterable

from ..catalog import ContentCatalog, ContentLookup
from ..models import (
    AggregatedModifiers,
    BonusBreakdown,
    BonusSourceEntry,
    BonusSourceType,
    CharacterSelections,
    FeatureStatModifiers,
)
from ..modifiers import fold_modifiers
from .collectors import (
    collect_ancestry_sources,
    collect_class_sources,
    collect_community_sources,
    collect_inventory_sources,
    collect_loadout_sources,
    collect_subclass_sources,
)


def _as_selections(params: CharacterSelections | dict[str, Any]) -> CharacterSelections:
    if isinstance(params, CharacterSelections):
        return params
    return CharacterSelections.model_validate(params)


def aggregate_bonus_breakdown(
    params: CharacterSelections | dict[str, Any],
    catalog: ContentLookup | None = None,
) -> BonusBreakdown:
    """Aggregate all bonus sources for a character.

    Args:
        params: The character's selections, as a model or plain sheet data.
        catalog: Canonical content lookups. Defaults to an empty catalog, in
            which case only homebrew and embedded selections contribute.

    Returns:
        BonusBreakdown whose ``total`` is the fold of ``sources``.
    """
    selections = _as_selections(params)
    catalog = catalog if catalog is not None else ContentCatalog()

    sources: list[BonusSourceEntry] = []

    def push(
        type: BonusSourceType,
        source_name: str,
        modifiers: FeatureStatModifiers | None,
        detail: str | None = None,
    ) -> None:
        if modifiers is None:
            return
        modifiers = modifiers.model_copy(deep=True)
        sources.append(
            BonusSourceEntry(
                type=type,
                source_name=source_name,
                detail=detail,
                modifiers=modifiers,
            )
        )

    context = selections.modifier_context()

    collect_class_sources(selections.class_selection, context, push, catalog)
    collect_subclass_sources(selections.class_selection, context, push, catalog)
    collect_ancestry_sources(selections.ancestry, context, push)
    collect_community_sources(selections.community, context, push)
    collect_loadout_sources(
        selections.loadout, selections.is_wearing_armor, context, push, catalog
    )
    collect_inventory_sources(selections.inventory, context, push)

    return BonusBreakdown(total=fold_sources(sources), sources=sources)


def aggregate_bonus_modifiers(
    params: CharacterSelections | dict[str, Any],
    catalog: ContentLookup | None = None,
) -> AggregatedModifiers:
    """Convenience wrapper returning only the aggregated total."""
    return aggregate_bonus_breakdown(params, catalog).total


def fold_sources(sources: Iterable[BonusSourceEntry]) -> AggregatedModifiers:
    """Recompute a total from breakdown entries."""
    return fold_modifiers(entry.modifiers for entry in sources)
