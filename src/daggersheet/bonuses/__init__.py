"""
Bonus aggregation for daggersheet.

Collects stat modifiers from class, subclass, ancestry, community, loadout
and inventory selections and folds them into a single total with an
itemized breakdown.
"""

from .aggregator import aggregate_bonus_breakdown, aggregate_bonus_modifiers, fold_sources
from .collectors import (
    collect_ancestry_sources,
    collect_class_sources,
    collect_community_sources,
    collect_inventory_sources,
    collect_loadout_sources,
    collect_subclass_sources,
    count_domain_cards,
    meets_card_requirements,
    merge_metadata,
    resolve_loadout_card,
)

__all__ = [
    "aggregate_bonus_breakdown",
    "aggregate_bonus_modifiers",
    "fold_sources",
    "collect_ancestry_sources",
    "collect_class_sources",
    "collect_community_sources",
    "collect_inventory_sources",
    "collect_loadout_sources",
    "collect_subclass_sources",
    "count_domain_cards",
    "meets_card_requirements",
    "merge_metadata",
    "resolve_loadout_card",
]
