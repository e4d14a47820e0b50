"""
daggersheet - rules-resolution engine for Daggerheart character sheets.
"""

from .bonuses import aggregate_bonus_breakdown, aggregate_bonus_modifiers
from .catalog import CatalogError, ContentCatalog
from .config import (
    ConfigError,
    EngineSettings,
    configure_logging,
    default_catalog,
    load_settings,
    setup_logging,
)
from .death_moves import (
    CLEAR_ALL,
    DeathMoveError,
    DeathMoveResult,
    DeathMoveType,
    finalize_risk_it_all,
    resolve_death_move,
)
from .dice import DiceRoller
from .equipment import (
    EquipmentItem,
    EquipmentState,
    build_auto_calculate_context,
    get_equipment_feature_modifiers,
    parse_feature_modifiers,
)
from . import models as _models
from .models import *
from .modifiers import EMPTY_MODIFIERS, combine_modifiers, resolve_modifiers
from .resources import (
    AutoCalculateContext,
    ComputedAutoValues,
    ExtendedAutoValues,
    compute_auto_resources,
    compute_extended_auto_values,
    compute_thresholds,
)
from .stats import calculate_character_stats

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("daggersheet")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable

__all__ = [
    "aggregate_bonus_breakdown",
    "aggregate_bonus_modifiers",
    "combine_modifiers",
    "resolve_modifiers",
    "EMPTY_MODIFIERS",
    "compute_auto_resources",
    "compute_thresholds",
    "AutoCalculateContext",
    "ComputedAutoValues",
    "calculate_character_stats",
    "resolve_death_move",
    "finalize_risk_it_all",
    "DeathMoveResult",
    "DeathMoveType",
    "DeathMoveError",
    "CLEAR_ALL",
    "DiceRoller",
    "ContentCatalog",
    "CatalogError",
    "EngineSettings",
    "ConfigError",
    "load_settings",
    "configure_logging",
    "setup_logging",
    "default_catalog",
    "parse_feature_modifiers",
    "get_equipment_feature_modifiers",
    "build_auto_calculate_context",
    "EquipmentItem",
    "EquipmentState",
    "compute_extended_auto_values",
    "ExtendedAutoValues",
] + _models.__all__
