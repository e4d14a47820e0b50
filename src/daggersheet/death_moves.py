"""Death moves: resolve what happens when a character marks their last HP.

Three moves are available:

- Blaze of Glory: the character takes one last heroic action and dies.
- Avoid Death: the character drops unconscious; a Hope die at or below their
  level leaves a scar.
- Risk It All: roll Hope and Fear. Matching dice clear all HP and Stress;
  Hope higher means survival and the Hope value is split between HP and
  Stress (see ``finalize_risk_it_all``); otherwise the character dies.

Results are returned for the caller to apply; nothing here mutates character
state.
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel

from .dice import DiceRoller


logger = logging.getLogger("daggersheet.death_moves")

# Sentinel for "clear every marked HP / Stress"
CLEAR_ALL = 999


class DeathMoveError(Exception):
    """Raised when a death move result cannot be finalized."""


class DeathMoveType(str, Enum):
    BLAZE_OF_GLORY = "blaze_of_glory"
    AVOID_DEATH = "avoid_death"
    RISK_IT_ALL = "risk_it_all"


class DeathMoveResult(BaseModel):
    """Outcome of one death move."""

    move_type: DeathMoveType
    survived: bool
    gained_scar: bool = False
    hope_die_roll: int | None = None
    fear_die_roll: int | None = None
    hp_cleared: int | None = None
    stress_cleared: int | None = None
    clearing_value: int | None = None
    needs_allocation: bool = False
    description: str


def blaze_of_glory() -> DeathMoveResult:
    return DeathMoveResult(
        move_type=DeathMoveType.BLAZE_OF_GLORY,
        survived=False,
        description=(
            "You embrace death and go out in a blaze of glory. Your next "
            "action is a critical success, then you cross through the veil."
        ),
    )


def avoid_death(character_level: int, roller: DiceRoller | None = None) -> DeathMoveResult:
    """Drop unconscious; scar if the Hope die is at or below the character's level."""
    roller = roller or DiceRoller()
    hope_die = roller.roll_d12()
    gained_scar = hope_die <= character_level

    description = f"You drop unconscious. Hope die: {hope_die}."
    if gained_scar:
        description += f" {hope_die} is at or below your level ({character_level}): you gain a scar."
    else:
        description += " You avoid a scar."

    return DeathMoveResult(
        move_type=DeathMoveType.AVOID_DEATH,
        survived=True,
        gained_scar=gained_scar,
        hope_die_roll=hope_die,
        description=description,
    )


def risk_it_all(roller: DiceRoller | None = None) -> DeathMoveResult:
    """Roll Hope and Fear and let the dice decide."""
    roller = roller or DiceRoller()
    hope_die = roller.roll_d12()
    fear_die = roller.roll_d12()

    if hope_die == fear_die:
        return DeathMoveResult(
            move_type=DeathMoveType.RISK_IT_ALL,
            survived=True,
            hope_die_roll=hope_die,
            fear_die_roll=fear_die,
            hp_cleared=CLEAR_ALL,
            stress_cleared=CLEAR_ALL,
            description=(
                f"Critical success ({hope_die} and {fear_die})! "
                "You survive and clear all HP and Stress."
            ),
        )

    if hope_die > fear_die:
        return DeathMoveResult(
            move_type=DeathMoveType.RISK_IT_ALL,
            survived=True,
            hope_die_roll=hope_die,
            fear_die_roll=fear_die,
            clearing_value=hope_die,
            needs_allocation=True,
            description=(
                f"Hope ({hope_die}) beats Fear ({fear_die}). You survive and "
                f"clear {hope_die} between HP and Stress."
            ),
        )

    return DeathMoveResult(
        move_type=DeathMoveType.RISK_IT_ALL,
        survived=False,
        hope_die_roll=hope_die,
        fear_die_roll=fear_die,
        description=f"Fear ({fear_die}) beats Hope ({hope_die}). You cross through the veil.",
    )


def finalize_risk_it_all(result: DeathMoveResult, hp_allocation: int) -> DeathMoveResult:
    """Split a Risk It All clearing value between HP and Stress.

    Args:
        result: A result with ``needs_allocation`` set.
        hp_allocation: How much of the clearing value goes to HP; the rest
            clears Stress.

    Returns:
        A new, finalized result. The input is not modified.

    Raises:
        DeathMoveError: If the result needs no allocation or the allocation
            is outside 0..clearing_value.
    """
    if not result.needs_allocation or result.clearing_value is None:
        raise DeathMoveError("This death move result does not need an allocation.")

    clearing_value = result.clearing_value
    if not 0 <= hp_allocation <= clearing_value:
        raise DeathMoveError(
            f"HP allocation must be between 0 and {clearing_value} (got {hp_allocation})."
        )

    stress_amount = clearing_value - hp_allocation
    return result.model_copy(
        update={
            "needs_allocation": False,
            "hp_cleared": hp_allocation,
            "stress_cleared": stress_amount,
            "description": (
                f"{result.description} Cleared {hp_allocation} HP and "
                f"{stress_amount} Stress."
            ),
        }
    )


def resolve_death_move(
    move_type: DeathMoveType | str,
    character_level: int,
    roller: DiceRoller | None = None,
) -> DeathMoveResult:
    """Resolve a death move by name.

    Raises:
        ValueError: If ``move_type`` is not one of the three death moves.
    """
    move_type = DeathMoveType(move_type)
    if move_type is DeathMoveType.BLAZE_OF_GLORY:
        result = blaze_of_glory()
    elif move_type is DeathMoveType.AVOID_DEATH:
        result = avoid_death(character_level, roller)
    else:
        result = risk_it_all(roller)

    logger.info(
        f"Death move {move_type.value}: survived={result.survived}, "
        f"scar={result.gained_scar}"
    )
    return result
