"""
Dice utilities.

Randomness is injected through ``DiceRoller`` so rules that roll dice stay
deterministic under test: pass a roller built on a seeded ``random.Random``
or a scripted stub with the same ``roll(sides)`` method.

Functions:
    parse_dice: Parse 'NdS[+/-M]' notation.
    roll_dice: Roll dice from notation.
    roll_duality: Roll the Hope and Fear d12s (with optional advantage die).
    resolve_duality_roll: Classify a duality roll against a difficulty.
"""

from __future__ import annotations

import random
import re
from enum import Enum

from pydantic import BaseModel, Field


class DiceRoller:
    """Source of uniform die rolls."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    @classmethod
    def seeded(cls, seed: int) -> "DiceRoller":
        return cls(random.Random(seed))

    def roll(self, sides: int) -> int:
        """Roll one die, returning an integer in 1..sides inclusive."""
        if sides < 1:
            raise ValueError(f"Invalid die size: d{sides}")
        return self.rng.randint(1, sides)

    def roll_d12(self) -> int:
        return self.roll(12)


# ---------------------------------------------------------------------------
# Notation
# ---------------------------------------------------------------------------

def parse_dice(notation: str) -> tuple[int, int, int]:
    """Parse dice notation like '2d6+3' into (num_dice, die_size, modifier).

    Raises:
        ValueError: If the notation cannot be parsed.
    """
    notation = notation.lower().strip()
    m = re.fullmatch(r"(\d+)d(\d+)([+-]\d+)?", notation)
    if not m:
        raise ValueError(f"Invalid dice notation: {notation!r}")
    count, sides = int(m.group(1)), int(m.group(2))
    if count < 1 or sides < 1:
        raise ValueError(f"Invalid dice notation: {notation!r}")
    return count, sides, int(m.group(3) or 0)


class DiceRollResult(BaseModel):
    notation: str
    rolls: list[int]
    modifier: int = 0
    total: int


def roll_dice(notation: str, roller: DiceRoller | None = None) -> DiceRollResult:
    """Roll dice from notation and return the individual rolls and total."""
    roller = roller or DiceRoller()
    count, sides, modifier = parse_dice(notation)
    rolls = [roller.roll(sides) for _ in range(count)]
    return DiceRollResult(
        notation=notation,
        rolls=rolls,
        modifier=modifier,
        total=sum(rolls) + modifier,
    )


# ---------------------------------------------------------------------------
# Duality rolls
# ---------------------------------------------------------------------------

class DualityOutcome(str, Enum):
    CRITICAL_SUCCESS = "critical_success"
    SUCCESS_WITH_HOPE = "success_with_hope"
    SUCCESS_WITH_FEAR = "success_with_fear"
    FAILURE_WITH_FEAR = "failure_with_fear"


class DualityRoll(BaseModel):
    """Raw result of rolling the Hope and Fear dice."""
    hope_die: int = Field(ge=1, le=12)
    fear_die: int = Field(ge=1, le=12)
    modifier: int = 0
    advantage_die: int | None = None
    disadvantage_die: int | None = None
    total: int

    @property
    def is_matching(self) -> bool:
        return self.hope_die == self.fear_die


class ResolvedDualityRoll(BaseModel):
    roll: DualityRoll
    difficulty: int
    outcome: DualityOutcome
    hope_generated: int = 0
    fear_generated: int = 0
    clears_stress: bool = False


def roll_duality(
    modifier: int = 0,
    *,
    advantage: bool = False,
    disadvantage: bool = False,
    roller: DiceRoller | None = None,
) -> DualityRoll:
    """Roll 2d12 (Hope and Fear) plus modifier.

    Advantage adds a d6 and disadvantage subtracts one; both together cancel.
    """
    roller = roller or DiceRoller()
    hope_die = roller.roll_d12()
    fear_die = roller.roll_d12()
    total = hope_die + fear_die + modifier

    advantage_die = disadvantage_die = None
    if advantage and not disadvantage:
        advantage_die = roller.roll(6)
        total += advantage_die
    elif disadvantage and not advantage:
        disadvantage_die = roller.roll(6)
        total -= disadvantage_die

    return DualityRoll(
        hope_die=hope_die,
        fear_die=fear_die,
        modifier=modifier,
        advantage_die=advantage_die,
        disadvantage_die=disadvantage_die,
        total=total,
    )


def resolve_duality_roll(roll: DualityRoll, difficulty: int) -> ResolvedDualityRoll:
    """Classify a duality roll.

    Matching dice are always a critical success (+1 Hope, clear a Stress).
    Otherwise the total against ``difficulty`` decides success, and the higher
    die decides whether it comes with Hope or Fear. Failures always give Fear.
    """
    if roll.is_matching:
        return ResolvedDualityRoll(
            roll=roll,
            difficulty=difficulty,
            outcome=DualityOutcome.CRITICAL_SUCCESS,
            hope_generated=1,
            clears_stress=True,
        )

    if roll.total >= difficulty:
        with_hope = roll.hope_die > roll.fear_die
        return ResolvedDualityRoll(
            roll=roll,
            difficulty=difficulty,
            outcome=(
                DualityOutcome.SUCCESS_WITH_HOPE if with_hope
                else DualityOutcome.SUCCESS_WITH_FEAR
            ),
            hope_generated=1 if with_hope else 0,
            fear_generated=0 if with_hope else 1,
        )

    return ResolvedDualityRoll(
        roll=roll,
        difficulty=difficulty,
        outcome=DualityOutcome.FAILURE_WITH_FEAR,
        fear_generated=1,
    )
