"""
Shared builders and stubs for daggersheet tests.
"""

from __future__ import annotations

from daggersheet.models import Feature, FeatureStatModifiers


class ScriptedRoller:
    """Dice roller stub returning pre-set values in order."""

    def __init__(self, *values: int) -> None:
        self.values = list(values)
        self.calls: list[int] = []

    def roll(self, sides: int) -> int:
        self.calls.append(sides)
        return self.values.pop(0)

    def roll_d12(self) -> int:
        return self.roll(12)


def make_modifiers(traits: dict[str, int] | None = None, **stats: int) -> FeatureStatModifiers:
    return FeatureStatModifiers(traits=traits, **stats)


def make_feature(
    name: str = "Test Feature",
    metadata: dict | None = None,
    traits: dict[str, int] | None = None,
    **stats: int,
) -> Feature:
    """Create a Feature; keyword stats become its static modifiers."""
    modifiers = make_modifiers(traits, **stats) if (stats or traits) else None
    return Feature(name=name, modifiers=modifiers, metadata=metadata)


def scaled(per: str, traits: dict[str, int] | None = None, **extra) -> dict:
    """Metadata bag carrying a scaled-modifiers annex.

    Stat keywords become the annex modifiers; ``trait``, ``factor`` and
    ``round`` configure trait scaling.
    """
    options = {k: extra.pop(k) for k in ("trait", "factor", "round") if k in extra}
    modifiers = dict(extra)
    if traits:
        modifiers["traits"] = traits
    return {"scaledModifiers": {"per": per, "modifiers": modifiers, **options}}
