"""
Tests for feature modifier resolution and modifier arithmetic.

Covers:
- Optional addition and field-wise merging (absent vs explicit zero)
- Scaling by proficiency, level and trait score (with rounding modes)
- Suppression of scaled contributions with a zero multiplier
- combine_modifiers identity, commutativity and associativity
"""

import pytest
from pydantic import ValidationError

from daggersheet.models import (
    AggregatedModifiers,
    FeatureStatModifiers,
    ModifierContext,
    ScaledModifiersMetadata,
)
from daggersheet.modifiers import (
    EMPTY_MODIFIERS,
    add_feature_modifiers,
    combine_modifiers,
    fold_modifiers,
    merge_feature_modifiers,
    merge_trait_modifiers,
    resolve_modifiers,
    resolve_scaled_multiplier,
    scale_feature_modifiers,
    sum_optional,
)

from .helpers import make_feature, make_modifiers, scaled


# ===========================================================================
# Optional arithmetic
# ===========================================================================

class TestSumOptional:

    def test_both_absent_stays_absent(self):
        assert sum_optional(None, None) is None

    def test_one_side_absent_counts_as_zero(self):
        assert sum_optional(2, None) == 2
        assert sum_optional(None, -1) == -1

    def test_explicit_zero_is_present(self):
        assert sum_optional(0, None) == 0

    def test_both_present(self):
        assert sum_optional(2, 3) == 5


class TestMergeFeatureModifiers:

    def test_both_none(self):
        assert merge_feature_modifiers(None, None) is None

    def test_one_side_returned_unchanged(self):
        mods = make_modifiers(evasion=1)
        assert merge_feature_modifiers(mods, None) is mods
        assert merge_feature_modifiers(None, mods) is mods

    def test_field_wise_merge_keeps_absent_fields_absent(self):
        merged = merge_feature_modifiers(
            make_modifiers(evasion=1), make_modifiers(evasion=2, armor_score=1)
        )
        assert merged.evasion == 3
        assert merged.armor_score == 1
        assert merged.proficiency is None
        assert merged.traits is None

    def test_traits_merge(self):
        merged = merge_trait_modifiers({"Agility": 1}, {"Agility": 1, "Strength": -1})
        assert merged == {"Agility": 2, "Strength": -1}

    def test_traits_one_side(self):
        assert merge_trait_modifiers(None, {"Finesse": 2}) == {"Finesse": 2}
        assert merge_trait_modifiers(None, None) is None


class TestScaleFeatureModifiers:

    def test_scales_present_fields_only(self):
        result = scale_feature_modifiers(
            make_modifiers(evasion=1, traits={"Presence": 2}), 3
        )
        assert result.evasion == 3
        assert result.traits == {"Presence": 6}
        assert result.armor_score is None

    def test_input_is_not_modified(self):
        mods = make_modifiers(evasion=1)
        scale_feature_modifiers(mods, 4)
        assert mods.evasion == 1


# ===========================================================================
# Scaled multipliers
# ===========================================================================

class TestScaledMultiplier:

    @pytest.mark.parametrize("proficiency,expected", [(3, 3), (2.7, 2), (None, 0), (-2, 0)])
    def test_per_proficiency(self, proficiency, expected):
        meta = ScaledModifiersMetadata(per="proficiency")
        assert resolve_scaled_multiplier(meta, ModifierContext(proficiency=proficiency)) == expected

    def test_per_level(self):
        meta = ScaledModifiersMetadata(per="level")
        assert resolve_scaled_multiplier(meta, ModifierContext(level=4)) == 4

    @pytest.mark.parametrize("mode,expected", [("floor", 1), ("ceil", 2), ("round", 2)])
    def test_per_trait_rounding(self, mode, expected):
        meta = ScaledModifiersMetadata(per="trait", trait="Knowledge", factor=0.5, round=mode)
        context = ModifierContext(trait_scores={"Knowledge": 3})
        assert resolve_scaled_multiplier(meta, context) == expected

    def test_per_trait_default_factor_and_floor(self):
        meta = ScaledModifiersMetadata(per="trait", trait="Agility")
        assert resolve_scaled_multiplier(meta, ModifierContext(trait_scores={"Agility": 2})) == 2

    def test_per_trait_unknown_score_is_zero(self):
        meta = ScaledModifiersMetadata(per="trait", trait="Agility")
        assert resolve_scaled_multiplier(meta, ModifierContext()) == 0

    def test_per_trait_unrecognized_trait_is_zero(self):
        meta = ScaledModifiersMetadata(per="trait", trait="Luck")
        assert resolve_scaled_multiplier(meta, ModifierContext(trait_scores={"Luck": 3})) == 0

    def test_negative_trait_is_clamped(self):
        meta = ScaledModifiersMetadata(per="trait", trait="Strength")
        assert resolve_scaled_multiplier(meta, ModifierContext(trait_scores={"Strength": -1})) == 0

    @pytest.mark.parametrize("option", ["factor", "round"])
    def test_null_trait_options_use_defaults(self, option):
        feature = make_feature(metadata=scaled("trait", trait="Agility", evasion=1, **{option: None}))
        result = resolve_modifiers(feature, ModifierContext(trait_scores={"Agility": 2}))
        assert result is not None
        assert result.evasion == 2

    def test_null_round_floors(self):
        meta = ScaledModifiersMetadata.model_validate(
            {"per": "trait", "trait": "Knowledge", "factor": 0.5, "round": None}
        )
        assert meta.round is None
        assert resolve_scaled_multiplier(meta, ModifierContext(trait_scores={"Knowledge": 3})) == 1


# ===========================================================================
# resolve_modifiers
# ===========================================================================

class TestResolveModifiers:

    def test_static_only(self):
        feature = make_feature(evasion=1)
        assert resolve_modifiers(feature, ModifierContext()).evasion == 1

    def test_no_modifiers_at_all(self):
        assert resolve_modifiers(make_feature(), ModifierContext()) is None

    def test_scaled_only(self):
        feature = make_feature(metadata=scaled("proficiency", attack_rolls=1))
        result = resolve_modifiers(feature, ModifierContext(proficiency=2))
        assert result.attack_rolls == 2

    def test_static_and_scaled_merge(self):
        feature = make_feature(evasion=1, metadata=scaled("level", evasion=1))
        result = resolve_modifiers(feature, ModifierContext(level=3))
        assert result.evasion == 4

    def test_zero_multiplier_contributes_nothing(self):
        feature = make_feature(metadata=scaled("level", armor_score=1))
        assert resolve_modifiers(feature, ModifierContext(level=0)) is None

    def test_zero_multiplier_does_not_add_explicit_zeros(self):
        feature = make_feature(evasion=1, metadata=scaled("level", armor_score=1))
        result = resolve_modifiers(feature, ModifierContext())
        assert result.evasion == 1
        assert result.armor_score is None

    def test_scaled_traits(self):
        feature = make_feature(
            metadata=scaled("trait", traits={"Strength": 1}, trait="Instinct")
        )
        result = resolve_modifiers(feature, ModifierContext(trait_scores={"Instinct": 2}))
        assert result.traits == {"Strength": 2}

    def test_malformed_annex_is_ignored(self):
        feature = make_feature(evasion=1, metadata={"scaledModifiers": {"per": "phase"}})
        result = resolve_modifiers(feature, ModifierContext(level=5))
        assert result == make_modifiers(evasion=1)

    def test_annex_without_modifiers_is_ignored(self):
        feature = make_feature(metadata={"scaledModifiers": {"per": "level"}})
        assert resolve_modifiers(feature, ModifierContext(level=5)) is None

    def test_context_defaults(self):
        feature = make_feature(metadata=scaled("level", evasion=1))
        assert resolve_modifiers(feature) is None


# ===========================================================================
# Aggregates
# ===========================================================================

def _aggregate(**fields) -> AggregatedModifiers:
    return AggregatedModifiers(**fields)


class TestCombineModifiers:

    a = _aggregate(evasion=1, armor_score=2, traits={"Agility": 1})
    b = _aggregate(proficiency=1, major_threshold=3, traits={"Agility": -1, "Presence": 2})
    c = _aggregate(evasion=-2, spellcast_rolls=1, traits={"Knowledge": 1})

    def test_identity(self):
        assert combine_modifiers(EMPTY_MODIFIERS, self.a) == self.a
        assert combine_modifiers(self.a, EMPTY_MODIFIERS) == self.a

    def test_commutative(self):
        assert combine_modifiers(self.a, self.b) == combine_modifiers(self.b, self.a)

    def test_associative(self):
        left = combine_modifiers(combine_modifiers(self.a, self.b), self.c)
        right = combine_modifiers(self.a, combine_modifiers(self.b, self.c))
        assert left == right

    def test_values(self):
        result = combine_modifiers(self.a, self.b)
        assert result.evasion == 1
        assert result.proficiency == 1
        assert result.traits["Agility"] == 0
        assert result.traits["Presence"] == 2

    def test_inputs_not_modified(self):
        combine_modifiers(self.a, self.b)
        assert self.a.evasion == 1
        assert self.b.traits["Agility"] == -1

    def test_empty_modifiers_all_zero(self):
        assert EMPTY_MODIFIERS.evasion == 0
        assert set(EMPTY_MODIFIERS.traits) == {
            "Agility", "Strength", "Finesse", "Instinct", "Presence", "Knowledge"
        }
        assert all(v == 0 for v in EMPTY_MODIFIERS.traits.values())


class TestAddFeatureModifiers:

    def test_adds_present_fields(self):
        total = AggregatedModifiers()
        total = add_feature_modifiers(total, make_modifiers(evasion=2, traits={"Finesse": 1}))
        total = add_feature_modifiers(total, make_modifiers(evasion=-1))
        total = add_feature_modifiers(total, None)
        assert total.evasion == 1
        assert total.traits["Finesse"] == 1
        assert total.armor_score == 0

    def test_does_not_modify_target(self):
        result = add_feature_modifiers(EMPTY_MODIFIERS, make_modifiers(evasion=3, traits={"Agility": 1}))
        assert result.evasion == 3
        assert result.traits["Agility"] == 1
        assert EMPTY_MODIFIERS.evasion == 0
        assert all(v == 0 for v in EMPTY_MODIFIERS.traits.values())

    def test_aggregates_are_frozen(self):
        with pytest.raises(ValidationError):
            EMPTY_MODIFIERS.evasion = 3
        assert EMPTY_MODIFIERS.evasion == 0

    def test_fold(self):
        total = fold_modifiers([make_modifiers(evasion=1), None, make_modifiers(evasion=2)])
        assert total.evasion == 3

    def test_partial_traits_are_filled(self):
        total = AggregatedModifiers(traits={"Agility": 2})
        assert total.traits["Knowledge"] == 0
        assert total.traits["Agility"] == 2

    def test_feature_modifiers_accept_camel_case(self):
        mods = FeatureStatModifiers.model_validate({"armorScore": 1, "majorThreshold": 2})
        assert mods.armor_score == 1
        assert mods.major_threshold == 2
