"""Tests for reach resolution."""

import math

import pytest

from combatzones.core.types import EquipmentItem, ItemCategory, ReachContract
from combatzones.reach.resolver import DEFAULT_RULES, ReachRules, resolve_reaches


def _item(**kwargs):
    defaults = dict(
        name="Sword",
        equipped=True,
        category=ItemCategory.WEAPON,
        training_groups=frozenset({"blade"}),
        length="3",
    )
    defaults.update(kwargs)
    return EquipmentItem(**defaults)


class TestLengthContract:
    def test_body_only(self):
        assert resolve_reaches(2.5, []) == (2.5,)

    def test_single_weapon(self, longsword):
        assert resolve_reaches(3.0, [longsword]) == (3.0, 5.0)

    def test_sorted_ascending(self):
        items = [_item(length="5"), _item(length='6"'), _item(length="1'6\"")]
        assert resolve_reaches(2.5, items) == pytest.approx((2.5, 3.0, 4.0, 7.5))

    def test_duplicates_merge(self):
        items = [_item(length="2"), _item(length="2'0\""), _item(length=2)]
        assert resolve_reaches(3.0, items) == (3.0, 5.0)

    def test_unequipped_skipped(self):
        assert resolve_reaches(3.0, [_item(equipped=False)]) == (3.0,)

    def test_non_melee_category_skipped(self):
        assert resolve_reaches(3.0, [_item(category=ItemCategory.OTHER)]) == (3.0,)

    def test_shield_counts(self):
        shield = _item(category=ItemCategory.SHIELD, training_groups=frozenset({"shield"}), length="1")
        assert resolve_reaches(3.0, [shield]) == (3.0, 4.0)

    def test_ranged_training_group_skipped(self):
        bow = _item(training_groups=frozenset({"bow"}), length=4)
        assert resolve_reaches(3.0, [bow]) == (3.0,)

    def test_no_training_groups_skipped(self):
        assert resolve_reaches(3.0, [_item(training_groups=frozenset())]) == (3.0,)

    def test_unparsable_length_ignored(self):
        assert resolve_reaches(3.0, [_item(length="abc")]) == (3.0,)

    def test_zero_length_ignored(self):
        assert resolve_reaches(3.0, [_item(length=0)]) == (3.0,)

    def test_negative_length_ignored(self):
        assert resolve_reaches(3.0, [_item(length=-2)]) == (3.0,)

    def test_custom_training_groups(self):
        rules = ReachRules(melee_training_groups=frozenset({"bow"}))
        bow = _item(training_groups=frozenset({"bow"}), length=4)
        assert resolve_reaches(3.0, [bow], rules) == (3.0, 7.0)

    def test_ranged_flag_ignored_by_length_contract(self):
        assert resolve_reaches(3.0, [_item(ranged=True)]) == (3.0, 6.0)


class TestAttackRangeContract:
    rules = ReachRules(contract=ReachContract.ATTACK_RANGE)

    def test_melee_range_is_absolute(self):
        item = EquipmentItem(melee_range=5.0)
        assert resolve_reaches(3.0, [item], self.rules) == (3.0, 5.0)

    def test_short_range_floors_to_body(self):
        item = EquipmentItem(melee_range=1.0)
        assert resolve_reaches(3.0, [item], self.rules) == (3.0,)

    def test_ranged_skipped(self):
        item = EquipmentItem(melee_range=10.0, ranged=True)
        assert resolve_reaches(3.0, [item], self.rules) == (3.0,)

    def test_unequipped_skipped(self):
        item = EquipmentItem(melee_range=10.0, equipped=False)
        assert resolve_reaches(3.0, [item], self.rules) == (3.0,)

    def test_string_range_not_parsed(self):
        item = EquipmentItem(melee_range="2'0\"")
        assert resolve_reaches(3.0, [item], self.rules) == (3.0,)

    def test_length_field_ignored(self):
        item = EquipmentItem(length="10", training_groups=frozenset({"blade"}), category=ItemCategory.WEAPON)
        assert resolve_reaches(3.0, [item], self.rules) == (3.0,)


class TestProperties:
    def test_deterministic(self):
        items = [_item(length="1'6\""), _item(length='7"'), _item(length="4.5"), _item(length="abc")]
        first = resolve_reaches(2.5, items)
        for _ in range(10):
            assert resolve_reaches(2.5, items) == first

    def test_body_radius_is_minimum(self):
        items = [_item(length=l) for l in ("1", "2'", '3"', "abc", 0)]
        result = resolve_reaches(4.0, items)
        assert result[0] == 4.0
        assert min(result) == 4.0

    def test_accepts_generator(self):
        result = resolve_reaches(3.0, (i for i in [_item(length="1")]))
        assert result == (3.0, 4.0)

    @pytest.mark.parametrize("bad", [-0.1, math.inf, math.nan])
    def test_invalid_body_radius_raises(self, bad):
        with pytest.raises(ValueError):
            resolve_reaches(bad, [], DEFAULT_RULES)


class TestEquipmentItemFromDict:
    def test_host_keys(self):
        item = EquipmentItem.from_dict({
            "name": "Spear",
            "isEquipped": False,
            "category": "Weapon",
            "trainingGroups": ["Pole Arm"],
            "_length": "6'",
            "isRanged": False,
            "meleeRange": 7,
        })
        assert item.equipped is False
        assert item.category is ItemCategory.WEAPON
        assert item.training_groups == frozenset({"pole arm"})
        assert item.length == "6'"
        assert item.melee_range == 7

    def test_unknown_category(self):
        item = EquipmentItem.from_dict({"category": "potion"})
        assert item.category is ItemCategory.OTHER

    def test_single_group_string(self):
        item = EquipmentItem.from_dict({"training_groups": "Blade"})
        assert item.training_groups == frozenset({"blade"})

    def test_defaults(self):
        item = EquipmentItem.from_dict({})
        assert item.equipped is True
        assert item.training_groups == frozenset()
        assert item.length is None

    def test_to_dict(self):
        d = EquipmentItem.from_dict({"name": "Axe", "category": "weapon", "training_groups": ["b", "a"]}).to_dict()
        assert d["category"] == "weapon"
        assert d["training_groups"] == ["a", "b"]
