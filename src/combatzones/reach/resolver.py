"""Reach resolution -- body radius plus equipped melee items.

Turns an entity's body radius and equipment into the sorted, deduplicated
set of distances at which it threatens. Two equipment contracts exist:

- ``LENGTH``: equipped, melee-capable category, a matching training group
  and a positive parsed length contribute ``body + length``.
- ``ATTACK_RANGE``: equipped, non-ranged entries with a positive numeric
  ``melee_range`` contribute ``max(melee_range, body)``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from combatzones.core.types import EquipmentItem, ItemCategory, ReachContract
from combatzones.reach.lengths import parse_length

logger = logging.getLogger(__name__)

DEFAULT_MELEE_CATEGORIES = frozenset({ItemCategory.WEAPON, ItemCategory.SHIELD})

DEFAULT_MELEE_TRAINING_GROUPS = frozenset({
    "blade",
    "greater blade",
    "blunt",
    "greater blunt",
    "chain",
    "hafted",
    "pole arm",
    "shield",
    "unarmed",
})


@dataclass(frozen=True)
class ReachRules:
    """Which items count as melee reach, and how their reach is read."""

    contract: ReachContract = ReachContract.LENGTH
    melee_categories: frozenset[ItemCategory] = DEFAULT_MELEE_CATEGORIES
    melee_training_groups: frozenset[str] = DEFAULT_MELEE_TRAINING_GROUPS

    def is_melee_capable(self, item: EquipmentItem) -> bool:
        if item.category not in self.melee_categories:
            return False
        return not self.melee_training_groups.isdisjoint(item.training_groups)


DEFAULT_RULES = ReachRules()


def _check_body_radius(body_radius: float) -> float:
    value = float(body_radius)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"body radius must be finite and non-negative, got {body_radius!r}")
    return value


def _length_reach(item: EquipmentItem, body: float, rules: ReachRules) -> float | None:
    if not item.equipped:
        return None
    if not rules.is_melee_capable(item):
        return None
    length = parse_length(item.length)
    if length <= 0:
        if item.length not in (None, 0, ""):
            logger.debug("Ignoring unparsable length %r on '%s'", item.length, item.name)
        return None
    return body + length


def _attack_range_reach(item: EquipmentItem, body: float) -> float | None:
    if not item.equipped or item.ranged:
        return None
    rng = item.melee_range
    if isinstance(rng, bool) or not isinstance(rng, (int, float)):
        return None
    if not math.isfinite(rng) or rng <= 0:
        return None
    return max(float(rng), body)


def resolve_reaches(
    body_radius: float,
    equipment: Iterable[EquipmentItem],
    rules: ReachRules = DEFAULT_RULES,
) -> tuple[float, ...]:
    """Return the ascending, deduplicated reach distances for an entity.

    The body radius is always the first element. Raises ``ValueError`` when
    ``body_radius`` is negative or not finite; callers clamp beforehand.
    """
    body = _check_body_radius(body_radius)
    reaches = {body}

    for item in equipment:
        if rules.contract is ReachContract.ATTACK_RANGE:
            reach = _attack_range_reach(item, body)
        else:
            reach = _length_reach(item, body, rules)
        if reach is not None:
            reaches.add(reach)

    return tuple(sorted(reaches))
