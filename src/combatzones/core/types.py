"""Core data types for the combat-zone overlay."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class ItemCategory(enum.Enum):
    WEAPON = "weapon"
    SHIELD = "shield"
    OTHER = "other"


class ZoneKind(enum.Enum):
    """Facing classification of an angular sector."""

    FRONT = "front"
    FLANK_LEFT = "flank_left"
    FLANK_RIGHT = "flank_right"
    REAR = "rear"


class ReachContract(enum.Enum):
    """How equipped items are turned into reach distances.

    LENGTH uses the derived ``_length`` field (number or length notation)
    added to the body radius. ATTACK_RANGE uses the attack list's plain
    numeric ``meleeRange`` as an absolute distance.
    """

    LENGTH = "length"
    ATTACK_RANGE = "attack_range"


class ZoneEvent(str, enum.Enum):
    """Event names published on the bus."""

    SCENE_READY = "scene_ready"
    ENTITY_CONTROLLED = "entity_controlled"
    ENTITY_HOVERED = "entity_hovered"
    ENTITY_REFRESHED = "entity_refreshed"
    ENTITY_DESTROYED = "entity_destroyed"
    ACTOR_UPDATED = "actor_updated"
    ITEM_UPDATED = "item_updated"
    CONFIG_CHANGED = "config_changed"


@dataclass(frozen=True)
class EntityTransform:
    """Facing and footprint of an entity as read from the host."""

    rotation_rad: float
    width_px: float
    height_px: float


@dataclass(frozen=True)
class GridContext:
    """Scene grid scale: ``distance_per_cell`` is in ``units``."""

    distance_per_cell: float
    pixels_per_cell: float
    units: str = ""


def _parse_category(value: Any) -> ItemCategory:
    if isinstance(value, ItemCategory):
        return value
    try:
        return ItemCategory(str(value).strip().lower())
    except ValueError:
        return ItemCategory.OTHER


def _parse_groups(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    return frozenset(str(v).strip().lower() for v in value if str(v).strip())


@dataclass(frozen=True)
class EquipmentItem:
    """An item an entity carries, in either equipment shape.

    ``length`` is the raw length value (number or notation string such as
    ``1'6"``). ``ranged`` and ``melee_range`` belong to the attack-list shape.
    """

    name: str = ""
    equipped: bool = True
    category: ItemCategory = ItemCategory.OTHER
    training_groups: frozenset[str] = field(default_factory=frozenset)
    length: float | str | None = None
    ranged: bool = False
    melee_range: float | None = None

    @classmethod
    def from_dict(cls, data: dict) -> EquipmentItem:
        """Parse an item from a host record (snake_case or host keys)."""
        groups = data.get("training_groups", data.get("trainingGroups"))
        length = data.get("length", data.get("_length"))
        melee_range = data.get("melee_range", data.get("meleeRange"))
        return cls(
            name=str(data.get("name", "")),
            equipped=bool(data.get("equipped", data.get("isEquipped", True))),
            category=_parse_category(data.get("category", "other")),
            training_groups=_parse_groups(groups),
            length=length,
            ranged=bool(data.get("ranged", data.get("isRanged", False))),
            melee_range=melee_range,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "equipped": self.equipped,
            "category": self.category.value,
            "training_groups": sorted(self.training_groups),
            "length": self.length,
            "ranged": self.ranged,
            "melee_range": self.melee_range,
        }
