"""Zone display configuration and the redraw fingerprint."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from omegaconf import DictConfig, OmegaConf

from combatzones.core.types import ItemCategory, ReachContract
from combatzones.reach.resolver import (
    DEFAULT_MELEE_CATEGORIES,
    DEFAULT_MELEE_TRAINING_GROUPS,
    ReachRules,
)

logger = logging.getLogger(__name__)

MIN_BODY_RADIUS = 2.5
DEFAULT_METRIC_FACTOR = 3.33333
DEFAULT_METRIC_ALIASES = ("m", "m.", "meter", "meters", "metre", "metres")

DEFAULT_COLORS = {
    "front": 0x00FF00,
    "facing": 0x00FF00,
    "flank": 0xFFFF00,
    "rear": 0xFF0000,
    "spoke": 0x333333,
}


def parse_color(value: Any, default: int) -> int:
    """Convert ``#RRGGBB`` / ``RRGGBB`` strings or ints to a 24-bit RGB int."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        if 0 <= value <= 0xFFFFFF:
            return value
        logger.warning("Colour %r outside 24-bit range, using default", value)
        return default
    if isinstance(value, str):
        text = value.strip().lstrip("#")
        if len(text) == 6:
            try:
                return int(text, 16)
            except ValueError:
                pass
    if value is not None:
        logger.warning("Unparsable colour %r, using default %06X", value, default)
    return default


@dataclass(frozen=True)
class DisplaySnapshot:
    """Everything that affects how a zone looks, compared by value.

    Two snapshots are equal exactly when a redraw with either would emit
    the same colours and the same reach-ring visibility.
    """

    front: int
    facing: int
    flank: int
    rear: int
    spoke: int
    alpha: float
    show_reach: bool


@dataclass
class ZoneDisplayConfig:
    """Zone overlay settings currently in effect."""

    enabled: bool = False
    reach_show_all: bool = False

    # Colours (24-bit RGB)
    color_front: int = DEFAULT_COLORS["front"]
    color_facing: int = DEFAULT_COLORS["facing"]
    color_flank: int = DEFAULT_COLORS["flank"]
    color_rear: int = DEFAULT_COLORS["rear"]
    color_spoke: int = DEFAULT_COLORS["spoke"]
    alpha: float = 0.15

    # Units
    metric_factor: float = DEFAULT_METRIC_FACTOR
    metric_aliases: tuple[str, ...] = DEFAULT_METRIC_ALIASES

    # Reach
    min_body_radius: float = MIN_BODY_RADIUS
    reach_rules: ReachRules = field(default_factory=ReachRules)

    def snapshot(self, show_reach: bool) -> DisplaySnapshot:
        return DisplaySnapshot(
            front=self.color_front,
            facing=self.color_facing,
            flank=self.color_flank,
            rear=self.color_rear,
            spoke=self.color_spoke,
            alpha=self.alpha,
            show_reach=show_reach,
        )

    @classmethod
    def from_omegaconf(cls, cfg: Any) -> ZoneDisplayConfig:
        """Build from the ``combat_zones`` OmegaConf node or a plain dict."""
        if cfg is None:
            return cls()

        if isinstance(cfg, DictConfig):
            cfg = OmegaConf.to_container(cfg, resolve=True)

        if not isinstance(cfg, dict):
            cfg = dict(cfg)

        display = cfg.get("display", {}) or {}
        colors = display.get("colors", {}) or {}
        units = cfg.get("units", {}) or {}
        reach = cfg.get("reach", {}) or {}

        alpha = float(display.get("alpha", 0.15))
        if not 0.0 <= alpha <= 1.0:
            logger.warning("Zone alpha %.3f outside [0, 1], clamping", alpha)
            alpha = min(max(alpha, 0.0), 1.0)

        metric_factor = float(units.get("metric_factor", DEFAULT_METRIC_FACTOR))
        if metric_factor <= 0:
            logger.warning("Non-positive metric factor %r, using default", metric_factor)
            metric_factor = DEFAULT_METRIC_FACTOR

        aliases = units.get("metric_aliases") or DEFAULT_METRIC_ALIASES

        return cls(
            enabled=bool(display.get("enabled", False)),
            reach_show_all=bool(display.get("reach_show_all", False)),
            color_front=parse_color(colors.get("front"), DEFAULT_COLORS["front"]),
            color_facing=parse_color(colors.get("facing"), DEFAULT_COLORS["facing"]),
            color_flank=parse_color(colors.get("flank"), DEFAULT_COLORS["flank"]),
            color_rear=parse_color(colors.get("rear"), DEFAULT_COLORS["rear"]),
            color_spoke=parse_color(colors.get("spoke"), DEFAULT_COLORS["spoke"]),
            alpha=alpha,
            metric_factor=metric_factor,
            metric_aliases=tuple(str(a).strip().lower() for a in aliases),
            min_body_radius=float(reach.get("min_body_radius", MIN_BODY_RADIUS)),
            reach_rules=_parse_reach_rules(reach),
        )


def _parse_reach_rules(reach: dict) -> ReachRules:
    contract_str = reach.get("contract", "length")
    try:
        contract = ReachContract(contract_str)
    except ValueError:
        logger.warning("Unknown reach contract '%s', defaulting to length", contract_str)
        contract = ReachContract.LENGTH

    categories = DEFAULT_MELEE_CATEGORIES
    if reach.get("melee_categories"):
        parsed = set()
        for name in reach["melee_categories"]:
            try:
                parsed.add(ItemCategory(str(name).lower()))
            except ValueError:
                logger.warning("Unknown item category '%s', skipping", name)
        categories = frozenset(parsed)

    groups = DEFAULT_MELEE_TRAINING_GROUPS
    if reach.get("melee_training_groups"):
        groups = frozenset(str(g).strip().lower() for g in reach["melee_training_groups"])

    return ReachRules(
        contract=contract,
        melee_categories=categories,
        melee_training_groups=groups,
    )
