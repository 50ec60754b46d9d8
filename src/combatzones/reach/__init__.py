"""Reach resolution -- weapon length parsing and reach distance sets."""

from combatzones.reach.lengths import parse_length
from combatzones.reach.resolver import (
    DEFAULT_RULES,
    ReachRules,
    resolve_reaches,
)

__all__ = [
    "DEFAULT_RULES",
    "ReachRules",
    "parse_length",
    "resolve_reaches",
]
