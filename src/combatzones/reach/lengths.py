"""Weapon length notation parsing.

Lengths arrive either as numbers or as strings in one of three notations,
tried in order:

- feet and inches: ``1'6"``, ``1' 6``, ``2'``
- inches only: ``7"``
- bare decimal: ``4``, ``4.5``

Anything else parses to zero, which callers treat as "no reach".
"""

from __future__ import annotations

import math
import re
from typing import Any

_NUMBER = r"(\d+(?:\.\d+)?|\.\d+)"

_FEET_INCHES_RE = re.compile(rf"^{_NUMBER}\s*'\s*(?:{_NUMBER}\s*(?:\"|'')?)?$")
_INCHES_RE = re.compile(rf"^{_NUMBER}\s*(?:\"|'')$")
_DECIMAL_RE = re.compile(rf"^{_NUMBER}$")

INCHES_PER_FOOT = 12.0


def parse_length(raw: Any) -> float:
    """Parse a raw length value into canonical units (feet).

    Numbers pass through unchanged when finite; booleans, ``None``,
    non-finite numbers and unrecognised strings all yield ``0.0``.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0
    if not isinstance(raw, str):
        return 0.0

    text = raw.strip()
    if not text:
        return 0.0

    m = _FEET_INCHES_RE.match(text)
    if m:
        feet = float(m.group(1))
        inches = float(m.group(2)) if m.group(2) else 0.0
        return feet + inches / INCHES_PER_FOOT

    m = _INCHES_RE.match(text)
    if m:
        return float(m.group(1)) / INCHES_PER_FOOT

    m = _DECIMAL_RE.match(text)
    if m:
        return float(m.group(1))

    return 0.0
