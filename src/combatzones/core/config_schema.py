"""Pydantic schema for combat-zone configuration validation.

Mirrors the YAML structure in config/default.yaml. Used when
``validate=True`` is passed to ``ZonesConfig.load()``.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field, field_validator

_HEX_DIGITS = set("0123456789abcdefABCDEF")

ColorValue = Union[int, str]


def _check_color(value: ColorValue) -> ColorValue:
    if isinstance(value, bool):
        raise ValueError("colour must be '#RRGGBB' or a 24-bit integer")
    if isinstance(value, int):
        if not 0 <= value <= 0xFFFFFF:
            raise ValueError("colour integer must be within 0x000000-0xFFFFFF")
        return value
    text = value.strip().lstrip("#")
    if len(text) != 6 or not set(text) <= _HEX_DIGITS:
        raise ValueError(f"invalid colour string {value!r}")
    return value


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = None
    log_json: bool = False
    validate_config: bool = False


class ColorsConfig(BaseModel):
    front: ColorValue = "#00FF00"
    facing: ColorValue = "#00FF00"
    flank: ColorValue = "#FFFF00"
    rear: ColorValue = "#FF0000"
    spoke: ColorValue = "#333333"

    @field_validator("front", "facing", "flank", "rear", "spoke")
    @classmethod
    def _valid_color(cls, value: ColorValue) -> ColorValue:
        return _check_color(value)


class DisplayConfig(BaseModel):
    enabled: bool = False
    reach_show_all: bool = False
    colors: ColorsConfig = Field(default_factory=ColorsConfig)
    alpha: float = Field(default=0.15, ge=0, le=1)


class UnitsConfig(BaseModel):
    metric_factor: float = Field(default=3.33333, gt=0)
    metric_aliases: list[str] = Field(
        default_factory=lambda: ["m", "m.", "meter", "meters", "metre", "metres"]
    )


class ReachConfig(BaseModel):
    min_body_radius: float = Field(default=2.5, gt=0)
    contract: Literal["length", "attack_range"] = "length"
    melee_categories: list[Literal["weapon", "shield", "other"]] = Field(
        default_factory=lambda: ["weapon", "shield"]
    )
    melee_training_groups: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class CombatZonesRootConfig(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    units: UnitsConfig = Field(default_factory=UnitsConfig)
    reach: ReachConfig = Field(default_factory=ReachConfig)

    model_config = {"extra": "allow"}


class CombatZonesConfigSchema(BaseModel):
    """Top-level wrapper matching YAML root key ``combat_zones:``."""

    combat_zones: CombatZonesRootConfig

    model_config = {"extra": "allow"}


def validate_config(cfg_dict: dict) -> CombatZonesConfigSchema:
    """Validate a raw config dict (e.g. from OmegaConf) against the schema.

    Raises ``pydantic.ValidationError`` on invalid config.
    """
    return CombatZonesConfigSchema.model_validate(cfg_dict)
