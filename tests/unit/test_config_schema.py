"""Tests for Pydantic config schema validation."""

from __future__ import annotations

import pytest
from omegaconf import OmegaConf
from pydantic import ValidationError

from combatzones.core.config_schema import (
    CombatZonesConfigSchema,
    validate_config,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_default_dict(config_path):
    """Load config/default.yaml as a plain dict."""
    cfg = OmegaConf.load(config_path)
    return OmegaConf.to_container(cfg, resolve=True)


# ---------------------------------------------------------------------------
# Valid config passes
# ---------------------------------------------------------------------------


class TestValidConfig:
    def test_default_yaml_passes(self, config_path):
        """The shipped default.yaml should validate without errors."""
        schema = validate_config(_load_default_dict(config_path))
        assert isinstance(schema, CombatZonesConfigSchema)
        assert schema.combat_zones.display.alpha == 0.15

    def test_minimal_config_passes(self):
        schema = validate_config({"combat_zones": {}})
        assert schema.combat_zones.system.log_level == "INFO"

    def test_all_defaults_populated(self):
        schema = validate_config({"combat_zones": {}})
        assert schema.combat_zones.display.enabled is False
        assert schema.combat_zones.units.metric_factor == pytest.approx(3.33333)
        assert schema.combat_zones.reach.min_body_radius == 2.5
        assert schema.combat_zones.reach.melee_categories == ["weapon", "shield"]

    def test_overridden_values_preserved(self):
        d = {"combat_zones": {"display": {"alpha": 0.5}, "reach": {"contract": "attack_range"}}}
        schema = validate_config(d)
        assert schema.combat_zones.display.alpha == 0.5
        assert schema.combat_zones.reach.contract == "attack_range"

    def test_extra_keys_allowed(self):
        """Unknown keys should not cause validation failure (forward compat)."""
        validate_config({"combat_zones": {"future_feature": {"setting": 42}}})

    def test_integer_colour_accepted(self):
        schema = validate_config({"combat_zones": {"display": {"colors": {"front": 0x00FF00}}}})
        assert schema.combat_zones.display.colors.front == 0x00FF00


# ---------------------------------------------------------------------------
# Invalid config rejected
# ---------------------------------------------------------------------------


class TestInvalidConfig:
    def test_missing_root(self):
        with pytest.raises(ValidationError):
            validate_config({})

    @pytest.mark.parametrize("alpha", [-0.1, 1.5])
    def test_alpha_out_of_range(self, alpha):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"display": {"alpha": alpha}}})

    def test_non_positive_metric_factor(self):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"units": {"metric_factor": 0}}})

    def test_non_positive_body_floor(self):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"reach": {"min_body_radius": 0}}})

    def test_unknown_contract(self):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"reach": {"contract": "longest"}}})

    def test_unknown_melee_category(self):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"reach": {"melee_categories": ["armour"]}}})

    @pytest.mark.parametrize("colour", ["#GG0000", "#FFF", 0x1000000, -1])
    def test_bad_colour(self, colour):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"display": {"colors": {"rear": colour}}}})

    def test_bad_log_level(self):
        with pytest.raises(ValidationError):
            validate_config({"combat_zones": {"system": {"log_level": "LOUD"}}})
