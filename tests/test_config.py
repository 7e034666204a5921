"""Tests for GeneratorConfig validation."""

from __future__ import annotations

import math

import pytest

from trackmap.config import GeneratorConfig


class TestGeneratorConfig:
    def test_defaults(self):
        cfg = GeneratorConfig()
        assert cfg.sample_count is None
        assert cfg.spacing_m == 0.5
        assert cfg.smoothing_window == 9
        assert cfg.point_target == 40
        assert cfg.sg_window == 9 and cfg.sg_order == 3
        assert cfg.max_delta_per_10m == 0.25
        assert cfg.clamp_scale == 1.0
        assert cfg.guardrail_tolerance_m == 0.01

    def test_to_dict(self):
        data = GeneratorConfig(sample_count=500).to_dict()
        assert data["sample_count"] == 500
        assert data["allow_single_side"] is False

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sample_count": 2},
            {"spacing_m": 0.0},
            {"spacing_m": math.nan},
            {"smoothing_window": 0},
            {"point_target": 3},
            {"sg_window": 2},
            {"sg_order": 9},
            {"min_half_width_m": 10.0, "max_half_width_m": 5.0},
            {"default_track_width_m": 0.0},
            {"guardrail_tolerance_m": -0.1},
            {"guardrail_tolerance_m": math.inf},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            GeneratorConfig(**kwargs)
