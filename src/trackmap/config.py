"""Generation parameters.

All values are plain numbers in metres / radians / sample counts.  The
defaults reproduce the behaviour of the calibration tooling used to build the
shipped track maps.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass


@dataclass
class GeneratorConfig:
    """Tuning parameters for one :class:`~trackmap.pipeline.TrackMapGenerator` run.

    Raises:
        ValueError: From ``__post_init__`` if any value is out of range.
    """

    # Resampling
    sample_count: int | None = None
    """Explicit grid size.  ``None`` derives it from lap length / ``spacing_m``."""

    spacing_m: float = 0.5
    """Target sample spacing used when ``sample_count`` is omitted."""

    align_heading: bool = True
    """Rotate repeated laps of a role onto the heading of the first lap."""

    # Centerline / spline
    smoothing_window: int = 9
    """Moving-average window applied to the spline centerline (1 = off)."""

    point_target: int = 40
    """Anchor budget per spline."""

    tension: float = 0.5
    straight_spacing_m: float = 80.0
    hysteresis_m: float = 8.0
    allow_single_side: bool = False
    default_track_width_m: float = 12.0
    """Offset used to synthesise the missing side in single-side mode."""

    # Widths
    min_half_width_m: float = 2.0
    max_half_width_m: float = 15.0
    sg_window: int = 9
    sg_order: int = 3
    max_delta_per_10m: float = 0.25
    sector_length_m: float = 100.0

    # Outlier report (diagnostic only)
    outlier_max_width_change_m: float = 5.0
    outlier_min_width_m: float = 3.0
    outlier_max_width_m: float = 20.0

    # Guardrail
    clamp_scale: float = 1.0
    guardrail_tolerance_m: float = 0.01
    """Overshoot past the recorded laps that is accepted without a clamp."""

    def __post_init__(self) -> None:
        if self.sample_count is not None and self.sample_count < 3:
            raise ValueError("sample_count must be >= 3")
        if not math.isfinite(self.spacing_m) or self.spacing_m <= 0:
            raise ValueError("spacing_m must be a positive number")
        if self.smoothing_window < 1:
            raise ValueError("smoothing_window must be >= 1")
        if self.point_target < 4:
            raise ValueError("point_target must be >= 4")
        if self.sg_window < 3:
            raise ValueError("sg_window must be >= 3")
        if self.sg_order < 0 or self.sg_order >= self.sg_window:
            raise ValueError("sg_order must be in [0, sg_window)")
        if self.min_half_width_m > self.max_half_width_m:
            raise ValueError("min_half_width_m must not exceed max_half_width_m")
        if self.default_track_width_m <= 0:
            raise ValueError("default_track_width_m must be positive")
        if not math.isfinite(self.guardrail_tolerance_m) or self.guardrail_tolerance_m < 0:
            raise ValueError("guardrail_tolerance_m must be a non-negative number")

    def to_dict(self) -> dict:
        """Return the configuration as a plain dict (for export metadata)."""
        return asdict(self)
