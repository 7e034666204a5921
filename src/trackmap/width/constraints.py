"""Keep generated edges inside the recorded calibration traces.

Smoothing and centerline drift can push a half-width past where any lap of
that side was actually driven.  The guardrail caps each half-width at the
furthest recorded lap for that side, measured where the lap crosses the
centerline normal.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from trackmap.calibration.models import GridPoint
from trackmap.geometry.sections import normal_crossings
from trackmap.geometry.vectors import Point
from trackmap.width.estimator import WidthProfile

_logger = logging.getLogger(__name__)

_TOLERANCE_M = 1e-6


@dataclass
class ConstraintResult:
    """Guardrailed widths and which samples were capped."""

    profile: WidthProfile
    clamp_scale: float
    left_indices: list[int] = field(default_factory=list)
    right_indices: list[int] = field(default_factory=list)

    @property
    def left_clamped(self) -> int:
        return len(self.left_indices)

    @property
    def right_clamped(self) -> int:
        return len(self.right_indices)

    def stats(self) -> dict:
        return {
            "clamp_scale": self.clamp_scale,
            "left_clamped": self.left_clamped,
            "right_clamped": self.right_clamped,
            "left_indices": list(self.left_indices),
            "right_indices": list(self.right_indices),
        }


def _safe_scale(clamp_scale: float) -> float:
    if not math.isfinite(clamp_scale):
        return 1.0
    return max(0.1, min(clamp_scale, 1.0))


def _side_limits(
    centerline: list[Point],
    normals: list[Point],
    laps: list[list[GridPoint]],
    sign: float,
) -> list[float]:
    """Furthest signed projection of any lap of one side, per sample."""
    limits = [0.0] * len(centerline)
    for lap in laps:
        crossings = normal_crossings(centerline, normals, [p.as_pair() for p in lap])
        for i, point in enumerate(crossings):
            if point is None:
                continue
            center, normal = centerline[i], normals[i]
            projection = sign * (
                (point[0] - center[0]) * normal[0] + (point[1] - center[1]) * normal[1]
            )
            if projection > limits[i]:
                limits[i] = projection
    return limits


def enforce_width_constraints(
    centerline: list[Point],
    normals: list[Point],
    raw_grids: dict[str, list[list[GridPoint]]],
    profile: WidthProfile,
    clamp_scale: float = 1.0,
    tolerance_m: float = _TOLERANCE_M,
) -> ConstraintResult:
    """Cap each half-width at the furthest recorded lap of its side.

    Each lap is intersected with the normal line through every centerline
    sample, so laps sampled on a different grid than the centerline still
    give the limit at the right cross-section.

    Args:
        centerline: Final centerline.
        normals: Left-pointing unit normals of *centerline*.
        raw_grids: Aligned per-lap grids keyed by role; only ``left`` and
            ``right`` are consulted.
        profile: Half-widths to constrain.
        clamp_scale: Fraction of the recorded span allowed, clamped into
            ``[0.1, 1]`` (non-finite values mean 1).
        tolerance_m: Overshoot past the scaled limit that is not clamped.

    Returns:
        A :class:`ConstraintResult` with new width lists.  Samples where no
        lap crosses the normal, or the recorded limit is not positive, are
        left as they are.
    """
    scale = _safe_scale(clamp_scale)
    left = list(profile.left)
    right = list(profile.right)
    result = ConstraintResult(profile=WidthProfile(left=left, right=right), clamp_scale=scale)

    sides = (
        ("left", 1.0, left, result.left_indices),
        ("right", -1.0, right, result.right_indices),
    )
    for role, sign, widths, indices in sides:
        laps = raw_grids.get(role) or []
        if not laps:
            continue
        limits = _side_limits(centerline, normals, laps, sign)
        for i, limit in enumerate(limits):
            limit *= scale
            if limit > 0 and widths[i] > limit + tolerance_m:
                widths[i] = limit
                indices.append(i)

    if result.left_clamped or result.right_clamped:
        _logger.warning(
            "Guardrail capped %d left / %d right samples to the recorded laps",
            result.left_clamped, result.right_clamped,
        )
    return result
