"""Centerline smoothing and sanity checks."""

from __future__ import annotations

import logging
import math
import statistics

from trackmap.geometry.vectors import Point
from trackmap.track.models import CenterlineValidation
from trackmap.width.smoothing import gaussian_smooth, smooth_array

_logger = logging.getLogger(__name__)

_CLOSURE_FACTOR = 5.0


def smooth_centerline(points: list[Point], window: int, circular: bool = True) -> list[Point]:
    """Moving average over x and y independently.

    Args:
        points: Centerline samples.
        window: Kernel size; even values are widened by one.  ``1`` returns
            an unchanged copy.
        circular: Wrap around the ends (closed loop).
    """
    if not points:
        return []
    xs = smooth_array([p[0] for p in points], window, circular)
    ys = smooth_array([p[1] for p in points], window, circular)
    return list(zip(xs, ys))


def gaussian_smooth_centerline(
    points: list[Point],
    sigma: float,
    circular: bool = True,
) -> list[Point]:
    """Gaussian-weighted variant of :func:`smooth_centerline`."""
    if not points:
        return []
    xs = gaussian_smooth([p[0] for p in points], sigma, circular)
    ys = gaussian_smooth([p[1] for p in points], sigma, circular)
    return list(zip(xs, ys))


def validate_centerline(points: list[Point]) -> CenterlineValidation:
    """Check that *points* form a usable closed loop.

    Fewer than 3 points or any non-finite coordinate is an error.  A gap
    from the last point back to the first wider than five median steps is a
    warning: the loop probably does not close.
    """
    result = CenterlineValidation()
    n = len(points)
    if n < 3:
        result.errors.append(f"Centerline needs at least 3 points, got {n}.")
        return result

    bad = [i for i, (x, y) in enumerate(points) if not (math.isfinite(x) and math.isfinite(y))]
    if bad:
        result.errors.append(
            f"Centerline has {len(bad)} non-finite points (first at index {bad[0]})."
        )
        return result

    steps = [math.dist(points[i - 1], points[i]) for i in range(1, n)]
    closure = math.dist(points[-1], points[0])
    median_step = statistics.median(steps)

    result.closure_distance = closure
    result.total_length = sum(steps) + closure
    result.mean_spacing = result.total_length / n

    if median_step > 0 and closure > _CLOSURE_FACTOR * median_step:
        result.warnings.append(
            f"Centerline does not close: gap of {closure:.2f}m "
            f"vs median step {median_step:.2f}m."
        )
    for message in result.warnings:
        _logger.warning(message)
    return result
