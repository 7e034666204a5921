"""Edge polylines from the centerline and half-widths."""

from __future__ import annotations

import logging
import math

from trackmap.errors import DataError
from trackmap.geometry.vectors import Point
from trackmap.track.models import EdgeValidation

_logger = logging.getLogger(__name__)

MIN_EDGE_SEPARATION_M = 0.1


def generate_edges(
    centerline: list[Point],
    normals: list[Point],
    half_width_left: list[float],
    half_width_right: list[float],
) -> tuple[list[Point], list[Point]]:
    """Offset the centerline along its normals.

    Returns:
        ``(left_edge, right_edge)`` where ``left = c + n * wl`` and
        ``right = c - n * wr``.

    Raises:
        DataError: If the inputs differ in length.
    """
    n = len(centerline)
    if not (len(normals) == len(half_width_left) == len(half_width_right) == n):
        raise DataError(
            f"Edge inputs differ in length: centerline {n}, normals {len(normals)}, "
            f"left {len(half_width_left)}, right {len(half_width_right)}.",
            sample_count=n,
        )
    left: list[Point] = []
    right: list[Point] = []
    for (cx, cy), (nx, ny), wl, wr in zip(centerline, normals, half_width_left, half_width_right):
        left.append((cx + nx * wl, cy + ny * wl))
        right.append((cx - nx * wr, cy - ny * wr))
    return left, right


def validate_edges(left: list[Point], right: list[Point]) -> EdgeValidation:
    """Report edge problems as warnings; nothing here raises."""
    result = EdgeValidation()
    if len(left) != len(right):
        result.warnings.append(
            f"Edge length mismatch: left has {len(left)} points, right has {len(right)}."
        )

    non_finite = sum(
        1 for line in (left, right) for x, y in line
        if not (math.isfinite(x) and math.isfinite(y))
    )
    if non_finite:
        result.warnings.append(f"Edges contain {non_finite} non-finite points.")

    for i, (lp, rp) in enumerate(zip(left, right)):
        if math.dist(lp, rp) < MIN_EDGE_SEPARATION_M:
            result.crossed_indices.append(i)
    if result.crossed_indices:
        result.warnings.append(
            f"Edges cross or touch at {len(result.crossed_indices)} points "
            f"(first at index {result.crossed_indices[0]})."
        )

    for message in result.warnings:
        _logger.warning(message)
    return result
