"""Anchor budget selection for closed splines.

Reduces a dense point set to roughly ``target`` anchors while keeping the
apexes, a sparse skeleton along the straights and the sharpest remaining
vertices.
"""

from __future__ import annotations

from trackmap.geometry.circular import circular_neighbors, wrap_index
from trackmap.geometry.vectors import Point, signed_angle_at

DEFAULT_POINT_TARGET = 40
DEFAULT_STRAIGHT_SPACING_M = 80.0
_MIN_ANCHORS = 4


def curvature_score(points: list[Point], index: int) -> float:
    """Absolute turning angle at *index* (circular)."""
    n = len(points)
    i = wrap_index(index, n)
    prev, nxt = circular_neighbors(i, n)
    return abs(signed_angle_at(points[prev], points[i], points[nxt]))


def select_anchor_indices(
    points: list[Point],
    target: int = DEFAULT_POINT_TARGET,
    bias_indices: list[int] | None = None,
    spacing_m: float = 1.0,
    straight_spacing_m: float = DEFAULT_STRAIGHT_SPACING_M,
) -> list[int]:
    """Return the sorted indices of the anchors chosen from *points*.

    Args:
        points: Dense closed point set.
        target: Anchor budget.
        bias_indices: Indices always considered first (apexes).
        spacing_m: Metres between consecutive *points*.
        straight_spacing_m: Distance between evenly spaced skeleton anchors.

    Returns:
        All indices when ``len(points) <= target`` or ``target < 4``, or when
        fewer than 4 anchors would survive; otherwise at most *target* indices.
    """
    n = len(points)
    if n <= target or target < _MIN_ANCHORS:
        return list(range(n))

    chosen: set[int] = {wrap_index(i, n) for i in (bias_indices or [])}
    straight_step = max(1, round(straight_spacing_m / max(spacing_m, 1e-3)))

    for idx in range(0, n, straight_step):
        if len(chosen) >= target:
            break
        chosen.add(idx)

    scores = [curvature_score(points, i) for i in range(n)]

    if len(chosen) < target:
        for idx in sorted(range(n), key=lambda i: scores[i], reverse=True):
            if len(chosen) >= target:
                break
            chosen.add(idx)

    if len(chosen) > target:
        by_score = sorted(chosen, key=lambda i: scores[i])
        for idx in by_score[: len(chosen) - target]:
            chosen.discard(idx)

    indices = sorted(chosen)
    if len(indices) < _MIN_ANCHORS:
        return list(range(n))
    return indices


def build_anchor_budget(
    points: list[Point],
    target: int = DEFAULT_POINT_TARGET,
    bias_indices: list[int] | None = None,
    spacing_m: float = 1.0,
    straight_spacing_m: float = DEFAULT_STRAIGHT_SPACING_M,
) -> list[Point]:
    """Anchor points (in original order) selected by :func:`select_anchor_indices`."""
    indices = select_anchor_indices(points, target, bias_indices, spacing_m, straight_spacing_m)
    return [points[i] for i in indices]
