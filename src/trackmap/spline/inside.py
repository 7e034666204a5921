"""Inside-edge classification and apex detection.

Through a turn the inside boundary best describes the line a car takes, so
anchor placement is biased toward the apexes of whichever edge is currently
on the inside.  The side choice uses hysteresis so that noise on the
straights does not flip it back and forth.
"""

from __future__ import annotations

from dataclasses import dataclass

from trackmap.geometry.circular import circular_distance, circular_neighbors, wrap_index
from trackmap.geometry.vectors import Point, compute_signed_angles

DEFAULT_HYSTERESIS_M = 8.0
APEX_MERGE_M = 5.0
_ANGLE_EPS = 1e-4


def _sign(value: float) -> int:
    return 1 if value > 0 else -1 if value < 0 else 0


@dataclass
class InsideEdges:
    """Per-sample inside side and the points of that side."""

    sides: list[str]
    """``'left'`` or ``'right'`` for each sample."""

    points: list[Point]
    flip_count: int
    """Number of committed side switches."""


class _InsideEdgeTracker:
    """Stateful side picker with run-length hysteresis."""

    def __init__(self, min_run: int) -> None:
        self.min_run = min_run
        self.current = "left"
        self.last_sign = 1
        self.pending: str | None = None
        self.pending_count = 0
        self.flip_count = 0

    def pick(self, center: float, left: float, right: float) -> str:
        if abs(center) > _ANGLE_EPS:
            self.last_sign = _sign(center)
        turn = self.last_sign

        left_score, right_score = abs(left), abs(right)
        left_match = _sign(left) == turn and left_score > _ANGLE_EPS
        right_match = _sign(right) == turn and right_score > _ANGLE_EPS

        if left_match != right_match:
            return "left" if left_match else "right"
        # Both or neither match: larger magnitude wins, exact ties keep the active side
        if left_score == right_score:
            return self.current
        return "left" if left_score > right_score else "right"

    def commit(self, candidate: str, first: bool) -> str:
        if first:
            self.current = candidate
        elif candidate != self.current:
            if candidate == self.pending:
                self.pending_count += 1
            else:
                self.pending = candidate
                self.pending_count = 1
            if self.pending_count >= self.min_run:
                self.current = candidate
                self.pending = None
                self.pending_count = 0
                self.flip_count += 1
        else:
            self.pending = None
            self.pending_count = 0
        return self.current


def determine_inside_edges(
    center: list[Point],
    left: list[Point],
    right: list[Point],
    spacing_m: float = 1.0,
    hysteresis_m: float = DEFAULT_HYSTERESIS_M,
) -> InsideEdges:
    """Classify which edge is on the inside of the turn at every sample.

    A switch to the other side is committed only after it has been the pick
    for ``round(hysteresis_m / spacing_m)`` consecutive samples.
    """
    center_angles = compute_signed_angles(center)
    left_angles = compute_signed_angles(left)
    right_angles = compute_signed_angles(right)
    min_run = max(1, round(hysteresis_m / max(spacing_m, 1e-3)))
    tracker = _InsideEdgeTracker(min_run)

    sides: list[str] = []
    points: list[Point] = []
    for i in range(len(center_angles)):
        candidate = tracker.pick(center_angles[i], left_angles[i], right_angles[i])
        side = tracker.commit(candidate, first=(i == 0))
        sides.append(side)
        source = left if side == "left" else right
        points.append(source[wrap_index(i, len(source))])

    return InsideEdges(sides=sides, points=points, flip_count=tracker.flip_count)


def detect_apex_indices(points: list[Point], spacing_m: float = 1.0) -> list[int]:
    """Local curvature peaks of *points*, sharpest first, thinned by distance.

    A peak within ``round(5 m / spacing_m)`` samples of an already kept,
    sharper peak is dropped.
    """
    curvature = [abs(a) for a in compute_signed_angles(points)]
    n = len(curvature)
    peaks = []
    for i in range(n):
        prev, nxt = circular_neighbors(i, n)
        value = curvature[i]
        if value >= curvature[prev] and value >= curvature[nxt] and value > _ANGLE_EPS:
            peaks.append(i)
    peaks.sort(key=lambda i: curvature[i], reverse=True)

    merge = max(1, round(APEX_MERGE_M / max(spacing_m, 1e-3)))
    kept: list[int] = []
    for idx in peaks:
        if all(circular_distance(idx, k, n) > merge for k in kept):
            kept.append(idx)
    return kept
