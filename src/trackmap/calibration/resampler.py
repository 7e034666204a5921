"""Resample calibration laps onto a common progress grid (0 → 1).

Each lap's recorded lap distance is normalised to progress, linearly
interpolated onto a uniform grid shared by every lap of the run, heading
aligned against the first lap of its role and averaged per role.
"""

from __future__ import annotations

import bisect
import logging
import math
import statistics

from trackmap.calibration.models import ROLES, CalibrationLap, GridPoint, ResampleResult, Sample
from trackmap.errors import DataError
from trackmap.geometry.circular import circular_neighbors

_logger = logging.getLogger(__name__)

_MIN_GRID_SIZE = 200
_ALIGN_THRESHOLD = 1e-4  # rad; smaller heading offsets are left alone


# ---------------------------------------------------------------------------
# Progress helpers
# ---------------------------------------------------------------------------

def cumulative_distance(samples: list[Sample]) -> list[float]:
    """Recorded lap distance of each sample (taken as-is, not recomputed from x/y)."""
    return [s.distance for s in samples]


def normalize_to_progress(distances: list[float]) -> list[float]:
    """Map distances onto [0, 1] relative to the first and last value.

    A zero span (all samples at the same distance) yields all zeros.
    """
    if not distances:
        return []
    start = distances[0]
    span = distances[-1] - start
    if span == 0:
        return [0.0] * len(distances)
    return [(d - start) / span for d in distances]


def resample_on_grid(
    samples: list[Sample],
    grid_size: int,
    role: str | None = None,
) -> list[GridPoint]:
    """Linearly interpolate *samples* onto ``grid_size`` uniform progress values.

    Targets outside the recorded progress range take the first / last sample
    value rather than being extrapolated.

    Raises:
        DataError: If fewer than 2 samples carry valid spatial coordinates.
    """
    valid = [s for s in samples if s.is_spatial()]
    if len(valid) < 2:
        raise DataError(
            f"Insufficient spatial data for resampling{f' ({role} lap)' if role else ''}: "
            f"only {len(valid)} valid samples found. Need at least 2.",
            role=role,
            sample_count=len(valid),
        )

    progress = normalize_to_progress(cumulative_distance(valid))
    last = len(valid) - 1
    step = 1.0 / (grid_size - 1) if grid_size > 1 else 0.0
    grid: list[GridPoint] = []

    for i in range(grid_size):
        target = i * step
        right = bisect.bisect_left(progress, target)
        if right == 0:
            x, y = valid[0].x, valid[0].planar_y
        elif right > last:
            x, y = valid[last].x, valid[last].planar_y
        else:
            left = right - 1
            p0, p1 = progress[left], progress[right]
            span = p1 - p0
            t = (target - p0) / span if span > 0 else 0.0
            a, b = valid[left], valid[right]
            x = a.x + (b.x - a.x) * t
            y = a.planar_y + (b.planar_y - a.planar_y) * t
        grid.append(GridPoint(progress=target, x=x, y=y))

    return grid


# ---------------------------------------------------------------------------
# Heading alignment
# ---------------------------------------------------------------------------

def compute_headings(grid: list[GridPoint]) -> list[float]:
    """Circular central-difference heading (radians) at each grid point."""
    n = len(grid)
    headings: list[float] = []
    for i in range(n):
        prev, nxt = circular_neighbors(i, n)
        headings.append(math.atan2(grid[nxt].y - grid[prev].y, grid[nxt].x - grid[prev].x))
    return headings


def wrap_angle(angle: float) -> float:
    """Wrap *angle* into (-π, π]."""
    while angle <= -math.pi:
        angle += 2 * math.pi
    while angle > math.pi:
        angle -= 2 * math.pi
    return angle


def median_angle(values: list[float]) -> float:
    """Median of the finite values (0.0 when there are none)."""
    finite = [v for v in values if math.isfinite(v)]
    if not finite:
        return 0.0
    return statistics.median(finite)


def rotate_grid(grid: list[GridPoint], angle: float) -> list[GridPoint]:
    """Rotate *grid* about its own centroid by *angle* radians (new list)."""
    if not math.isfinite(angle) or abs(angle) < 1e-6 or not grid:
        return grid
    cx = sum(p.x for p in grid) / len(grid)
    cy = sum(p.y for p in grid) / len(grid)
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    return [
        GridPoint(
            progress=p.progress,
            x=cx + (p.x - cx) * cos_a - (p.y - cy) * sin_a,
            y=cy + (p.x - cx) * sin_a + (p.y - cy) * cos_a,
        )
        for p in grid
    ]


def heading_offset(grid: list[GridPoint], reference: list[float]) -> float:
    """Median wrapped heading difference between *grid* and *reference* headings."""
    headings = compute_headings(grid)
    return median_angle([wrap_angle(h - r) for h, r in zip(headings, reference)])


# ---------------------------------------------------------------------------
# Averaging
# ---------------------------------------------------------------------------

def average_grids(grids: list[list[GridPoint]], role: str = "") -> list[GridPoint] | None:
    """Point-by-point mean of *grids*; progress is taken from the first grid.

    Raises:
        DataError: If the grids differ in length.
    """
    if not grids:
        return None
    length = len(grids[0])
    for grid in grids:
        if len(grid) != length:
            raise DataError(
                f"Grid size mismatch for {role}: expected {length} samples, got {len(grid)}.",
                role=role or None,
                sample_count=len(grid),
            )
    if len(grids) == 1:
        return list(grids[0])

    count = len(grids)
    return [
        GridPoint(
            progress=grids[0][i].progress,
            x=sum(g[i].x for g in grids) / count,
            y=sum(g[i].y for g in grids) / count,
        )
        for i in range(length)
    ]


# ---------------------------------------------------------------------------
# Resampler
# ---------------------------------------------------------------------------

class Resampler:
    """Bring all calibration laps of a run onto one shared progress grid.

    Args:
        sample_count: Explicit grid size.  ``None`` derives it from the mean
            recorded lap length divided by *spacing_m* (at least 200).
        spacing_m: Target metres between grid points when *sample_count* is
            omitted.
        align_heading: Rotate every additional lap of a role so that its
            median heading matches the first lap of that role.
    """

    def __init__(
        self,
        sample_count: int | None = None,
        spacing_m: float = 0.5,
        align_heading: bool = True,
    ) -> None:
        self.sample_count = sample_count
        self.spacing_m = spacing_m
        self.align_heading = align_heading

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resample(self, laps: list[CalibrationLap]) -> ResampleResult:
        """Resample, align and average *laps* per role.

        Raises:
            DataError: If no left or right lap is present, or a lap has fewer
                than 2 spatial samples.
        """
        track_length = self._mean_lap_length(laps)
        grid_size = self._resolve_grid_size(track_length)

        grouped: dict[str, list[list[GridPoint]]] = {role: [] for role in ROLES}
        references: dict[str, list[float]] = {}
        offsets: dict[str, float] = {}

        for lap in laps:
            grid = resample_on_grid(lap.samples, grid_size, role=lap.role)
            key = lap.filename or lap.role
            if self.align_heading:
                if lap.role not in references:
                    references[lap.role] = compute_headings(grid)
                    offsets[key] = 0.0
                else:
                    offset = heading_offset(grid, references[lap.role])
                    offsets[key] = offset
                    if abs(offset) > _ALIGN_THRESHOLD:
                        _logger.info("Rotating %s lap %s by %.5f rad", lap.role, key, -offset)
                        grid = rotate_grid(grid, -offset)
            grouped[lap.role].append(grid)

        grids = {role: average_grids(grouped[role], role) for role in ROLES}
        if grids["left"] is None and grids["right"] is None:
            raise DataError(
                "At least one left or right calibration lap is required.",
                role="left",
                sample_count=len(laps),
            )

        spacing = (
            track_length / (grid_size - 1)
            if track_length and grid_size > 1
            else self.spacing_m
        )
        _logger.info(
            "Resampled %d laps onto %d points (~%.3f m spacing)", len(laps), grid_size, spacing
        )
        return ResampleResult(
            grids=grids,
            raw_grids=grouped,
            track_length=track_length,
            sample_count=grid_size,
            spacing_m=spacing,
            heading_offsets=offsets,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _mean_lap_length(laps: list[CalibrationLap]) -> float | None:
        lengths: list[float] = []
        for lap in laps:
            valid = [s for s in lap.samples if s.is_spatial()]
            if len(valid) < 2:
                continue
            distances = cumulative_distance(valid)
            length = distances[-1] - distances[0]
            if math.isfinite(length) and length > 0:
                lengths.append(length)
        return sum(lengths) / len(lengths) if lengths else None

    def _resolve_grid_size(self, track_length: float | None) -> int:
        if self.sample_count:
            return self.sample_count
        if not track_length:
            return _MIN_GRID_SIZE
        return max(_MIN_GRID_SIZE, round(track_length / max(self.spacing_m, 0.1)))
