"""Half-width estimation and conditioning.

Widths are measured by projecting the left / right edge samples onto the
centerline normal, then shaped into a constant-width envelope, clamped,
Savitzky–Golay smoothed and slope limited.  Every function returns fresh
lists; inputs are never modified.
"""

from __future__ import annotations

import logging
import math
import statistics
from dataclasses import dataclass, field

from trackmap.errors import DataError
from trackmap.geometry.vectors import Point
from trackmap.width.smoothing import (
    DEFAULT_SG_ORDER,
    DEFAULT_SG_WINDOW,
    SavitzkyGolayKernelCache,
    savitzky_golay_smooth,
)

_logger = logging.getLogger(__name__)

_DEAD_BAND_RAD = 1e-3
_FALLBACK_MIN_WIDTH_M = 6.0
_TARGET_SHRINK = 0.95
_OUTSIDE_FRACTION = 0.4
_MIN_OUTSIDE_HALF_M = 0.75
_SLOPE_EPS = 1e-9


@dataclass
class WidthProfile:
    """Left and right half-widths aligned with the centerline."""

    left: list[float]
    right: list[float]

    def __len__(self) -> int:
        return len(self.left)

    def totals(self) -> list[float]:
        return [l + r for l, r in zip(self.left, self.right)]


@dataclass
class WidthEnvelope:
    """Result of :func:`build_constant_width_envelope`."""

    profile: WidthProfile
    """Enveloped half-widths."""

    raw: WidthProfile
    """The measured half-widths the envelope was built from."""

    target_width: float
    """Minimum total width the envelope aimed for."""

    inside_left_count: int = 0
    inside_right_count: int = 0


@dataclass
class WidthOutlier:
    index: int
    reason: str


@dataclass
class OutlierReport:
    """Implausible widths found by :func:`detect_width_outliers`."""

    outliers: list[WidthOutlier]
    avg_left: float
    avg_right: float
    avg_total: float
    min_left: float
    max_left: float
    min_right: float
    max_right: float

    @property
    def indices(self) -> list[int]:
        return sorted({o.index for o in self.outliers})

    def summary(self) -> dict:
        return {
            "count": len(self.outliers),
            "avg_left": round(self.avg_left, 2),
            "avg_right": round(self.avg_right, 2),
            "avg_total": round(self.avg_total, 2),
            "min_left": round(self.min_left, 2),
            "max_left": round(self.max_left, 2),
            "min_right": round(self.min_right, 2),
            "max_right": round(self.max_right, 2),
        }


@dataclass
class SectorClamp:
    sector: int
    samples: int
    clamped: int
    ratio: float


@dataclass
class DeltaClampResult:
    """Slope-limited widths plus how much limiting was needed."""

    profile: WidthProfile
    per_sample_limit: float
    max_delta_per_10m: float
    left_clamped: int = 0
    right_clamped: int = 0
    left_sectors: list[SectorClamp] = field(default_factory=list)
    right_sectors: list[SectorClamp] = field(default_factory=list)

    def diagnostics(self) -> dict:
        return {
            "per_sample_limit": self.per_sample_limit,
            "max_delta_per_10m": self.max_delta_per_10m,
            "left_clamped": self.left_clamped,
            "right_clamped": self.right_clamped,
            "left_sectors": [vars(s).copy() for s in self.left_sectors],
            "right_sectors": [vars(s).copy() for s in self.right_sectors],
        }


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------

def calculate_widths(
    centerline: list[Point],
    normals: list[Point],
    left: list[Point],
    right: list[Point],
) -> WidthProfile:
    """Signed distance of each edge sample along the centerline normal.

    The left width is the projection itself, the right width its negation,
    so both are positive when the edges sit on their own side.

    Raises:
        DataError: If the four inputs differ in length.
    """
    n = len(centerline)
    if len(left) != n or len(right) != n:
        raise DataError(
            f"Grid size mismatch: centerline has {n} points, "
            f"left has {len(left)}, right has {len(right)}.",
            sample_count=n,
        )
    if len(normals) != n:
        raise DataError(f"Normal count mismatch: expected {n}, got {len(normals)}.")

    wl: list[float] = []
    wr: list[float] = []
    for (cx, cy), (nx, ny), (lx, ly), (rx, ry) in zip(centerline, normals, left, right):
        wl.append((lx - cx) * nx + (ly - cy) * ny)
        wr.append(-((rx - cx) * nx + (ry - cy) * ny))
    return WidthProfile(left=wl, right=wr)


def compute_target_width(profile: WidthProfile) -> float:
    """Median of the finite, positive total widths (0.0 when there are none)."""
    totals = [t for t in profile.totals() if math.isfinite(t) and t > 0]
    if not totals:
        return 0.0
    return statistics.median(totals)


def build_constant_width_envelope(
    profile: WidthProfile,
    signed_angles: list[float] | None,
    target_width: float,
    min_width: float | None = None,
) -> WidthEnvelope:
    """Keep the inside edge where it was measured and hold the total width.

    The inside side at each sample follows the sign of the centerline turn
    (positive = left); inside a ±1e-3 rad dead band the previous side is
    kept.  The outside half becomes whatever is needed to reach
    ``max(min_width, 0.95 * target_width)`` but never less than 40% of the
    inside half or 0.75 m.

    Args:
        profile: Measured half-widths.
        signed_angles: Centerline turning angles; ``None`` treats the track
            as straight.
        target_width: Typical total width, usually
            :func:`compute_target_width`.
        min_width: Floor on the total width.  Defaults to *target_width*, or
            6 m when that is 0.
    """
    n = len(profile)
    floor = min_width if min_width is not None else (
        target_width if target_width > 0 else _FALLBACK_MIN_WIDTH_M
    )
    left_out: list[float] = []
    right_out: list[float] = []
    inside_left_count = 0
    inside_right_count = 0
    inside_left = True

    for i in range(n):
        angle = signed_angles[i] if signed_angles else 0.0
        if abs(angle) >= _DEAD_BAND_RAD:
            inside_left = angle >= 0

        inside = max(0.0, profile.left[i] if inside_left else profile.right[i])
        desired_total = max(floor, target_width * _TARGET_SHRINK or inside * 2)
        outside = max(desired_total - inside, inside * _OUTSIDE_FRACTION, _MIN_OUTSIDE_HALF_M)

        if inside_left:
            left_out.append(inside)
            right_out.append(outside)
            inside_left_count += 1
        else:
            left_out.append(outside)
            right_out.append(inside)
            inside_right_count += 1

    return WidthEnvelope(
        profile=WidthProfile(left=left_out, right=right_out),
        raw=WidthProfile(left=list(profile.left), right=list(profile.right)),
        target_width=floor,
        inside_left_count=inside_left_count,
        inside_right_count=inside_right_count,
    )


def symmetrise_widths(profile: WidthProfile) -> WidthProfile:
    """Both sides set to the narrower non-negative half at each sample."""
    sym = [min(max(0.0, l), max(0.0, r)) for l, r in zip(profile.left, profile.right)]
    return WidthProfile(left=sym, right=list(sym))


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def detect_width_outliers(
    profile: WidthProfile,
    max_width_change: float = 5.0,
    min_width: float = 3.0,
    max_width: float = 20.0,
) -> OutlierReport:
    """Report negative, implausibly narrow / wide and jumping widths.

    The profile itself is left untouched.  Step changes are checked between
    consecutive samples only (no wrap from last to first).

    Raises:
        DataError: If the profile is empty.
    """
    n = len(profile)
    if n == 0:
        raise DataError("Cannot analyse an empty width profile.", sample_count=0)

    outliers: list[WidthOutlier] = []
    for i, (wl, wr) in enumerate(zip(profile.left, profile.right)):
        total = wl + wr
        if wl < 0:
            outliers.append(WidthOutlier(
                i, f"Negative left width: {wl:.2f}m. Left edge is right of centerline."
            ))
        if wr < 0:
            outliers.append(WidthOutlier(
                i, f"Negative right width: {wr:.2f}m. Right edge is left of centerline."
            ))
        if total < min_width:
            outliers.append(WidthOutlier(
                i, f"Total width too narrow: {total:.2f}m (min: {min_width}m)."
            ))
        if total > max_width:
            outliers.append(WidthOutlier(
                i, f"Total width too wide: {total:.2f}m (max: {max_width}m)."
            ))
        if i > 0:
            delta_left = abs(wl - profile.left[i - 1])
            delta_right = abs(wr - profile.right[i - 1])
            if delta_left > max_width_change:
                outliers.append(WidthOutlier(
                    i, f"Large left width change: {delta_left:.2f}m from previous point."
                ))
            if delta_right > max_width_change:
                outliers.append(WidthOutlier(
                    i, f"Large right width change: {delta_right:.2f}m from previous point."
                ))

    avg_left = sum(profile.left) / n
    avg_right = sum(profile.right) / n
    return OutlierReport(
        outliers=outliers,
        avg_left=avg_left,
        avg_right=avg_right,
        avg_total=avg_left + avg_right,
        min_left=min(profile.left),
        max_left=max(profile.left),
        min_right=min(profile.right),
        max_right=max(profile.right),
    )


# ---------------------------------------------------------------------------
# Conditioning
# ---------------------------------------------------------------------------

def clamp_widths(
    profile: WidthProfile,
    min_half_width: float = 2.0,
    max_half_width: float = 15.0,
) -> WidthProfile:
    """Clamp every half-width into ``[min_half_width, max_half_width]``."""
    def clamp(v: float) -> float:
        return max(min_half_width, min(max_half_width, v))

    return WidthProfile(
        left=[clamp(v) for v in profile.left],
        right=[clamp(v) for v in profile.right],
    )


def savitzky_golay_width_smooth(
    profile: WidthProfile,
    window: int = DEFAULT_SG_WINDOW,
    order: int = DEFAULT_SG_ORDER,
    spacing: float = 1.0,
    cache: SavitzkyGolayKernelCache | None = None,
) -> WidthProfile:
    """Circular Savitzky–Golay smoothing of both sides."""
    return WidthProfile(
        left=savitzky_golay_smooth(profile.left, window, order, spacing, cache=cache),
        right=savitzky_golay_smooth(profile.right, window, order, spacing, cache=cache),
    )


def clamp_width_deltas(
    profile: WidthProfile,
    spacing_m: float = 1.0,
    max_delta_per_10m: float = 0.25,
    sector_length_m: float = 100.0,
) -> DeltaClampResult:
    """Limit how fast each half-width may change along the track.

    The allowed change between neighbouring samples is
    ``max_delta_per_10m / 10 * spacing_m``.  Offending samples are pulled
    toward their predecessor, wrapping from the last sample to the first,
    until a full pass changes nothing (at most ``2 * n`` passes).

    A change is only corrected once it exceeds the limit by more than 1e-9,
    so neighbouring samples in the result may differ by up to
    ``per_sample_limit + 1e-9``.
    """
    limit = (max_delta_per_10m / 10.0) * max(spacing_m, 1e-3)
    left, left_flags = _apply_slope_clamp(profile.left, limit)
    right, right_flags = _apply_slope_clamp(profile.right, limit)

    result = DeltaClampResult(
        profile=WidthProfile(left=left, right=right),
        per_sample_limit=limit,
        max_delta_per_10m=max_delta_per_10m,
        left_clamped=sum(left_flags),
        right_clamped=sum(right_flags),
        left_sectors=_summarise_clamp_by_sector(left_flags, spacing_m, sector_length_m),
        right_sectors=_summarise_clamp_by_sector(right_flags, spacing_m, sector_length_m),
    )
    if result.left_clamped or result.right_clamped:
        _logger.info(
            "Slope clamp touched %d left / %d right samples (limit %.4f m)",
            result.left_clamped, result.right_clamped, limit,
        )
    return result


def _apply_slope_clamp(values: list[float], limit: float) -> tuple[list[float], list[bool]]:
    n = len(values)
    result = list(values)
    flags = [False] * n
    changed = True
    passes = 0
    while changed and passes < n * 2:
        changed = False
        passes += 1
        for i in range(n):
            prev = result[i - 1]  # index -1 wraps to the last sample
            delta = result[i] - prev
            if delta > limit + _SLOPE_EPS:
                result[i] = prev + limit
            elif delta < -limit - _SLOPE_EPS:
                result[i] = prev - limit
            else:
                continue
            flags[i] = True
            changed = True
    return result, flags


def _summarise_clamp_by_sector(
    flags: list[bool],
    spacing_m: float,
    sector_length_m: float,
) -> list[SectorClamp]:
    if not flags:
        return []
    per_sector = max(1, round(sector_length_m / max(spacing_m, 1e-3)))
    summary: list[SectorClamp] = []
    for sector, start in enumerate(range(0, len(flags), per_sector)):
        chunk = flags[start:start + per_sector]
        clamped = sum(chunk)
        summary.append(SectorClamp(
            sector=sector,
            samples=len(chunk),
            clamped=clamped,
            ratio=clamped / len(chunk),
        ))
    return summary
