"""Track map data structures."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from trackmap.geometry.vectors import Point

TRACK_MAP_VERSION = 1
DEFAULT_SIM = "lmu"
VIEW_BOX_PADDING = 0.05


def compute_view_box(
    polylines: list[list[Point]],
    padding: float = VIEW_BOX_PADDING,
) -> tuple[float, float, float, float]:
    """Padded ``(min_x, min_y, width, height)`` enclosing every finite point.

    Returns ``(0, 0, 1, 1)`` when there is nothing to enclose.  A zero extent
    along an axis is treated as 1.
    """
    xs: list[float] = []
    ys: list[float] = []
    for line in polylines:
        for x, y in line:
            if math.isfinite(x) and math.isfinite(y):
                xs.append(x)
                ys.append(y)
    if not xs:
        return (0.0, 0.0, 1.0, 1.0)

    width = (max(xs) - min(xs)) or 1.0
    height = (max(ys) - min(ys)) or 1.0
    pad_x = width * padding
    pad_y = height * padding
    return (min(xs) - pad_x / 2, min(ys) - pad_y / 2, width + pad_x, height + pad_y)


@dataclass(frozen=True)
class TrackMap:
    """A generated closed-loop track description.

    ``centerline``, both half-width lists and both edges are aligned
    index-for-index and have ``sample_count`` entries.
    """

    track_id: str
    """Normalised identifier, e.g. ``'le_mans'``."""

    track_name: str
    sample_count: int
    centerline: list[Point]
    half_width_left: list[float]
    """Metres from the centerline to the left edge along the left normal."""

    half_width_right: list[float]
    left_edge: list[Point]
    right_edge: list[Point]
    smoothing_window: int
    calibration_laps: dict[str, str | None] = field(default_factory=dict)
    """Source filename per role (``None`` for an unused role)."""

    metadata: dict = field(default_factory=dict)
    """Generation diagnostics (anchor counts, clamp statistics, ...)."""

    version: int = TRACK_MAP_VERSION
    generated_at: str | None = None
    """ISO-8601 UTC timestamp."""

    sim: str = DEFAULT_SIM

    @property
    def view_box(self) -> tuple[float, float, float, float]:
        return compute_view_box([self.left_edge, self.right_edge, self.centerline])

    def average_width(self) -> float:
        if not self.half_width_left:
            return 0.0
        totals = [l + r for l, r in zip(self.half_width_left, self.half_width_right)]
        return sum(totals) / len(totals)


@dataclass
class CenterlineValidation:
    """Outcome of :func:`~trackmap.track.centerline.validate_centerline`."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    closure_distance: float = 0.0
    """Gap between the last and first point, metres."""

    total_length: float = 0.0
    mean_spacing: float = 0.0

    @property
    def valid(self) -> bool:
        return not self.errors and not self.warnings

    def stats(self) -> dict:
        return {
            "closure_distance": round(self.closure_distance, 2),
            "total_length": round(self.total_length, 2),
            "mean_spacing": round(self.mean_spacing, 3),
        }


@dataclass
class EdgeValidation:
    """Outcome of :func:`~trackmap.track.edges.validate_edges`."""

    warnings: list[str] = field(default_factory=list)
    crossed_indices: list[int] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.warnings
