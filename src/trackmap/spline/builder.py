"""Spline-sampled left / right edges and centerline from averaged grids."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from trackmap.calibration.models import GridPoint
from trackmap.errors import DataError
from trackmap.geometry.vectors import Point, compute_normals, compute_tangents
from trackmap.spline.anchors import (
    DEFAULT_POINT_TARGET,
    DEFAULT_STRAIGHT_SPACING_M,
    build_anchor_budget,
)
from trackmap.spline.bezier import DEFAULT_TENSION, sample_closed_bezier
from trackmap.spline.inside import (
    DEFAULT_HYSTERESIS_M,
    detect_apex_indices,
    determine_inside_edges,
)

_logger = logging.getLogger(__name__)


@dataclass
class SplineSamples:
    """Dense closed-curve samples produced by :class:`SplineBuilder`."""

    left: list[Point]
    right: list[Point]
    centerline: list[Point]
    inside: list[Point]
    """Inside-edge point per grid index (before anchor reduction)."""

    inside_sides: list[str]
    apex_indices: list[int]
    left_control_count: int
    right_control_count: int
    center_control_count: int
    inside_flip_count: int
    synthesized_side: str | None = None
    """Side generated by offsetting the other one, in single-side mode."""

    left_grid: list[Point] = field(default_factory=list)
    right_grid: list[Point] = field(default_factory=list)
    """Averaged edge grids the splines were fitted to (synthesised side included)."""

    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.metadata = {
            "left_control_count": self.left_control_count,
            "right_control_count": self.right_control_count,
            "center_control_count": self.center_control_count,
            "inside_flip_count": self.inside_flip_count,
            "apex_count": len(self.apex_indices),
            "synthesized_side": self.synthesized_side,
        }


def clone_missing_side(
    grids: dict[str, list[GridPoint] | None],
    width_m: float,
) -> tuple[dict[str, list[GridPoint] | None], str]:
    """Return a copy of *grids* with the absent edge synthesised.

    The present edge is offset by *width_m* along its own normals: a left
    edge is pushed to the right, a right edge to the left.

    Returns:
        ``(new_grids, synthesised_role)``

    Raises:
        DataError: If neither edge is present.
    """
    source_role = "left" if grids.get("left") else "right" if grids.get("right") else None
    if source_role is None:
        raise DataError("At least one calibration lap is required.")

    source = grids[source_role]
    normals = compute_normals(compute_tangents([p.as_pair() for p in source]))
    direction = -1.0 if source_role == "left" else 1.0
    clone = [
        GridPoint(
            progress=p.progress,
            x=p.x + nx * width_m * direction,
            y=p.y + ny * width_m * direction,
        )
        for p, (nx, ny) in zip(source, normals)
    ]
    target_role = "right" if source_role == "left" else "left"
    result = dict(grids)
    result[target_role] = clone
    return result, target_role


class SplineBuilder:
    """Fit closed cubic splines through budgeted anchors of each edge.

    Args:
        point_target: Anchor budget per spline.
        tension: Tangent scale at each anchor.
        spacing_m: Metres between grid points.
        straight_spacing_m: Spacing of the evenly distributed skeleton anchors.
        hysteresis_m: Run length required before the inside edge may switch.
        allow_single_side: Synthesise a missing edge instead of failing.
        default_track_width_m: Offset used for the synthesised edge.
    """

    def __init__(
        self,
        point_target: int = DEFAULT_POINT_TARGET,
        tension: float = DEFAULT_TENSION,
        spacing_m: float = 1.0,
        straight_spacing_m: float = DEFAULT_STRAIGHT_SPACING_M,
        hysteresis_m: float = DEFAULT_HYSTERESIS_M,
        allow_single_side: bool = False,
        default_track_width_m: float = 12.0,
    ) -> None:
        self.point_target = point_target
        self.tension = tension
        self.spacing_m = spacing_m
        self.straight_spacing_m = straight_spacing_m
        self.hysteresis_m = hysteresis_m
        self.allow_single_side = allow_single_side
        self.default_track_width_m = default_track_width_m

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(
        self,
        grids: dict[str, list[GridPoint] | None],
        sample_count: int,
    ) -> SplineSamples:
        """Sample left, right and center splines at *sample_count* points each.

        Raises:
            DataError: If an edge is missing and single-side generation is not
                allowed, or no edge is present at all.
        """
        synthesized: str | None = None
        if not grids.get("left") or not grids.get("right"):
            if not self.allow_single_side:
                raise DataError(
                    "Spline sampling requires averaged left and right grids.",
                    role="left" if not grids.get("left") else "right",
                )
            grids, synthesized = clone_missing_side(grids, self.default_track_width_m)
            _logger.info(
                "Synthesised %s edge at %.1f m offset", synthesized, self.default_track_width_m
            )

        left = [p.as_pair() for p in grids["left"]]
        right = [p.as_pair() for p in grids["right"]]
        center_grid = grids.get("center")
        if center_grid:
            center = [p.as_pair() for p in center_grid]
        else:
            center = [
                ((lx + rx) / 2.0, (ly + ry) / 2.0)
                for (lx, ly), (rx, ry) in zip(left, right)
            ]

        inside = determine_inside_edges(
            center, left, right, spacing_m=self.spacing_m, hysteresis_m=self.hysteresis_m
        )
        apexes = detect_apex_indices(inside.points, self.spacing_m)

        left_anchors = self._anchors(left, apexes)
        right_anchors = self._anchors(right, apexes)
        center_anchors = self._anchors(center, apexes)

        _logger.info(
            "Anchors L/C/R = %d/%d/%d, %d apexes, %d inside flips",
            len(left_anchors), len(center_anchors), len(right_anchors),
            len(apexes), inside.flip_count,
        )

        return SplineSamples(
            left=sample_closed_bezier(left_anchors, sample_count, self.tension),
            right=sample_closed_bezier(right_anchors, sample_count, self.tension),
            centerline=sample_closed_bezier(center_anchors, sample_count, self.tension),
            inside=inside.points,
            inside_sides=inside.sides,
            apex_indices=apexes,
            left_control_count=len(left_anchors),
            right_control_count=len(right_anchors),
            center_control_count=len(center_anchors),
            inside_flip_count=inside.flip_count,
            synthesized_side=synthesized,
            left_grid=left,
            right_grid=right,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _anchors(self, points: list[Point], apexes: list[int]) -> list[Point]:
        return build_anchor_budget(
            points,
            target=self.point_target,
            bias_indices=apexes,
            spacing_m=self.spacing_m,
            straight_spacing_m=self.straight_spacing_m,
        )


def build_center_spline_samples(
    grids: dict[str, list[GridPoint] | None],
    sample_count: int,
    **options,
) -> SplineSamples:
    """Shortcut for ``SplineBuilder(**options).build(grids, sample_count)``."""
    return SplineBuilder(**options).build(grids, sample_count)
