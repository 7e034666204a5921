"""TrackMapGenerator: one generation run from calibration laps to a TrackMap.

Stages:
  1. resample laps onto a shared progress grid (averaged per role)
  2. fit closed splines through budgeted anchors of each edge
  3. validate the spline centerline
  4. smooth the centerline
  5. tangents / normals / signed angles
  6. raw half-widths where each edge grid crosses the centerline normal
  7. target width and constant-width envelope
  8. outlier report (diagnostic only)
  9. hard clamp into [min, max] half-width
 10. Savitzky–Golay smoothing
 11. slope clamp
 12. guardrail against the recorded laps
 13. edge polylines + validation
 14. assemble the TrackMap
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from trackmap.calibration.loader import normalize_track_id
from trackmap.calibration.models import CalibrationLap, ResampleResult
from trackmap.calibration.resampler import Resampler
from trackmap.config import GeneratorConfig
from trackmap.errors import DataError
from trackmap.export.exporter import create_track_map
from trackmap.geometry.sections import normal_crossings
from trackmap.geometry.vectors import Point, compute_geometry
from trackmap.spline.builder import SplineBuilder, SplineSamples
from trackmap.track.centerline import smooth_centerline, validate_centerline
from trackmap.track.edges import generate_edges, validate_edges
from trackmap.track.models import CenterlineValidation, EdgeValidation, TrackMap
from trackmap.width.constraints import ConstraintResult, enforce_width_constraints
from trackmap.width.estimator import (
    OutlierReport,
    build_constant_width_envelope,
    calculate_widths,
    clamp_width_deltas,
    clamp_widths,
    compute_target_width,
    detect_width_outliers,
    savitzky_golay_width_smooth,
)
from trackmap.width.smoothing import SavitzkyGolayKernelCache

_logger = logging.getLogger(__name__)

DEFAULT_TRACK_NAME = "Unknown Track"

STAGES: tuple[str, ...] = (
    "resample",
    "spline",
    "validate",
    "smooth",
    "geometry",
    "widths",
    "edges",
)
"""Stage names passed to the ``on_stage`` callback, in order."""


@dataclass
class GenerationResult:
    """Everything produced by :meth:`TrackMapGenerator.generate`."""

    track_map: TrackMap
    spline: SplineSamples
    outliers: OutlierReport
    centerline_validation: CenterlineValidation
    edge_validation: EdgeValidation
    resample: ResampleResult
    guardrail: ConstraintResult


class TrackMapGenerator:
    """Turn role-tagged calibration laps into a :class:`TrackMap`.

    Args:
        config: Tuning parameters; defaults to :class:`GeneratorConfig()`.
        kernel_cache: Savitzky–Golay kernel cache shared by every run of this
            generator.  A private cache is created when omitted.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        kernel_cache: SavitzkyGolayKernelCache | None = None,
    ) -> None:
        self.config = config or GeneratorConfig()
        self.kernel_cache = kernel_cache if kernel_cache is not None else SavitzkyGolayKernelCache()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(
        self,
        laps: list[CalibrationLap],
        track_id: str | None = None,
        track_name: str | None = None,
        on_stage: Callable[[str], None] | None = None,
    ) -> GenerationResult:
        """Run every stage over *laps*.

        Args:
            laps: Calibration laps; at least one left or right lap.
            track_id: Identifier for the export.  Derived from *track_name*
                when omitted.
            track_name: Display name.  Taken from the lap header metadata, or
                ``"Unknown Track"``, when omitted.
            on_stage: Called with each name in :data:`STAGES` as the stage
                starts.

        Raises:
            DataError: If the laps cannot produce a closed track.
        """
        if not laps:
            raise DataError("No calibration laps supplied.")
        cfg = self.config
        notify = on_stage or (lambda _stage: None)

        name = track_name or self._track_name_from_laps(laps)
        tid = track_id or normalize_track_id(name)
        _logger.info("Generating track map %s from %d laps", tid, len(laps))

        # ------------------------------------------------------------------
        # Step 1: Resample
        # ------------------------------------------------------------------
        notify("resample")
        resampled = Resampler(
            sample_count=cfg.sample_count,
            spacing_m=cfg.spacing_m,
            align_heading=cfg.align_heading,
        ).resample(laps)
        spacing = resampled.spacing_m

        # ------------------------------------------------------------------
        # Step 2: Spline samples
        # ------------------------------------------------------------------
        notify("spline")
        spline = SplineBuilder(
            point_target=cfg.point_target,
            tension=cfg.tension,
            spacing_m=spacing,
            straight_spacing_m=cfg.straight_spacing_m,
            hysteresis_m=cfg.hysteresis_m,
            allow_single_side=cfg.allow_single_side,
            default_track_width_m=cfg.default_track_width_m,
        ).build(resampled.grids, resampled.sample_count)

        # ------------------------------------------------------------------
        # Step 3-4: Validate and smooth the centerline
        # ------------------------------------------------------------------
        notify("validate")
        centerline_validation = validate_centerline(spline.centerline)
        if centerline_validation.errors:
            raise DataError("; ".join(centerline_validation.errors))

        notify("smooth")
        centerline = smooth_centerline(spline.centerline, cfg.smoothing_window)

        # ------------------------------------------------------------------
        # Step 5: Geometry
        # ------------------------------------------------------------------
        notify("geometry")
        geometry = compute_geometry(centerline)

        # ------------------------------------------------------------------
        # Step 6-12: Widths
        # ------------------------------------------------------------------
        notify("widths")
        left_points = _section_points(centerline, geometry.normals, spline.left_grid, spline.left)
        right_points = _section_points(centerline, geometry.normals, spline.right_grid, spline.right)
        raw = calculate_widths(centerline, geometry.normals, left_points, right_points)
        target_width = compute_target_width(raw)
        envelope = build_constant_width_envelope(raw, geometry.signed_angles, target_width)
        _logger.info("Target width ~%.2f m", target_width)

        outliers = detect_width_outliers(
            envelope.profile,
            max_width_change=cfg.outlier_max_width_change_m,
            min_width=cfg.outlier_min_width_m,
            max_width=cfg.outlier_max_width_m,
        )
        if outliers.outliers:
            _logger.warning(
                "Found %d width outliers (first: point %d, %s)",
                len(outliers.outliers), outliers.outliers[0].index, outliers.outliers[0].reason,
            )

        clamped = clamp_widths(envelope.profile, cfg.min_half_width_m, cfg.max_half_width_m)
        smoothed = savitzky_golay_width_smooth(
            clamped,
            window=cfg.sg_window,
            order=cfg.sg_order,
            spacing=spacing,
            cache=self.kernel_cache,
        )
        limited = clamp_width_deltas(
            smoothed,
            spacing_m=spacing,
            max_delta_per_10m=cfg.max_delta_per_10m,
            sector_length_m=cfg.sector_length_m,
        )
        guardrail = enforce_width_constraints(
            centerline,
            geometry.normals,
            resampled.raw_grids,
            limited.profile,
            clamp_scale=cfg.clamp_scale,
            tolerance_m=cfg.guardrail_tolerance_m,
        )
        widths = guardrail.profile

        # ------------------------------------------------------------------
        # Step 13: Edges
        # ------------------------------------------------------------------
        notify("edges")
        left_edge, right_edge = generate_edges(
            centerline, geometry.normals, widths.left, widths.right
        )
        edge_validation = validate_edges(left_edge, right_edge)

        # ------------------------------------------------------------------
        # Step 14: Assemble
        # ------------------------------------------------------------------
        metadata = {
            **spline.metadata,
            "apex_anchor_count": len(spline.apex_indices),
            "target_width": envelope.target_width,
            "inside_left_count": envelope.inside_left_count,
            "inside_right_count": envelope.inside_right_count,
            "raw_half_width_left": envelope.raw.left,
            "raw_half_width_right": envelope.raw.right,
            "enveloped_half_width_left": envelope.profile.left,
            "enveloped_half_width_right": envelope.profile.right,
            "guardrail_clamps": guardrail.stats(),
            "width_clamp_diagnostics": limited.diagnostics(),
            "outliers": outliers.summary(),
            "spacing_m": spacing,
            "track_length_m": resampled.track_length,
            "heading_offsets": dict(resampled.heading_offsets),
            "centerline_closure_m": centerline_validation.closure_distance,
            "config": cfg.to_dict(),
        }
        track_map = create_track_map(
            track_id=tid,
            track_name=name,
            centerline=centerline,
            half_width_left=widths.left,
            half_width_right=widths.right,
            left_edge=left_edge,
            right_edge=right_edge,
            smoothing_window=cfg.smoothing_window,
            calibration_laps=self._calibration_files(laps),
            metadata=metadata,
        )
        _logger.info(
            "Track map %s: %d samples, avg width %.2f m",
            tid, track_map.sample_count, track_map.average_width(),
        )
        return GenerationResult(
            track_map=track_map,
            spline=spline,
            outliers=outliers,
            centerline_validation=centerline_validation,
            edge_validation=edge_validation,
            resample=resampled,
            guardrail=guardrail,
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _track_name_from_laps(laps: list[CalibrationLap]) -> str:
        for lap in laps:
            name = lap.metadata.get("track")
            if name:
                return name
        return DEFAULT_TRACK_NAME

    @staticmethod
    def _calibration_files(laps: list[CalibrationLap]) -> dict[str, str | None]:
        files: dict[str, str | None] = {"left": None, "center": None, "right": None}
        for lap in laps:
            if lap.filename and files[lap.role] is None:
                files[lap.role] = lap.filename
        return files


def _section_points(
    centerline: list[Point],
    normals: list[Point],
    edge_grid: list[Point],
    fallback: list[Point],
) -> list[Point]:
    # spline sample i sits at a different progress on each curve; measure on the normal instead
    crossings = normal_crossings(centerline, normals, edge_grid)
    return [point if point is not None else fallback[i] for i, point in enumerate(crossings)]
