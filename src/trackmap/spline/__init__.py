"""Closed-spline fitting of calibration edges."""

from trackmap.spline.anchors import build_anchor_budget, curvature_score, select_anchor_indices
from trackmap.spline.bezier import evaluate_bezier, sample_closed_bezier
from trackmap.spline.builder import (
    SplineBuilder,
    SplineSamples,
    build_center_spline_samples,
    clone_missing_side,
)
from trackmap.spline.inside import InsideEdges, detect_apex_indices, determine_inside_edges

__all__ = [
    "InsideEdges",
    "SplineBuilder",
    "SplineSamples",
    "build_anchor_budget",
    "build_center_spline_samples",
    "clone_missing_side",
    "curvature_score",
    "detect_apex_indices",
    "determine_inside_edges",
    "evaluate_bezier",
    "sample_closed_bezier",
    "select_anchor_indices",
]
