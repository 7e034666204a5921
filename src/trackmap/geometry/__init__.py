"""Closed-curve geometry primitives."""

from trackmap.geometry.circular import circular_distance, circular_neighbors, wrap_index
from trackmap.geometry.sections import normal_crossings
from trackmap.geometry.vectors import (
    CenterlineGeometry,
    Point,
    compute_geometry,
    compute_normals,
    compute_signed_angles,
    compute_tangents,
)

__all__ = [
    "CenterlineGeometry",
    "Point",
    "circular_distance",
    "circular_neighbors",
    "compute_geometry",
    "compute_normals",
    "compute_signed_angles",
    "compute_tangents",
    "normal_crossings",
    "wrap_index",
]
