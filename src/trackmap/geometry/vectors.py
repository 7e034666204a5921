"""Tangents, normals and signed turning angles of closed polylines."""

from __future__ import annotations

import math
from dataclasses import dataclass

from trackmap.errors import DataError
from trackmap.geometry.circular import circular_neighbors

Point = tuple[float, float]

_EPS = 1e-12


@dataclass
class CenterlineGeometry:
    """Per-sample differential geometry of a closed polyline."""

    tangents: list[Point]
    """Unit tangent in travel direction."""

    normals: list[Point]
    """Unit normal, rotated +90° from the tangent (points to the left)."""

    signed_angles: list[float]
    """Turning angle in radians; positive = left turn."""


def compute_tangents(points: list[Point]) -> list[Point]:
    """Unit central-difference tangents, treating *points* as a loop.

    A zero-length difference (duplicate neighbours) reuses the previous
    tangent, or ``(1, 0)`` at the very start.
    """
    n = len(points)
    tangents: list[Point] = []
    last: Point = (1.0, 0.0)
    for i in range(n):
        prev, nxt = circular_neighbors(i, n)
        dx = points[nxt][0] - points[prev][0]
        dy = points[nxt][1] - points[prev][1]
        length = math.hypot(dx, dy)
        if length > _EPS:
            last = (dx / length, dy / length)
        tangents.append(last)
    return tangents


def compute_normals(tangents: list[Point]) -> list[Point]:
    """Left-pointing normals ``(-ty, tx)``."""
    return [(-ty, tx) for tx, ty in tangents]


def signed_angle_at(prev: Point, curr: Point, nxt: Point) -> float:
    """Angle between edges ``prev→curr`` and ``curr→nxt`` via ``atan2(cross, dot)``."""
    v1x, v1y = curr[0] - prev[0], curr[1] - prev[1]
    v2x, v2y = nxt[0] - curr[0], nxt[1] - curr[1]
    cross = v1x * v2y - v1y * v2x
    dot = v1x * v2x + v1y * v2y
    return math.atan2(cross, dot)


def compute_signed_angles(points: list[Point]) -> list[float]:
    """Signed turning angle at every vertex of the closed polyline *points*."""
    n = len(points)
    angles: list[float] = []
    for i in range(n):
        prev, nxt = circular_neighbors(i, n)
        angles.append(signed_angle_at(points[prev], points[i], points[nxt]))
    return angles


def compute_geometry(points: list[Point]) -> CenterlineGeometry:
    """Tangents, normals and signed angles for a closed polyline.

    Raises:
        DataError: If fewer than 3 points are given.
    """
    if len(points) < 3:
        raise DataError(
            f"Geometry requires at least 3 points, got {len(points)}.",
            sample_count=len(points),
        )
    tangents = compute_tangents(points)
    return CenterlineGeometry(
        tangents=tangents,
        normals=compute_normals(tangents),
        signed_angles=compute_signed_angles(points),
    )
