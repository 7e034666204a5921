"""Where a closed polyline crosses each centerline normal.

Spline samples and grid points are spaced by parameter, not by position, so
index ``i`` of one curve does not lie on the cross-section at index ``i`` of
another.  :func:`normal_crossings` walks the other curve instead and returns
the point where it cuts the normal line through each centerline sample.
"""

from __future__ import annotations

import math

from trackmap.geometry.vectors import Point


def _along(p: Point, center: Point, tangent: Point) -> float:
    return (p[0] - center[0]) * tangent[0] + (p[1] - center[1]) * tangent[1]


def _nearest_index(polyline: list[Point], target: Point) -> int:
    best, best_d = 0, math.inf
    for j, (x, y) in enumerate(polyline):
        d = (x - target[0]) ** 2 + (y - target[1]) ** 2
        if d < best_d:
            best, best_d = j, d
    return best


def _crossing(
    polyline: list[Point], start: int, center: Point, tangent: Point
) -> tuple[Point, int] | None:
    m = len(polyline)
    j = start
    a = _along(polyline[j % m], center, tangent)
    if a == 0.0:
        return polyline[j % m], j % m

    step = 1 if a < 0 else -1
    for _ in range(m):
        b = _along(polyline[(j + step) % m], center, tangent)
        crossed = b >= 0.0 if step == 1 else b <= 0.0
        if crossed:
            p, q = polyline[j % m], polyline[(j + step) % m]
            w = a / (a - b)
            point = (p[0] + w * (q[0] - p[0]), p[1] + w * (q[1] - p[1]))
            return point, j % m
        j += step
        a = b
    return None


def normal_crossings(
    centerline: list[Point],
    normals: list[Point],
    polyline: list[Point],
) -> list[Point | None]:
    """Intersect *polyline* with the normal line at every centerline sample.

    The polyline is treated as a loop travelled in the same direction as the
    centerline.  The search for sample ``i`` starts from the segment found for
    sample ``i - 1`` (the nearest vertex for the first sample) and walks along
    the polyline until the along-tangent offset changes sign, then
    interpolates linearly inside that segment.

    Returns:
        One point per centerline sample; ``None`` where a full walk around the
        polyline finds no sign change.
    """
    if len(polyline) < 2 or not centerline:
        return [None] * len(centerline)

    crossings: list[Point | None] = []
    start = _nearest_index(polyline, centerline[0])
    for center, (nx, ny) in zip(centerline, normals):
        found = _crossing(polyline, start, center, (ny, -nx))
        if found is None:
            crossings.append(None)
            continue
        point, start = found
        crossings.append(point)
    return crossings
