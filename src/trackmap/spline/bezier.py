"""Closed cubic Bézier sampling through anchor points."""

from __future__ import annotations

import math

from trackmap.errors import DataError
from trackmap.geometry.circular import circular_neighbors, wrap_index
from trackmap.geometry.vectors import Point

DEFAULT_TENSION = 0.5


def evaluate_bezier(p0: Point, c1: Point, c2: Point, p3: Point, t: float) -> Point:
    """Point at parameter *t* on the cubic defined by *p0*, *c1*, *c2*, *p3*."""
    it = 1.0 - t
    a = it * it * it
    b = 3.0 * it * it * t
    c = 3.0 * it * t * t
    d = t * t * t
    return (
        a * p0[0] + b * c1[0] + c * c2[0] + d * p3[0],
        a * p0[1] + b * c1[1] + c * c2[1] + d * p3[1],
    )


def anchor_tangents(points: list[Point], tension: float = DEFAULT_TENSION) -> list[Point]:
    """``(next - prev) * tension`` at every anchor, wrapping at the ends."""
    n = len(points)
    tangents: list[Point] = []
    for i in range(n):
        prev, nxt = circular_neighbors(i, n)
        tangents.append((
            (points[nxt][0] - points[prev][0]) * tension,
            (points[nxt][1] - points[prev][1]) * tension,
        ))
    return tangents


def sample_closed_bezier(
    points: list[Point],
    sample_count: int,
    tension: float = DEFAULT_TENSION,
) -> list[Point]:
    """Sample a closed curve through *points* at *sample_count* uniform steps.

    Steps are spread over all segments combined: sample ``i`` sits at
    ``(i / sample_count) * n`` along the anchor sequence, the integer part
    selecting the segment and the fractional part its local parameter.

    Raises:
        DataError: If fewer than 3 anchor points are given.
    """
    n = len(points)
    if n < 3:
        raise DataError(
            f"Spline sampling requires at least 3 points per lap, got {n}.",
            sample_count=n,
        )
    tangents = anchor_tangents(points, tension)

    samples: list[Point] = []
    for i in range(sample_count):
        position = (i / sample_count) * n
        base = math.floor(position)
        seg = wrap_index(base, n)
        local_t = position - base
        nxt = wrap_index(seg + 1, n)
        p0, p3 = points[seg], points[nxt]
        t_out, t_in = tangents[seg], tangents[nxt]
        c1 = (p0[0] + t_out[0] / 3.0, p0[1] + t_out[1] / 3.0)
        c2 = (p3[0] - t_in[0] / 3.0, p3[1] - t_in[1] / 3.0)
        samples.append(evaluate_bezier(p0, c1, c2, p3, local_t))
    return samples
