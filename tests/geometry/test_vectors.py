"""Tests for circular indexing and closed-polyline differential geometry."""

from __future__ import annotations

import math

import pytest

from trackmap.errors import DataError
from trackmap.geometry.circular import circular_distance, circular_neighbors, wrap_index
from trackmap.geometry.vectors import (
    compute_geometry,
    compute_normals,
    compute_signed_angles,
    compute_tangents,
    signed_angle_at,
)


def make_circle(n: int = 72, radius: float = 10.0, clockwise: bool = False):
    sign = -1.0 if clockwise else 1.0
    return [
        (radius * math.cos(sign * 2 * math.pi * k / n), radius * math.sin(sign * 2 * math.pi * k / n))
        for k in range(n)
    ]


# ---------------------------------------------------------------------------
# Circular indexing
# ---------------------------------------------------------------------------

class TestCircularIndexing:
    def test_wrap_index(self):
        assert wrap_index(-1, 5) == 4
        assert wrap_index(5, 5) == 0
        assert wrap_index(12, 5) == 2

    def test_wrap_index_rejects_empty_loop(self):
        with pytest.raises(ValueError):
            wrap_index(0, 0)

    def test_neighbors_wrap_at_both_ends(self):
        assert circular_neighbors(0, 4) == (3, 1)
        assert circular_neighbors(3, 4) == (2, 0)

    def test_distance_takes_shorter_way_round(self):
        assert circular_distance(1, 9, 10) == 2
        assert circular_distance(2, 7, 10) == 5
        assert circular_distance(-1, 0, 10) == 1


# ---------------------------------------------------------------------------
# Tangents / normals / angles
# ---------------------------------------------------------------------------

class TestGeometry:
    def test_tangents_are_unit_length(self):
        for tx, ty in compute_tangents(make_circle()):
            assert math.hypot(tx, ty) == pytest.approx(1.0)

    def test_normals_point_left_of_travel(self):
        # On a counter-clockwise circle the left side is the centre.
        points = make_circle()
        normals = compute_normals(compute_tangents(points))
        for (x, y), (nx, ny) in zip(points, normals):
            assert nx * x + ny * y == pytest.approx(-10.0, rel=1e-3)

    def test_normal_is_tangent_rotated_ninety_degrees(self):
        assert compute_normals([(1.0, 0.0), (0.0, 1.0)]) == [(-0.0, 1.0), (-1.0, 0.0)]

    def test_degenerate_difference_reuses_previous_tangent(self):
        points = [(0.0, 0.0), (1.0, 0.0), (0.0, 0.0), (1.0, 0.0)]
        assert compute_tangents(points) == [(1.0, 0.0)] * 4

    def test_signed_angle_sign(self):
        assert signed_angle_at((0, 0), (1, 0), (1, 1)) == pytest.approx(math.pi / 2)
        assert signed_angle_at((0, 0), (1, 0), (1, -1)) == pytest.approx(-math.pi / 2)
        assert signed_angle_at((0, 0), (1, 0), (2, 0)) == 0.0

    def test_circle_turning_angles(self):
        ccw = compute_signed_angles(make_circle(n=72))
        cw = compute_signed_angles(make_circle(n=72, clockwise=True))
        assert all(a == pytest.approx(2 * math.pi / 72) for a in ccw)
        assert all(a == pytest.approx(-2 * math.pi / 72) for a in cw)
        assert sum(ccw) == pytest.approx(2 * math.pi)

    def test_compute_geometry_bundles_all_three(self):
        geometry = compute_geometry(make_circle(n=36))
        assert len(geometry.tangents) == len(geometry.normals) == len(geometry.signed_angles) == 36

    def test_compute_geometry_needs_three_points(self):
        with pytest.raises(DataError):
            compute_geometry([(0.0, 0.0), (1.0, 0.0)])
