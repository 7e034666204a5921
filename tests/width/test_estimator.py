"""Tests for half-width measurement and conditioning."""

from __future__ import annotations

import pytest

from trackmap.errors import DataError
from trackmap.width.estimator import (
    WidthProfile,
    build_constant_width_envelope,
    calculate_widths,
    clamp_width_deltas,
    clamp_widths,
    compute_target_width,
    detect_width_outliers,
    savitzky_golay_width_smooth,
    symmetrise_widths,
)

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------

def make_profile(left: float, right: float, n: int = 10) -> WidthProfile:
    return WidthProfile(left=[left] * n, right=[right] * n)


def make_straight(n: int = 5):
    """Centerline along +x with left-pointing normals (0, 1)."""
    centerline = [(float(i), 0.0) for i in range(n)]
    normals = [(0.0, 1.0)] * n
    return centerline, normals


# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------

class TestCalculateWidths:
    def test_projection_onto_normal(self):
        centerline, normals = make_straight()
        left = [(float(i), 3.0) for i in range(5)]
        right = [(float(i), -4.5) for i in range(5)]
        profile = calculate_widths(centerline, normals, left, right)
        assert profile.left == pytest.approx([3.0] * 5)
        assert profile.right == pytest.approx([4.5] * 5)

    def test_edge_on_wrong_side_is_negative(self):
        centerline, normals = make_straight(1)
        profile = calculate_widths(centerline, normals, [(0.0, -1.0)], [(0.0, 2.0)])
        assert profile.left == [-1.0]
        assert profile.right == [-2.0]

    def test_length_mismatch_raises(self):
        centerline, normals = make_straight()
        with pytest.raises(DataError, match="mismatch"):
            calculate_widths(centerline, normals, centerline[:4], centerline)


class TestComputeTargetWidth:
    def test_median_of_totals(self):
        profile = WidthProfile(left=[3.0, 4.0, 5.0, 50.0], right=[3.0, 4.0, 5.0, 50.0])
        assert compute_target_width(profile) == pytest.approx(9.0)

    def test_non_positive_and_non_finite_ignored(self):
        profile = WidthProfile(left=[-5.0, float("nan"), 4.0], right=[1.0, 1.0, 4.0])
        assert compute_target_width(profile) == pytest.approx(8.0)

    def test_nothing_usable_returns_zero(self):
        assert compute_target_width(make_profile(-1.0, -1.0)) == 0.0


# ---------------------------------------------------------------------------
# Constant-width envelope
# ---------------------------------------------------------------------------

class TestConstantWidthEnvelope:
    def test_left_turn_keeps_left_inside(self):
        env = build_constant_width_envelope(make_profile(3.0, 5.0, 4), [0.1] * 4, 8.0)
        assert env.profile.left == pytest.approx([3.0] * 4)
        assert env.profile.right == pytest.approx([5.0] * 4)
        assert env.inside_left_count == 4
        assert env.inside_right_count == 0

    def test_right_turn_keeps_right_inside(self):
        env = build_constant_width_envelope(make_profile(6.0, 2.0, 3), [-0.1] * 3, 8.0)
        assert env.profile.right == pytest.approx([2.0] * 3)
        assert env.profile.left == pytest.approx([6.0] * 3)
        assert env.inside_right_count == 3

    def test_dead_band_keeps_previous_side(self):
        env = build_constant_width_envelope(make_profile(3.0, 5.0, 3), [-0.1, 0.0005, 0.1], 8.0)
        assert env.inside_right_count == 2
        assert env.inside_left_count == 1

    def test_outside_never_below_fraction_of_inside(self):
        env = build_constant_width_envelope(make_profile(10.0, 1.0, 1), [0.1], 8.0)
        assert env.profile.left == [10.0]
        assert env.profile.right == pytest.approx([4.0])

    def test_outside_never_below_minimum_half(self):
        env = build_constant_width_envelope(make_profile(1.0, 1.0, 1), [0.1], 1.0, min_width=1.0)
        assert env.profile.right == pytest.approx([0.75])

    def test_zero_target_falls_back_to_six_metres(self):
        env = build_constant_width_envelope(make_profile(1.0, 1.0, 2), None, 0.0)
        assert env.target_width == 6.0
        assert env.profile.left == [1.0, 1.0]
        assert env.profile.right == pytest.approx([5.0, 5.0])

    def test_negative_inside_treated_as_zero(self):
        env = build_constant_width_envelope(make_profile(-2.0, 3.0, 1), [0.1], 8.0)
        assert env.profile.left == [0.0]
        assert env.profile.right == pytest.approx([8.0])

    def test_raw_widths_preserved(self):
        profile = make_profile(3.0, 5.0, 3)
        env = build_constant_width_envelope(profile, [0.1] * 3, 10.0)
        assert env.raw.left == profile.left
        assert env.raw.right == profile.right
        assert env.raw.left is not profile.left


class TestSymmetriseWidths:
    def test_narrower_side_wins(self):
        sym = symmetrise_widths(WidthProfile(left=[3.0, 6.0, -1.0], right=[5.0, 2.0, 4.0]))
        assert sym.left == [3.0, 2.0, 0.0]
        assert sym.right == sym.left


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

class TestDetectWidthOutliers:
    def test_clean_profile_has_no_outliers(self):
        report = detect_width_outliers(make_profile(5.0, 5.0))
        assert report.outliers == []
        assert report.summary()["avg_total"] == 10.0

    def test_negative_widths_flagged(self):
        profile = make_profile(5.0, 5.0)
        profile.left[3] = -0.5
        report = detect_width_outliers(profile)
        assert 3 in report.indices
        assert any("Negative left width" in o.reason for o in report.outliers)

    def test_narrow_and_wide_totals_flagged(self):
        profile = WidthProfile(left=[1.0, 5.0, 11.0], right=[1.0, 5.0, 11.0])
        reasons = [o.reason for o in detect_width_outliers(profile, max_width_change=100).outliers]
        assert any("too narrow" in r for r in reasons)
        assert any("too wide" in r for r in reasons)

    def test_jumps_flagged_without_wrap(self):
        profile = WidthProfile(left=[4.0, 4.0, 12.0, 4.0], right=[4.0] * 4)
        report = detect_width_outliers(profile, max_width=100)
        assert report.indices == [2, 3]
        assert all("Large left width change" in o.reason for o in report.outliers)

    def test_statistics(self):
        report = detect_width_outliers(WidthProfile(left=[2.0, 4.0], right=[5.0, 7.0]))
        assert report.avg_left == pytest.approx(3.0)
        assert report.avg_right == pytest.approx(6.0)
        assert (report.min_left, report.max_left) == (2.0, 4.0)
        assert (report.min_right, report.max_right) == (5.0, 7.0)

    def test_profile_not_modified(self):
        profile = WidthProfile(left=[-1.0, 30.0], right=[2.0, 2.0])
        detect_width_outliers(profile)
        assert profile.left == [-1.0, 30.0]

    def test_empty_profile_raises(self):
        with pytest.raises(DataError):
            detect_width_outliers(WidthProfile(left=[], right=[]))


# ---------------------------------------------------------------------------
# Conditioning
# ---------------------------------------------------------------------------

class TestClampWidths:
    def test_bounds(self):
        clamped = clamp_widths(WidthProfile(left=[0.5, 5.0, 40.0], right=[-3.0, 2.0, 15.5]))
        assert clamped.left == [2.0, 5.0, 15.0]
        assert clamped.right == [2.0, 2.0, 15.0]


class TestSavitzkyGolayWidthSmooth:
    def test_constant_profile_unchanged(self):
        smoothed = savitzky_golay_width_smooth(make_profile(4.0, 6.0, 30), spacing=0.5)
        assert smoothed.left == pytest.approx([4.0] * 30)
        assert smoothed.right == pytest.approx([6.0] * 30)


class TestClampWidthDeltas:
    @staticmethod
    def _step_profile() -> WidthProfile:
        left = [4.0 if i < 100 else 6.0 for i in range(200)]
        left[150] = 9.0  # spike
        return WidthProfile(left=left, right=[5.0] * 200)

    def test_neighbour_changes_within_limit_including_wrap(self):
        result = clamp_width_deltas(self._step_profile(), spacing_m=1.0, max_delta_per_10m=0.25)
        limit = result.per_sample_limit
        assert limit == pytest.approx(0.025)
        values = result.profile.left
        for i in range(len(values)):
            assert abs(values[i] - values[i - 1]) <= limit + 1e-6

    def test_counts_and_untouched_side(self):
        result = clamp_width_deltas(self._step_profile())
        assert result.left_clamped > 0
        assert result.right_clamped == 0
        assert result.profile.right == [5.0] * 200

    def test_values_stay_between_extremes(self):
        result = clamp_width_deltas(self._step_profile())
        assert min(result.profile.left) >= 4.0 - 1e-9
        assert max(result.profile.left) <= 9.0

    def test_sector_summary(self):
        result = clamp_width_deltas(self._step_profile(), spacing_m=1.0, sector_length_m=50.0)
        assert [s.samples for s in result.left_sectors] == [50, 50, 50, 50]
        for sector in result.left_sectors:
            assert sector.ratio == pytest.approx(sector.clamped / sector.samples)
        assert sum(s.clamped for s in result.left_sectors) == result.left_clamped
        diag = result.diagnostics()
        assert diag["left_clamped"] == result.left_clamped
        assert len(diag["right_sectors"]) == 4

    def test_input_not_modified(self):
        profile = self._step_profile()
        clamp_width_deltas(profile)
        assert profile.left[150] == 9.0

    @pytest.mark.parametrize("n", [3, 4, 10, 11, 200, 1001])
    @pytest.mark.parametrize("spacing", [0.5, 1.0, 7.3])
    def test_alternating_extremes_converge(self, n, spacing):
        left = [0.0 if i % 2 == 0 else 100.0 for i in range(n)]
        result = clamp_width_deltas(WidthProfile(left=left, right=[5.0] * n), spacing_m=spacing)
        bound = result.per_sample_limit + 1e-9
        values = result.profile.left
        for i in range(n):
            # i == 0 checks the wrap pair (last, first)
            assert abs(values[i] - values[i - 1]) <= bound
        assert result.left_clamped > 0
