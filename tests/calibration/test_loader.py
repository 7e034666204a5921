"""Tests for the calibration directory loader."""

from __future__ import annotations

import pytest

from trackmap.calibration.loader import CalibrationLoader, normalize_track_id
from trackmap.errors import DataError

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------

def make_lap_csv(track: str | None = "Test Circuit", n: int = 8, offset: float = 0.0) -> str:
    lines = []
    if track:
        lines += [f"TrackName,{track}", "CarName,Test Car", ""]
    lines.append("LapDistance [m],X [m],Y [m]")
    lines += [f"{i * 10.0},{i * 10.0},{offset}" for i in range(n)]
    return "\n".join(lines) + "\n"


@pytest.fixture
def calibration_dir(tmp_path):
    folder = tmp_path / "test_circuit"
    folder.mkdir()
    (folder / "lap_left.csv").write_text(make_lap_csv(offset=5.0))
    (folder / "lap_right.csv").write_text(make_lap_csv(offset=-5.0))
    (folder / "lap_center.csv").write_text(make_lap_csv(offset=0.0))
    (folder / "lap_left2.csv").write_text(make_lap_csv(offset=5.5))
    (folder / "notes.txt").write_text("not a lap")
    return folder


# ---------------------------------------------------------------------------
# normalize_track_id
# ---------------------------------------------------------------------------

class TestNormalizeTrackId:
    def test_lowercases_and_joins_words(self):
        assert normalize_track_id("Algarve International Circuit") == "algarve_international_circuit"

    def test_collapses_punctuation_and_trims(self):
        assert normalize_track_id("  Spa-Francorchamps (GP)!! ") == "spa_francorchamps_gp"


# ---------------------------------------------------------------------------
# list_files
# ---------------------------------------------------------------------------

class TestListFiles:
    def test_sorted_csv_names_only(self, calibration_dir):
        assert CalibrationLoader.list_files(calibration_dir) == [
            "lap_center.csv",
            "lap_left.csv",
            "lap_left2.csv",
            "lap_right.csv",
        ]

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CalibrationLoader.list_files(tmp_path / "nope")


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------

class TestLoad:
    def test_laps_tagged_with_roles(self, calibration_dir):
        result = CalibrationLoader().load(
            calibration_dir,
            {"left": "lap_left.csv", "center": "lap_center.csv", "right": "lap_right.csv"},
        )
        assert [lap.role for lap in result.laps] == ["left", "center", "right"]
        assert result.laps[0].filename == "lap_left.csv"
        assert result.laps[0].samples[0].y == 5.0
        assert result.laps[2].metadata["car"] == "Test Car"

    def test_track_identity_from_metadata(self, calibration_dir):
        result = CalibrationLoader().load(
            calibration_dir, {"left": "lap_left.csv", "right": "lap_right.csv"}
        )
        assert result.track_name == "Test Circuit"
        assert result.track_id == "test_circuit"

    def test_track_name_falls_back_to_directory(self, tmp_path):
        folder = tmp_path / "Nordschleife Short"
        folder.mkdir()
        (folder / "l.csv").write_text(make_lap_csv(track=None))
        (folder / "r.csv").write_text(make_lap_csv(track=None))
        result = CalibrationLoader().load(folder, {"left": "l.csv", "right": "r.csv"})
        assert result.track_name == "Nordschleife Short"
        assert result.track_id == "nordschleife_short"

    def test_several_laps_per_role(self, calibration_dir):
        result = CalibrationLoader().load(
            calibration_dir,
            {"left": ["lap_left.csv", "lap_left2.csv"], "right": "lap_right.csv"},
        )
        assert [lap.filename for lap in result.laps] == [
            "lap_left.csv",
            "lap_left2.csv",
            "lap_right.csv",
        ]

    def test_missing_side_raises_when_both_required(self, calibration_dir):
        with pytest.raises(DataError) as excinfo:
            CalibrationLoader().load(calibration_dir, {"left": "lap_left.csv", "right": None})
        assert excinfo.value.role == "right"

    def test_single_side_allowed_when_not_required(self, calibration_dir):
        result = CalibrationLoader().load(
            calibration_dir, {"left": "lap_left.csv"}, require_both_sides=False
        )
        assert len(result.laps) == 1

    def test_center_only_is_rejected(self, calibration_dir):
        with pytest.raises(DataError):
            CalibrationLoader().load(
                calibration_dir, {"center": "lap_center.csv"}, require_both_sides=False
            )

    def test_missing_file_raises(self, calibration_dir):
        with pytest.raises(FileNotFoundError):
            CalibrationLoader().load(
                calibration_dir, {"left": "ghost.csv", "right": "lap_right.csv"}
            )
