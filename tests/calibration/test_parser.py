"""Tests for the calibration lap CSV parser."""

from __future__ import annotations

import pytest

from trackmap.calibration.parser import LapFileParser, parse_lap_file
from trackmap.errors import DataError

# ---------------------------------------------------------------------------
# Test data
# ---------------------------------------------------------------------------

LEGACY_FILE = """Player, 1, Jane Doe
Game,Track,Car,LapTime [s],S1,S2
Game,Silverstone,LMH Prototype,95.432,35.123,60.309
TrackID,TrackLen [m]
TrackID,5900
LapDistance [m],LapTime [s],ThrottlePercentage [%],BrakePercentage [%],Speed [km/h],X [m],Y [m]
0,0,0,100,40,0,0
50,2.5,100,0,180,20,5
100,4.1,100,0,210,45,12
150,5.6,80,0,220,70,20
"""

MVP_FILE = """Format,LMUTelemetry v2
Version,1
Player,Dean Davids
TrackName,Algarve International Circuit
CarName,Toyota GR010
SessionUTC,2025-11-18T13:52:51Z
LapTime [s],123.456
TrackLen [m],4689.0

LapDistance [m],LapTime [s],ThrottlePercentage [%],BrakePercentage [%],Speed [km/h],X [m],Y [m]
0,0,0,0,0,0,0
50,2.5,100,0,180,20,5
100,4.1,100,0,210,45,12
150,5.6,80,0,220,70,20
"""


def make_xyz_file(rows: list[tuple], delimiter: str = ",") -> str:
    header = delimiter.join(["LapDistance", "CarPosX", "CarPosY", "CarPosZ"])
    body = [delimiter.join(str(v) for v in row) for row in rows]
    return "\n".join([header, *body]) + "\n"


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

class TestMetadata:
    def test_legacy_table_header(self):
        lap = parse_lap_file(LEGACY_FILE, "sample.csv")
        assert lap.metadata["track"] == "Silverstone"
        assert lap.metadata["car"] == "LMH Prototype"
        assert lap.metadata["driver"] == "Jane Doe"
        assert lap.metadata["lap_length"] == 5900
        assert lap.metadata["lap_time"] == pytest.approx(95.432)

    def test_key_value_header(self):
        lap = parse_lap_file(MVP_FILE, "mvp.csv")
        assert lap.metadata["track"] == "Algarve International Circuit"
        assert lap.metadata["car"] == "Toyota GR010"
        assert lap.metadata["driver"] == "Dean Davids"
        assert lap.metadata["lap_time"] == pytest.approx(123.456)
        assert lap.metadata["lap_length"] == 4689

    def test_no_metadata_block(self):
        text = make_xyz_file([(d, d, 0, d * 2) for d in range(5)])
        assert parse_lap_file(text).metadata == {}


# ---------------------------------------------------------------------------
# Samples
# ---------------------------------------------------------------------------

class TestSamples:
    def test_samples_read_in_order(self):
        lap = parse_lap_file(LEGACY_FILE, "sample.csv")
        assert len(lap.samples) == 4
        assert lap.samples[1].distance == 50
        assert lap.samples[1].x == 20
        assert lap.samples[1].y == 5
        assert lap.samples[1].z is None

    def test_filename_is_kept(self):
        assert parse_lap_file(MVP_FILE, "mvp.csv").filename == "mvp.csv"

    def test_pos_suffix_columns_and_z_ground_plane(self):
        lap = parse_lap_file(make_xyz_file([(d, d, 99, -d) for d in range(6)]))
        assert len(lap.samples) == 6
        # z is the ground-plane axis when recorded
        assert lap.samples[3].planar_y == -3

    def test_semicolon_delimiter(self):
        text = make_xyz_file([(d, d, 0, d) for d in range(5)], delimiter=";")
        assert len(parse_lap_file(text).samples) == 5

    def test_rows_without_finite_coordinates_are_skipped(self):
        text = make_xyz_file([
            (0, 0, 0, 0),
            (1, "nan", 0, 1),
            (2, 2, 0, 2),
            ("", 3, 0, 3),
            (4, 4, 0, 4),
            (5, 5, 0, 5),
            (6, 6, 0, 6),
        ])
        lap = LapFileParser().parse(text)
        assert [s.distance for s in lap.samples] == [0, 2, 4, 5, 6]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestParseErrors:
    def test_missing_lapdistance_header(self):
        with pytest.raises(DataError, match="LapDistance"):
            parse_lap_file("a,b,c\n1,2,3\n", "broken.csv")

    def test_missing_coordinate_columns(self):
        text = "LapDistance [m],Speed [km/h]\n0,10\n1,10\n2,10\n3,10\n"
        with pytest.raises(DataError, match="required columns"):
            parse_lap_file(text)

    def test_too_few_samples(self):
        text = make_xyz_file([(d, d, 0, d) for d in range(3)])
        with pytest.raises(DataError) as excinfo:
            parse_lap_file(text, "short.csv")
        assert excinfo.value.sample_count == 3
