"""Shared fixtures: synthetic calibration laps around a circular track."""

from __future__ import annotations

import math

import pytest

from trackmap.calibration.models import CalibrationLap, Sample

LAP_POINTS = 360
LEFT_RADIUS = 54.0
RIGHT_RADIUS = 46.0
TRACK_NAME = "Test Circuit"


def circle_samples(radius: float, n: int = LAP_POINTS) -> list[Sample]:
    """One clockwise lap (left of travel is outside the circle), one point per degree."""
    samples = []
    for k in range(n):
        theta = -2 * math.pi * k / n
        samples.append(Sample(
            distance=radius * 2 * math.pi * k / n,
            x=radius * math.cos(theta),
            y=radius * math.sin(theta),
        ))
    return samples


def circle_lap_csv(radius: float, n: int = LAP_POINTS, track: str = TRACK_NAME) -> str:
    lines = [f"TrackName,{track}", "CarName,Test Car", ""]
    lines.append("LapDistance [m],X [m],Y [m]")
    lines += [f"{s.distance:.6f},{s.x:.6f},{s.y:.6f}" for s in circle_samples(radius, n)]
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_circle_lap():
    """Factory: ``make_circle_lap(role, radius)`` → CalibrationLap."""
    def _make(role: str, radius: float, n: int = LAP_POINTS) -> CalibrationLap:
        return CalibrationLap(
            role=role,
            samples=circle_samples(radius, n),
            filename=f"{role}.csv",
            metadata={"track": TRACK_NAME},
        )
    return _make


@pytest.fixture
def circle_laps(make_circle_lap):
    """A left lap on the outer circle and a right lap on the inner one."""
    return [make_circle_lap("left", LEFT_RADIUS), make_circle_lap("right", RIGHT_RADIUS)]


@pytest.fixture
def circle_csv_dir(tmp_path):
    """Directory holding ``left.csv`` and ``right.csv`` for the circular track."""
    folder = tmp_path / "test_circuit"
    folder.mkdir()
    (folder / "left.csv").write_text(circle_lap_csv(LEFT_RADIUS), encoding="utf-8")
    (folder / "right.csv").write_text(circle_lap_csv(RIGHT_RADIUS), encoding="utf-8")
    return folder
