"""Calibration lap input: parsing, loading and resampling.

Public API
----------
Sample, CalibrationLap, GridPoint, ResampleResult - data models
LapFileParser       - lap CSV text → samples + header metadata
CalibrationLoader   - directory + role map → CalibrationSet
Resampler           - laps → one averaged progress grid per role
"""

from trackmap.calibration.loader import CalibrationLoader, CalibrationSet, normalize_track_id
from trackmap.calibration.models import ROLES, CalibrationLap, GridPoint, ResampleResult, Sample
from trackmap.calibration.parser import LapFileParser, ParsedLapFile, parse_lap_file
from trackmap.calibration.resampler import (
    Resampler,
    normalize_to_progress,
    resample_on_grid,
)

__all__ = [
    "ROLES",
    "CalibrationLap",
    "CalibrationLoader",
    "CalibrationSet",
    "GridPoint",
    "LapFileParser",
    "ParsedLapFile",
    "ResampleResult",
    "Resampler",
    "Sample",
    "normalize_to_progress",
    "normalize_track_id",
    "parse_lap_file",
    "resample_on_grid",
]
