"""Calibration data structures."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

ROLES: tuple[str, ...] = ("left", "center", "right")
"""Physical line a calibration lap was driven along."""


@dataclass(frozen=True)
class Sample:
    """A raw calibration-trace point as recorded by the simulator."""

    distance: float
    """Lap distance in metres (cumulative along the driven path)."""

    x: float
    """World X coordinate in metres."""

    y: float | None = None
    """World Y coordinate.  Vertical in the simulator's frame when ``z`` is set."""

    z: float | None = None
    """World Z coordinate.  The ground-plane axis when present."""

    @property
    def planar_y(self) -> float | None:
        """Second ground-plane coordinate: ``z`` when recorded, else ``y``."""
        return self.z if self.z is not None else self.y

    def is_spatial(self) -> bool:
        """Return True if both ground-plane coordinates are finite numbers."""
        py = self.planar_y
        return (
            self.x is not None
            and py is not None
            and math.isfinite(self.x)
            and math.isfinite(py)
        )


@dataclass
class CalibrationLap:
    """One parsed calibration lap tagged with its role."""

    role: str
    """``'left'``, ``'center'`` or ``'right'``."""

    samples: list[Sample]

    filename: str = ""

    metadata: dict = field(default_factory=dict)
    """Header values from the lap file (track, car, driver, lap_time, lap_length)."""

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown role {self.role!r}; expected one of {ROLES}")


@dataclass(frozen=True)
class GridPoint:
    """A resampled point on the shared progress grid."""

    progress: float
    """Normalised lap position [0.0, 1.0]."""

    x: float
    y: float

    def as_pair(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass
class ResampleResult:
    """Output of :meth:`Resampler.resample`."""

    grids: dict[str, list[GridPoint] | None]
    """Averaged grid per role; ``None`` for roles with no lap."""

    raw_grids: dict[str, list[list[GridPoint]]]
    """Heading-aligned, un-averaged grids per role (one per lap)."""

    track_length: float | None
    """Mean recorded lap length in metres, if measurable."""

    sample_count: int
    spacing_m: float
    """Approximate metres between consecutive grid points."""

    heading_offsets: dict[str, float] = field(default_factory=dict)
    """Rotation (radians) removed from each lap, keyed by filename or role."""
