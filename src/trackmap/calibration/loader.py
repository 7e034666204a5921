"""Load role-tagged calibration laps from a directory of lap CSV files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from trackmap.calibration.models import ROLES, CalibrationLap
from trackmap.calibration.parser import LapFileParser
from trackmap.errors import DataError

_logger = logging.getLogger(__name__)


def normalize_track_id(track_name: str) -> str:
    """``"Algarve International Circuit"`` → ``"algarve_international_circuit"``."""
    return re.sub(r"[^a-z0-9]+", "_", track_name.lower()).strip("_")


@dataclass
class CalibrationSet:
    """All calibration laps of one track, ready for resampling."""

    laps: list[CalibrationLap]
    track_id: str
    track_name: str


class CalibrationLoader:
    """Read calibration laps from *directory* according to a role → filename map.

    Args:
        parser: Lap file parser; injectable for tests.
    """

    def __init__(self, parser: LapFileParser | None = None) -> None:
        self._parser = parser or LapFileParser()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def list_files(directory: str | Path) -> list[str]:
        """Return the sorted CSV filenames in *directory*.

        Raises:
            FileNotFoundError: If *directory* does not exist.
        """
        path = Path(directory)
        if not path.is_dir():
            raise FileNotFoundError(f"Calibration directory not found: {path}")
        return sorted(p.name for p in path.iterdir() if p.suffix.lower() == ".csv")

    def load(
        self,
        directory: str | Path,
        lap_map: dict[str, str | list[str] | None],
        require_both_sides: bool = True,
    ) -> CalibrationSet:
        """Parse every file named in *lap_map* and tag it with its role.

        Args:
            directory: Folder holding the lap CSVs.
            lap_map: ``{"left": "lap5.csv", "right": ["lap7.csv", "lap8.csv"]}``;
                a role may map to one filename, several, or ``None``.
            require_both_sides: Demand at least one left *and* one right lap.

        Raises:
            DataError: If a required side is missing or a file fails to parse.
            FileNotFoundError: If a named file does not exist.
        """
        base = Path(directory)
        laps: list[CalibrationLap] = []

        for role in ROLES:
            names = lap_map.get(role)
            if not names:
                continue
            if isinstance(names, str):
                names = [names]
            for name in names:
                text = (base / name).read_text(encoding="utf-8", errors="replace")
                parsed = self._parser.parse(text, name)
                laps.append(CalibrationLap(
                    role=role,
                    samples=parsed.samples,
                    filename=name,
                    metadata=parsed.metadata,
                ))
                _logger.info("Loaded %s lap %s (%d samples)", role, name, len(parsed.samples))

        roles = {lap.role for lap in laps}
        if require_both_sides and not {"left", "right"} <= roles:
            missing = sorted({"left", "right"} - roles)
            raise DataError(
                f"Calibration requires both left and right laps; missing: {', '.join(missing)}",
                role=missing[0],
            )
        if not roles & {"left", "right"}:
            raise DataError("At least one left or right calibration lap is required.")

        track_name = next(
            (lap.metadata["track"] for lap in laps if lap.metadata.get("track")),
            base.name,
        )
        return CalibrationSet(
            laps=laps,
            track_id=normalize_track_id(track_name),
            track_name=track_name,
        )
