"""Calibration lap CSV parser.

Accepts both telemetry export layouts seen in the wild:

* the key/value header block (``TrackName,Algarve ...``, ``TrackLen [m],4689``)
* the legacy table header (``Game,Track,Car,LapTime [s]`` followed by a row
  of values that starts with the same first cell)

followed by a sample table whose header row contains ``LapDistance``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from trackmap.calibration.models import Sample
from trackmap.errors import DataError

_MIN_SAMPLES = 4

# normalised header label → metadata key
_META_KEYS: dict[str, str] = {
    "player": "driver",
    "driver": "driver",
    "track": "track",
    "trackname": "track",
    "car": "car",
    "carname": "car",
    "laptime": "lap_time",
    "laptimes": "lap_time",
    "tracklen": "lap_length",
    "tracklenm": "lap_length",
    "sessionutc": "session_utc",
}
_NUMERIC_META = frozenset({"lap_time", "lap_length"})


def _norm(label: str) -> str:
    return re.sub(r"[^a-z0-9]", "", label.lower())


def _guess_delimiter(text: str) -> str:
    return ";" if text.count(";") > text.count(",") else ","


def _split_line(line: str, delimiter: str) -> list[str]:
    parts = [p.replace("\0", "").strip() for p in line.split(delimiter)]
    if parts and parts[-1] == "":
        parts.pop()
    return parts


def _to_float(value: str) -> float | None:
    try:
        result = float(value)
    except ValueError:
        return None
    return result if math.isfinite(result) else None


def _find_column(labels: list[str], *tags: str, suffix: str | None = None) -> int:
    for idx, label in enumerate(labels):
        tag = _norm(label)
        if tag in tags or (suffix is not None and tag.endswith(suffix)):
            return idx
    return -1


@dataclass
class ParsedLapFile:
    """Samples and header metadata of one lap file."""

    filename: str
    samples: list[Sample]
    metadata: dict = field(default_factory=dict)


class LapFileParser:
    """Parse calibration lap CSV text into :class:`Sample` lists."""

    def parse(self, text: str, filename: str = "") -> ParsedLapFile:
        """Parse one lap file.

        Raises:
            DataError: If the ``LapDistance`` header or the X / Y|Z columns are
                missing, or fewer than 4 spatial samples remain.
        """
        delimiter = _guess_delimiter(text)
        lines = text.splitlines()

        header_index = next(
            (i for i, line in enumerate(lines) if "lapdistance" in line.lower()),
            -1,
        )
        if header_index == -1:
            raise DataError(f"{filename or 'lap file'}: LapDistance header not found")

        metadata = self._parse_metadata(lines[:header_index], delimiter)
        samples = self._parse_samples(lines, header_index, delimiter, filename)
        return ParsedLapFile(filename=filename, samples=samples, metadata=metadata)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _parse_metadata(self, lines: list[str], delimiter: str) -> dict:
        rows = [_split_line(line, delimiter) for line in lines]
        rows = [r for r in rows if r and any(r)]
        metadata: dict = {}
        i = 0
        while i < len(rows):
            parts = rows[i]
            following = rows[i + 1] if i + 1 < len(rows) else None
            if following is not None and following[0] == parts[0] and len(parts) > 1:
                # Table layout: label row followed by a value row
                for label, value in zip(parts[1:], following[1:]):
                    self._assign(metadata, label, value)
                i += 2
                continue
            if _norm(parts[0]) == "player":
                metadata["driver"] = parts[-1]
            elif len(parts) >= 2:
                self._assign(metadata, parts[0], parts[1])
            i += 1
        return metadata

    @staticmethod
    def _assign(metadata: dict, label: str, value: str) -> None:
        key = _META_KEYS.get(_norm(label))
        if key is None:
            return
        metadata[key] = _to_float(value) if key in _NUMERIC_META else value

    def _parse_samples(
        self,
        lines: list[str],
        header_index: int,
        delimiter: str,
        filename: str,
    ) -> list[Sample]:
        labels = _split_line(lines[header_index], delimiter)
        idx_distance = next(
            (i for i, label in enumerate(labels) if "lapdistance" in _norm(label)), -1
        )
        idx_x = _find_column(labels, "xm", "x", suffix="posx")
        idx_y = _find_column(labels, "ym", "y", suffix="posy")
        idx_z = _find_column(labels, "zm", "z", suffix="posz")

        if idx_distance == -1 or idx_x == -1 or (idx_y == -1 and idx_z == -1):
            raise DataError(
                f"{filename or 'lap file'}: required columns (LapDistance, X, Y/Z) not found"
            )

        needed = max(idx_distance, idx_x, idx_y, idx_z)
        samples: list[Sample] = []
        for raw in lines[header_index + 1:]:
            if not raw.strip():
                continue
            parts = _split_line(raw, delimiter)
            if len(parts) <= needed:
                continue
            distance = _to_float(parts[idx_distance])
            x = _to_float(parts[idx_x])
            if distance is None or x is None:
                continue
            y = _to_float(parts[idx_y]) if idx_y >= 0 else None
            z = _to_float(parts[idx_z]) if idx_z >= 0 else None
            if y is None and z is None:
                continue
            samples.append(Sample(distance=distance, x=x, y=y, z=z))

        if len(samples) < _MIN_SAMPLES:
            raise DataError(
                f"{filename or 'lap file'}: not enough spatial samples "
                f"({len(samples)}, need {_MIN_SAMPLES})",
                sample_count=len(samples),
            )
        return samples


def parse_lap_file(text: str, filename: str = "") -> ParsedLapFile:
    """Module-level shortcut for :meth:`LapFileParser.parse`."""
    return LapFileParser().parse(text, filename)
