"""Build, write, read and summarise track maps."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from trackmap.export.schemas import CalibrationLapsDocument, TrackMapDocument
from trackmap.geometry.vectors import Point
from trackmap.track.models import DEFAULT_SIM, TRACK_MAP_VERSION, TrackMap

_logger = logging.getLogger(__name__)


def create_track_map(
    track_id: str,
    track_name: str,
    centerline: list[Point],
    half_width_left: list[float],
    half_width_right: list[float],
    left_edge: list[Point],
    right_edge: list[Point],
    smoothing_window: int,
    calibration_laps: dict[str, str | None] | None = None,
    metadata: dict | None = None,
    sim: str = DEFAULT_SIM,
    generated_at: str | None = None,
) -> TrackMap:
    """Assemble a :class:`TrackMap`; ``sample_count`` is the centerline length.

    *generated_at* defaults to the current UTC time.
    """
    laps = {role: None for role in ("left", "center", "right")}
    laps.update(calibration_laps or {})
    return TrackMap(
        track_id=track_id,
        track_name=track_name,
        sample_count=len(centerline),
        centerline=[(float(x), float(y)) for x, y in centerline],
        half_width_left=[float(v) for v in half_width_left],
        half_width_right=[float(v) for v in half_width_right],
        left_edge=[(float(x), float(y)) for x, y in left_edge],
        right_edge=[(float(x), float(y)) for x, y in right_edge],
        smoothing_window=smoothing_window,
        calibration_laps=laps,
        metadata=dict(metadata or {}),
        version=TRACK_MAP_VERSION,
        generated_at=generated_at or datetime.now(timezone.utc).isoformat(),
        sim=sim,
    )


def to_document(track_map: TrackMap) -> TrackMapDocument:
    return TrackMapDocument(
        track_id=track_map.track_id,
        track_name=track_map.track_name,
        sample_count=track_map.sample_count,
        centerline=track_map.centerline,
        half_width_left=track_map.half_width_left,
        half_width_right=track_map.half_width_right,
        left_edge=track_map.left_edge,
        right_edge=track_map.right_edge,
        smoothing_window=track_map.smoothing_window,
        calibration_laps=CalibrationLapsDocument(**track_map.calibration_laps),
        metadata=track_map.metadata,
        version=track_map.version,
        generated_at=track_map.generated_at,
        sim=track_map.sim,
        view_box=track_map.view_box,
    )


def from_document(doc: TrackMapDocument) -> TrackMap:
    return TrackMap(
        track_id=doc.track_id,
        track_name=doc.track_name,
        sample_count=doc.sample_count,
        centerline=list(doc.centerline),
        half_width_left=list(doc.half_width_left),
        half_width_right=list(doc.half_width_right),
        left_edge=list(doc.left_edge),
        right_edge=list(doc.right_edge),
        smoothing_window=doc.smoothing_window,
        calibration_laps=doc.calibration_laps.model_dump(),
        metadata=dict(doc.metadata),
        version=doc.version,
        generated_at=doc.generated_at,
        sim=doc.sim,
    )


def export_track_map(track_map: TrackMap, path: str | Path) -> Path:
    """Write *track_map* as camelCase JSON, creating parent directories.

    Returns:
        The path written.
    """
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(to_document(track_map).model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    _logger.info("Exported track map %s to %s", track_map.track_id, out)
    return out


def load_track_map(path: str | Path) -> TrackMap:
    """Read and validate a JSON document written by :func:`export_track_map`.

    Raises:
        FileNotFoundError: If *path* does not exist.
        pydantic.ValidationError: If the document does not match the schema.
    """
    text = Path(path).read_text(encoding="utf-8")
    return from_document(TrackMapDocument.model_validate_json(text))


def generate_summary(track_map: TrackMap) -> str:
    """Plain-text overview of a generated track map."""
    wl, wr = track_map.half_width_left, track_map.half_width_right
    n = len(wl)
    avg_left = sum(wl) / n if n else 0.0
    avg_right = sum(wr) / n if n else 0.0
    totals = [l + r for l, r in zip(wl, wr)]
    laps = track_map.calibration_laps

    lines = [
        f"Track Map Summary: {track_map.track_name}",
        "=" * 40,
        f"Track ID:        {track_map.track_id}",
        f"Sample count:    {track_map.sample_count}",
        f"Smoothing:       window {track_map.smoothing_window}",
        f"Generated:       {track_map.generated_at or '-'}",
        "",
        "Calibration laps:",
        f"  Left:   {laps.get('left') or '-'}",
        f"  Center: {laps.get('center') or '-'}",
        f"  Right:  {laps.get('right') or '-'}",
        "",
        "Track width:",
        f"  Average: {avg_left + avg_right:.2f}m (L: {avg_left:.2f}m, R: {avg_right:.2f}m)",
    ]
    if totals:
        lines.append(f"  Range:   {min(totals):.2f}m - {max(totals):.2f}m")

    guardrail = track_map.metadata.get("guardrail_clamps")
    if guardrail:
        lines.append(
            f"  Guardrail clamps: {guardrail.get('left_clamped', 0)} left / "
            f"{guardrail.get('right_clamped', 0)} right"
        )
    track_length = track_map.metadata.get("track_length_m")
    if track_length:
        lines.append(f"Track length:    {track_length:.1f}m")
    return "\n".join(lines)
