"""Pydantic schema of the exported track map JSON document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CalibrationLapsDocument(BaseModel):
    left: str | None = None
    center: str | None = None
    right: str | None = None


class TrackMapDocument(BaseModel):
    """On-disk form of :class:`~trackmap.track.models.TrackMap`.

    Field names are snake_case in Python and camelCase on disk
    (``trackId``, ``halfWidthLeft``, ``viewBox``, ...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    track_id: str
    track_name: str
    sample_count: int = Field(ge=0)
    centerline: list[tuple[float, float]]
    half_width_left: list[float]
    half_width_right: list[float]
    left_edge: list[tuple[float, float]]
    right_edge: list[tuple[float, float]]
    smoothing_window: int
    calibration_laps: CalibrationLapsDocument = Field(default_factory=CalibrationLapsDocument)
    metadata: dict[str, Any] = Field(default_factory=dict)
    version: int = 1
    generated_at: str | None = None
    sim: str = "lmu"
    view_box: tuple[float, float, float, float] | None = None
