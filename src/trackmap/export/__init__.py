"""JSON export and re-import of track maps.

Public API
----------
- :func:`create_track_map`
- :func:`export_track_map` / :func:`load_track_map`
- :func:`generate_summary`
- :class:`TrackMapDocument`
"""

from trackmap.export.exporter import (
    create_track_map,
    export_track_map,
    from_document,
    generate_summary,
    load_track_map,
    to_document,
)
from trackmap.export.schemas import CalibrationLapsDocument, TrackMapDocument

__all__ = [
    "CalibrationLapsDocument",
    "TrackMapDocument",
    "create_track_map",
    "export_track_map",
    "from_document",
    "generate_summary",
    "load_track_map",
    "to_document",
]
