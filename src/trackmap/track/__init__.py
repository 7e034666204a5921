"""Track map record, centerline conditioning and edge polylines."""

from trackmap.track.centerline import (
    gaussian_smooth_centerline,
    smooth_centerline,
    validate_centerline,
)
from trackmap.track.edges import generate_edges, validate_edges
from trackmap.track.models import (
    CenterlineValidation,
    EdgeValidation,
    TrackMap,
    compute_view_box,
)

__all__ = [
    "CenterlineValidation",
    "EdgeValidation",
    "TrackMap",
    "compute_view_box",
    "gaussian_smooth_centerline",
    "generate_edges",
    "smooth_centerline",
    "validate_centerline",
    "validate_edges",
]
