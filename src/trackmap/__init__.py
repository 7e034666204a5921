"""Track map generation from calibration laps.

Public API
----------
TrackMapGenerator   - runs one generation from role-tagged calibration laps
GeneratorConfig     - numeric tuning parameters for a run
TrackMap            - the exported track description
DataError           - raised on insufficient or malformed input
"""

from trackmap.config import GeneratorConfig
from trackmap.errors import DataError
from trackmap.pipeline import GenerationResult, TrackMapGenerator
from trackmap.track.models import TrackMap

__version__ = "0.1.0"

__all__ = [
    "DataError",
    "GenerationResult",
    "GeneratorConfig",
    "TrackMap",
    "TrackMapGenerator",
]
