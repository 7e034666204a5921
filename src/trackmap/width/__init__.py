"""Half-width measurement, smoothing and constraints.

Public API
----------
- :func:`calculate_widths` / :class:`WidthProfile`
- :func:`compute_target_width`, :func:`build_constant_width_envelope`
- :func:`detect_width_outliers`, :func:`clamp_widths`
- :func:`savitzky_golay_width_smooth`, :func:`clamp_width_deltas`
- :func:`enforce_width_constraints`
- :class:`SavitzkyGolayKernelCache`
"""

from trackmap.width.constraints import ConstraintResult, enforce_width_constraints
from trackmap.width.estimator import (
    DeltaClampResult,
    OutlierReport,
    SectorClamp,
    WidthEnvelope,
    WidthOutlier,
    WidthProfile,
    build_constant_width_envelope,
    calculate_widths,
    clamp_width_deltas,
    clamp_widths,
    compute_target_width,
    detect_width_outliers,
    savitzky_golay_width_smooth,
    symmetrise_widths,
)
from trackmap.width.smoothing import (
    SavitzkyGolayKernelCache,
    gaussian_smooth,
    savitzky_golay_kernel,
    savitzky_golay_smooth,
    smooth_array,
)

__all__ = [
    "ConstraintResult",
    "DeltaClampResult",
    "OutlierReport",
    "SavitzkyGolayKernelCache",
    "SectorClamp",
    "WidthEnvelope",
    "WidthOutlier",
    "WidthProfile",
    "build_constant_width_envelope",
    "calculate_widths",
    "clamp_width_deltas",
    "clamp_widths",
    "compute_target_width",
    "detect_width_outliers",
    "enforce_width_constraints",
    "gaussian_smooth",
    "savitzky_golay_kernel",
    "savitzky_golay_smooth",
    "savitzky_golay_width_smooth",
    "smooth_array",
    "symmetrise_widths",
]
