"""Moving-average, Gaussian and Savitzky–Golay smoothers for closed profiles."""

from __future__ import annotations

import logging
import math
from collections import OrderedDict

from trackmap.geometry.circular import wrap_index
from trackmap.width.linalg import invert, matmul, transpose

_logger = logging.getLogger(__name__)

DEFAULT_SG_WINDOW = 9
DEFAULT_SG_ORDER = 3


def _odd(window: int) -> int:
    return window + 1 if window % 2 == 0 else window


def smooth_array(values: list[float], window: int, circular: bool = True) -> list[float]:
    """Centred moving average.

    Even windows are widened by one.  With ``circular=False`` the window is
    truncated at the ends instead of wrapping.

    Raises:
        ValueError: If *window* is less than 1.
    """
    if window < 1:
        raise ValueError("Window size must be at least 1.")
    window = _odd(window)
    half = window // 2
    n = len(values)
    smoothed: list[float] = []
    for i in range(n):
        total = 0.0
        count = 0
        for j in range(-half, half + 1):
            idx = i + j
            if circular:
                idx = wrap_index(idx, n)
            elif idx < 0 or idx >= n:
                continue
            total += values[idx]
            count += 1
        smoothed.append(total / count if count else values[i])
    return smoothed


def gaussian_smooth(values: list[float], sigma: float, circular: bool = True) -> list[float]:
    """Gaussian-weighted average with a ±3σ kernel.

    Non-circular ends renormalise over the weights that fall inside the array.

    Raises:
        ValueError: If *sigma* is not positive.
    """
    if sigma <= 0:
        raise ValueError(f"sigma must be positive, got {sigma}")
    radius = math.ceil(3 * sigma)
    weights = [math.exp(-(j * j) / (2 * sigma * sigma)) for j in range(-radius, radius + 1)]
    n = len(values)
    smoothed: list[float] = []
    for i in range(n):
        total = 0.0
        weight_sum = 0.0
        for k, w in enumerate(weights):
            idx = i + k - radius
            if circular:
                idx = wrap_index(idx, n)
            elif idx < 0 or idx >= n:
                continue
            total += values[idx] * w
            weight_sum += w
        smoothed.append(total / weight_sum if weight_sum else values[i])
    return smoothed


# ---------------------------------------------------------------------------
# Savitzky–Golay
# ---------------------------------------------------------------------------

def savitzky_golay_kernel(window: int, order: int, spacing: float = 1.0) -> list[float]:
    """Smoothing coefficients for the centre sample of a *window*-point fit.

    The first row of ``(AᵀA)⁻¹Aᵀ``, where ``A[i][p] = t_i ** p`` over the
    sample offsets ``t_i = (i - half) * spacing``.

    Raises:
        DataError: If the normal matrix is singular.
    """
    half = window // 2
    step = max(spacing, 1e-3)
    design = [[(i * step) ** p for p in range(order + 1)] for i in range(-half, half + 1)]
    design_t = transpose(design)
    pseudo_inverse = matmul(invert(matmul(design_t, design)), design_t)
    return pseudo_inverse[0]


class SavitzkyGolayKernelCache:
    """Least-recently-used store of Savitzky–Golay kernels.

    Keys are ``(window, order, round(spacing, 4))``.  One cache is meant to
    live alongside a generator and be reused across its runs.

    Args:
        max_size: Number of kernels kept before the oldest is evicted.
    """

    def __init__(self, max_size: int = 32) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self.max_size = max_size
        self._kernels: OrderedDict[tuple[int, int, float], list[float]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._kernels)

    def get(self, window: int, order: int, spacing: float) -> list[float]:
        """Return the kernel for the given parameters, building it on a miss."""
        key = (window, order, round(spacing, 4))
        kernel = self._kernels.get(key)
        if kernel is not None:
            self.hits += 1
            self._kernels.move_to_end(key)
            return kernel

        self.misses += 1
        kernel = savitzky_golay_kernel(window, order, spacing)
        self._kernels[key] = kernel
        if len(self._kernels) > self.max_size:
            evicted, _ = self._kernels.popitem(last=False)
            _logger.debug("Evicted Savitzky-Golay kernel %s", evicted)
        return kernel

    def clear(self) -> None:
        self._kernels.clear()
        self.hits = 0
        self.misses = 0


def savitzky_golay_smooth(
    values: list[float],
    window: int = DEFAULT_SG_WINDOW,
    order: int = DEFAULT_SG_ORDER,
    spacing: float = 1.0,
    circular: bool = True,
    cache: SavitzkyGolayKernelCache | None = None,
) -> list[float]:
    """Savitzky–Golay filter over *values*.

    Args:
        values: Profile to smooth.
        window: Fit window; even values are widened by one.
        order: Polynomial order, below the window size.
        spacing: Physical distance between samples.
        circular: Wrap around the ends (closed loop).
        cache: Kernel cache to consult; without one the kernel is rebuilt.

    Raises:
        ValueError: If *window* is less than 3 or *order* does not fit it.
    """
    if window < 3:
        raise ValueError("Savitzky-Golay window must be >= 3")
    window = _odd(window)
    if order < 0 or order >= window:
        raise ValueError(f"Savitzky-Golay order must be in [0, {window}), got {order}")

    kernel = (
        cache.get(window, order, spacing)
        if cache is not None
        else savitzky_golay_kernel(window, order, spacing)
    )
    half = window // 2
    n = len(values)
    result: list[float] = []
    for i in range(n):
        total = 0.0
        weight_sum = 0.0
        for k, coeff in enumerate(kernel):
            idx = i + k - half
            if circular:
                idx = wrap_index(idx, n)
            elif idx < 0 or idx >= n:
                continue
            total += coeff * values[idx]
            weight_sum += coeff
        result.append(total / weight_sum if weight_sum != 0 else values[i])
    return result
