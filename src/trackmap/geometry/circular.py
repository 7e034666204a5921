"""Modular indexing for closed curves.

Every closed-loop array in the pipeline treats index ``-1`` as the last
element and index ``n`` as the first.  All wrap-around arithmetic goes
through these helpers.
"""

from __future__ import annotations


def wrap_index(index: int, n: int) -> int:
    """Map any integer *index* onto ``[0, n)``.

    Raises:
        ValueError: If *n* is not positive.
    """
    if n <= 0:
        raise ValueError("n must be >= 1")
    return index % n


def circular_neighbors(index: int, n: int) -> tuple[int, int]:
    """Return ``(prev, next)`` indices of *index* on a loop of length *n*."""
    return wrap_index(index - 1, n), wrap_index(index + 1, n)


def circular_distance(a: int, b: int, n: int) -> int:
    """Shortest number of steps between *a* and *b* on a loop of length *n*."""
    d = abs(wrap_index(a, n) - wrap_index(b, n))
    return min(d, n - d)
