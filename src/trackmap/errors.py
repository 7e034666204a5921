"""Error types shared by every pipeline stage."""

from __future__ import annotations


class DataError(ValueError):
    """Raised when calibration input is insufficient or malformed.

    Fatal to a generation run.  ``role`` and ``sample_count`` are filled in
    when the failure can be pinned to a specific trace.
    """

    def __init__(
        self,
        message: str,
        *,
        role: str | None = None,
        sample_count: int | None = None,
    ) -> None:
        super().__init__(message)
        self.role = role
        self.sample_count = sample_count
