"""Exception hierarchy for diffshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from diffshot.models.domain import DiffResult


class DiffshotError(Exception):
    """Base exception for all diffshot errors."""


class ValidationError(DiffshotError):
    """Raised when user-supplied options are invalid."""


class CaptureError(DiffshotError):
    """Raised when a page capture fails after exhausting its retries."""


class ComparisonError(DiffshotError):
    """Raised when two captures cannot be compared."""


class StorageError(DiffshotError):
    """Raised when reading or writing an output image fails."""


class ThresholdExceededError(DiffshotError):
    """Raised when the mismatch between two captures exceeds the threshold.

    The diff image has already been written when this is raised.
    """

    def __init__(self, result: DiffResult) -> None:
        self.result = result
        super().__init__(
            f"mismatch {result.mismatch_percentage:.2f}% exceeds threshold "
            f"{result.threshold:g}% (diff written to {result.diff_image_path})"
        )
