"""Inter-module data contracts (not persisted directly)."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from diffshot.constants import (
    COMPARE_QUALITY,
    DEFAULT_DEVICE,
    DEFAULT_RETRY,
    DEFAULT_THRESHOLD,
    MAX_RETRY,
)


class RunOptions(BaseModel):
    """Options for one invocation, resolved once and passed down explicitly."""

    model_config = ConfigDict(frozen=True)

    emulate: str = DEFAULT_DEVICE
    output_dir: Path
    retry: int = Field(default=DEFAULT_RETRY, ge=0, le=MAX_RETRY)
    show: bool = False
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0, le=100)


class CaptureRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    device: str
    identifier: str  # file stem under the output directory
    retry: int = Field(default=DEFAULT_RETRY, ge=0, le=MAX_RETRY)
    show: bool = False
    quality: int = Field(default=COMPARE_QUALITY, ge=1, le=100)


class CaptureResult(BaseModel):
    url: str
    path: Path
    attempts: int
    elapsed: float = 0.0


class DiffRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    before_path: Path
    after_path: Path
    identifier: str
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0, le=100)


class Comparison(BaseModel):
    """Raw output of the pixel comparison routine."""

    mismatch_percentage: float
    image: bytes
    width: int
    height: int
    is_same_dimensions: bool = True
    dimension_difference: tuple[int, int] = (0, 0)  # after minus before (width, height)
    different_pixels: int = 0


class DiffResult(BaseModel):
    mismatch_percentage: float
    diff_image_path: Path
    threshold: float
    is_same_dimensions: bool = True
    dimension_difference: tuple[int, int] = (0, 0)
    different_pixels: int = 0
    total_pixels: int = 0

    @property
    def exceeds_threshold(self) -> bool:
        return self.mismatch_percentage > self.threshold
