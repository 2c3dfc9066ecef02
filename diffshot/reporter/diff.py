"""Visual regression diff engine using Pillow."""

from __future__ import annotations

import asyncio
import io
from typing import TYPE_CHECKING

import structlog
from PIL import Image, ImageChops, UnidentifiedImageError

from diffshot.constants import COMPARE_QUALITY, DEFAULT_COLOR_TOLERANCE, ERROR_COLOR
from diffshot.exceptions import ComparisonError, ThresholdExceededError
from diffshot.models.domain import Comparison, DiffRequest, DiffResult
from diffshot.utils.timing import timed

if TYPE_CHECKING:
    from diffshot.storage.artifacts import OutputStore

logger = structlog.get_logger(__name__)


def _decode(data: bytes, label: str) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        msg = f"cannot decode {label} image: {e}"
        raise ComparisonError(msg) from e


def _pad(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    if img.size == size:
        return img
    canvas = Image.new("RGB", size, color=(0, 0, 0))
    canvas.paste(img, (0, 0))
    return canvas


class VisualDiff:
    """Compares two encoded images pixel by pixel.

    A pixel differs when any channel moves by more than ``tolerance``. When
    the images have different dimensions both are placed on a common canvas
    and every pixel outside their overlap counts as different.
    """

    def __init__(
        self,
        tolerance: int = DEFAULT_COLOR_TOLERANCE,
        quality: int = COMPARE_QUALITY,
    ) -> None:
        self._tolerance = tolerance
        self._quality = quality

    def compare(self, before: bytes, after: bytes) -> Comparison:
        """Return the mismatch percentage and an encoded JPEG diff image."""
        before_img = _decode(before, "before")
        after_img = _decode(after, "after")

        width = max(before_img.width, after_img.width)
        height = max(before_img.height, after_img.height)
        total_pixels = width * height
        if total_pixels == 0:
            raise ComparisonError("cannot compare empty images")

        before_canvas = _pad(before_img, (width, height))
        after_canvas = _pad(after_img, (width, height))

        # Largest per-channel delta for each pixel, thresholded to a 0/255 mask
        red, green, blue = ImageChops.difference(before_canvas, after_canvas).split()
        delta = ImageChops.lighter(ImageChops.lighter(red, green), blue)
        tolerance = self._tolerance
        mask = delta.point(lambda v: 255 if v > tolerance else 0)

        same_dimensions = before_img.size == after_img.size
        if not same_dimensions:
            outside = Image.new("L", (width, height), color=255)
            overlap_width = min(before_img.width, after_img.width)
            overlap_height = min(before_img.height, after_img.height)
            outside.paste(0, (0, 0, overlap_width, overlap_height))
            mask = ImageChops.lighter(mask, outside)

        different_pixels = mask.histogram()[255]

        dimmed = Image.eval(after_canvas, lambda v: v // 3)
        highlight = Image.new("RGB", (width, height), color=ERROR_COLOR)
        diff_img = Image.composite(highlight, dimmed, mask)

        buffer = io.BytesIO()
        diff_img.save(buffer, format="JPEG", quality=self._quality)

        return Comparison(
            mismatch_percentage=round(different_pixels / total_pixels * 100, 2),
            image=buffer.getvalue(),
            width=width,
            height=height,
            is_same_dimensions=same_dimensions,
            dimension_difference=(
                after_img.width - before_img.width,
                after_img.height - before_img.height,
            ),
            different_pixels=different_pixels,
        )


class DiffEvaluator:
    """Loads two captures, writes their diff and applies the threshold."""

    def __init__(self, store: OutputStore, differ: VisualDiff | None = None) -> None:
        self._store = store
        self._differ = differ or VisualDiff()

    async def evaluate(self, request: DiffRequest) -> DiffResult:
        """Compare the request's images.

        Raises ThresholdExceededError, after the diff image is written, when the
        mismatch percentage is strictly greater than the threshold.
        """
        for path in (request.before_path, request.after_path):
            if not path.exists():
                msg = f"capture not found: {path}"
                raise ComparisonError(msg)

        diff_path = self._store.image_path(request.identifier)
        logger.info("diff_start", path=str(diff_path))

        with timed("diff") as t:
            before, after = await asyncio.gather(
                asyncio.to_thread(self._store.load_image, request.before_path),
                asyncio.to_thread(self._store.load_image, request.after_path),
            )
            comparison = await asyncio.to_thread(self._differ.compare, before, after)
            written = await asyncio.to_thread(
                self._store.save_image, request.identifier, comparison.image
            )

        result = DiffResult(
            mismatch_percentage=comparison.mismatch_percentage,
            diff_image_path=written,
            threshold=request.threshold,
            is_same_dimensions=comparison.is_same_dimensions,
            dimension_difference=comparison.dimension_difference,
            different_pixels=comparison.different_pixels,
            total_pixels=comparison.width * comparison.height,
        )

        logger.info(
            "diff_complete",
            mismatch_pct=f"{result.mismatch_percentage:.2f}%",
            threshold=f"{result.threshold:g}%",
            same_dimensions=result.is_same_dimensions,
            dimension_difference=result.dimension_difference,
            changed_pixels=result.different_pixels,
            total_pixels=result.total_pixels,
            elapsed=round(t["elapsed"], 3),
        )

        if result.exceeds_threshold:
            raise ThresholdExceededError(result)
        return result
