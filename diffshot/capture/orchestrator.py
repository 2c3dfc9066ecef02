"""Concurrent before/after captures joined on completion."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from diffshot.exceptions import CaptureError, DiffshotError

if TYPE_CHECKING:
    from diffshot.capture.transaction import CaptureTransaction
    from diffshot.models.domain import CaptureRequest, CaptureResult

logger = structlog.get_logger(__name__)


async def capture_pair(
    transaction: CaptureTransaction,
    before: CaptureRequest,
    after: CaptureRequest,
) -> tuple[CaptureResult, CaptureResult]:
    """Run both captures concurrently and wait for both to resolve.

    A failing capture does not cancel the other one. If either fails, the
    first failure is raised once both have finished.
    """
    results = await asyncio.gather(
        transaction.run(before),
        transaction.run(after),
        return_exceptions=True,
    )

    failures = [
        (request, result)
        for request, result in zip((before, after), results, strict=True)
        if isinstance(result, BaseException)
    ]
    if failures:
        for request, error in failures:
            logger.error("pair_capture_failed", identifier=request.identifier, error=str(error))
        _, first = failures[0]
        if isinstance(first, DiffshotError):
            raise first
        msg = f"capture failed: {first}"
        raise CaptureError(msg) from first

    before_result, after_result = results
    return before_result, after_result  # type: ignore[return-value]
