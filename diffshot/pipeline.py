"""Snapshot and before/after comparison workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from playwright.async_api import async_playwright

from diffshot.capture.browser import BrowserSession
from diffshot.capture.devices import DeviceRegistry
from diffshot.capture.orchestrator import capture_pair
from diffshot.capture.transaction import CaptureTransaction
from diffshot.config.settings import Settings, get_settings
from diffshot.constants import AFTER_IDENTIFIER, BEFORE_IDENTIFIER, DIFF_IDENTIFIER
from diffshot.models.domain import CaptureRequest, DiffRequest
from diffshot.reporter.diff import DiffEvaluator, VisualDiff
from diffshot.storage.artifacts import OutputStore, timestamp_identifier

if TYPE_CHECKING:
    from playwright.async_api import Playwright

    from diffshot.models.domain import CaptureResult, DiffResult, RunOptions

logger = structlog.get_logger(__name__)


def _build_transaction(
    playwright: Playwright,
    options: RunOptions,
    store: OutputStore,
    settings: Settings,
) -> CaptureTransaction:
    """Resolve the device up front so a bad name fails before any launch."""
    devices = DeviceRegistry.from_playwright(playwright)
    devices.resolve(options.emulate)

    def session_factory(headless: bool) -> BrowserSession:
        return BrowserSession(
            playwright,
            headless=headless,
            ignore_https_errors=settings.ignore_https_errors,
        )

    return CaptureTransaction(
        session_factory,
        devices,
        store,
        retry_delay_ms=settings.retry_delay_ms,
        clear_local_storage=settings.clear_local_storage,
    )


async def run_snapshot(
    options: RunOptions,
    url: str,
    settings: Settings | None = None,
) -> CaptureResult:
    """Capture ``url`` to ``<output>/<timestamp>.jpg``."""
    settings = settings or get_settings()
    store = OutputStore(options.output_dir)
    request = CaptureRequest(
        url=url,
        device=options.emulate,
        identifier=timestamp_identifier(),
        retry=options.retry,
        show=options.show,
        quality=settings.snapshot_quality,
    )

    async with async_playwright() as playwright:
        transaction = _build_transaction(playwright, options, store, settings)
        return await transaction.run(request)


async def run_compare(
    options: RunOptions,
    before_url: str,
    after_url: str,
    settings: Settings | None = None,
) -> DiffResult:
    """Capture both URLs concurrently, then diff them against the threshold."""
    settings = settings or get_settings()
    store = OutputStore(options.output_dir)

    def request_for(url: str, identifier: str) -> CaptureRequest:
        return CaptureRequest(
            url=url,
            device=options.emulate,
            identifier=identifier,
            retry=options.retry,
            show=options.show,
            quality=settings.compare_quality,
        )

    before = request_for(before_url, BEFORE_IDENTIFIER)
    after = request_for(after_url, AFTER_IDENTIFIER)

    async with async_playwright() as playwright:
        transaction = _build_transaction(playwright, options, store, settings)
        before_result, after_result = await capture_pair(transaction, before, after)

    evaluator = DiffEvaluator(
        store,
        VisualDiff(tolerance=settings.color_tolerance, quality=settings.compare_quality),
    )
    return await evaluator.evaluate(
        DiffRequest(
            before_path=before_result.path,
            after_path=after_result.path,
            identifier=DIFF_IDENTIFIER,
            threshold=options.threshold,
        )
    )
