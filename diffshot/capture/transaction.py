"""Single page capture with bounded retry."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from diffshot.constants import DEFAULT_RETRY_DELAY_MS, WAIT_UNTIL
from diffshot.exceptions import CaptureError
from diffshot.models.domain import CaptureRequest, CaptureResult
from diffshot.utils.retry import retry
from diffshot.utils.timing import timed

if TYPE_CHECKING:
    from diffshot.capture.browser import BrowserSession
    from diffshot.capture.devices import DeviceRegistry
    from diffshot.storage.artifacts import OutputStore

logger = structlog.get_logger(__name__)

# Drop document.write calls made from the top frame so embedded consent or
# redirect scripts cannot repaint the whole document. Frames keep the native call.
TOP_FRAME_WRITE_GUARD_JS = """
(() => {
    const nativeWrite = document.write;
    document.write = function (...args) {
        if (window === window.top) {
            return;
        }
        return nativeWrite.apply(this, args);
    };
})();
"""

CLEAR_LOCAL_STORAGE_JS = """
(() => {
    try {
        window.localStorage.clear();
    } catch (e) {}
})();
"""

SessionFactory = Callable[[bool], "BrowserSession"]


class CaptureTransaction:
    """Drives one full-page capture through disposable browser sessions.

    Every attempt launches its own browser and closes it before the next
    attempt starts. The image is written to the output store only after an
    attempt succeeds.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        devices: DeviceRegistry,
        store: OutputStore,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        clear_local_storage: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._devices = devices
        self._store = store
        self._retry_delay_ms = retry_delay_ms
        self._init_scripts = [TOP_FRAME_WRITE_GUARD_JS]
        if clear_local_storage:
            self._init_scripts.append(CLEAR_LOCAL_STORAGE_JS)

    async def run(self, request: CaptureRequest) -> CaptureResult:
        """Capture ``request.url``, retrying up to ``request.retry`` times."""
        profile = self._devices.resolve(request.device)
        path = self._store.image_path(request.identifier)
        logger.info("capture_start", url=request.url, path=str(path), device=request.device)

        attempts = 0

        async def attempt() -> bytes:
            nonlocal attempts
            attempts += 1
            return await self._attempt(request, profile)

        max_attempts = request.retry + 1
        with timed(f"capture:{request.identifier}") as t:
            try:
                data = await retry(
                    max_attempts=max_attempts,
                    delay_ms=self._retry_delay_ms,
                    backoff_factor=1.0,
                )(attempt)()
            except Exception as e:
                logger.error("capture_failed", url=request.url, attempts=attempts, error=str(e))
                msg = f"capture of {request.url} failed after {attempts} attempt(s): {e}"
                raise CaptureError(msg) from e

            written = self._store.save_image(request.identifier, data)

        logger.info(
            "capture_complete",
            url=request.url,
            path=str(written),
            attempts=attempts,
            elapsed=round(t["elapsed"], 3),
        )
        return CaptureResult(url=request.url, path=written, attempts=attempts, elapsed=t["elapsed"])

    async def _attempt(self, request: CaptureRequest, profile: dict[str, Any]) -> bytes:
        """One launch → navigate → capture cycle; the session never outlives it."""
        async with self._session_factory(not request.show) as session:
            page = await session.new_page(profile, init_scripts=self._init_scripts)
            await page.goto(request.url, wait_until=WAIT_UNTIL)
            data: bytes = await page.screenshot(
                full_page=True, type="jpeg", quality=request.quality
            )
        return data
