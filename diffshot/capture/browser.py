"""Disposable Playwright browser sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from playwright.async_api import Browser, Page, Playwright

logger = structlog.get_logger(__name__)


class BrowserSession:
    """One browser process, owned by a single capture attempt."""

    def __init__(
        self,
        playwright: Playwright,
        headless: bool = True,
        ignore_https_errors: bool = True,
    ) -> None:
        self._playwright = playwright
        self._headless = headless
        self._ignore_https_errors = ignore_https_errors
        self._browser: Browser | None = None

    async def launch(self) -> None:
        """Launch the browser."""
        self._browser = await self._playwright.chromium.launch(headless=self._headless)

    async def new_page(
        self,
        profile: Mapping[str, Any] | None = None,
        init_scripts: Sequence[str] = (),
    ) -> Page:
        """Open a page in a fresh context emulating ``profile``.

        ``init_scripts`` run in every new document before any page script.
        """
        if not self._browser:
            raise RuntimeError("Browser not launched. Call launch() first.")

        context = await self._browser.new_context(
            **dict(profile or {}),
            ignore_https_errors=self._ignore_https_errors,
        )
        for script in init_scripts:
            await context.add_init_script(script=script)
        return await context.new_page()

    async def close(self) -> None:
        """Close the browser; a no-op when it was never launched."""
        if self._browser:
            browser, self._browser = self._browser, None
            await browser.close()
            logger.debug("browser_closed")

    async def __aenter__(self) -> BrowserSession:
        await self.launch()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
