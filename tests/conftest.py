"""Shared test fixtures."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from diffshot.capture.devices import DeviceRegistry
from diffshot.storage.artifacts import OutputStore

IPHONE_6 = {
    "user_agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 11_0 like Mac OS X)",
    "viewport": {"width": 375, "height": 667},
    "device_scale_factor": 2,
    "is_mobile": True,
    "has_touch": True,
    "default_browser_type": "webkit",
}


def image_bytes(
    color: tuple[int, int, int] = (255, 0, 0),
    size: tuple[int, int] = (100, 100),
    fmt: str = "PNG",
) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


@dataclass
class SessionLog:
    """What the fake sessions saw, shared across all sessions of a test."""

    launched: int = 0
    closed: int = 0
    open_now: int = 0
    max_open: int = 0
    headless: list[bool] = field(default_factory=list)
    profiles: list[dict[str, Any]] = field(default_factory=list)
    init_scripts: list[list[str]] = field(default_factory=list)
    visited: list[str] = field(default_factory=list)


class FakeSession:
    """Stands in for BrowserSession; the page fails or returns ``data``."""

    def __init__(
        self,
        log: SessionLog,
        headless: bool,
        error: Exception | None = None,
        data: bytes = b"",
        fail_urls: frozenset[str] = frozenset(),
        on_goto: Any = None,
    ) -> None:
        self._log = log
        self._error = error
        self._data = data
        self._fail_urls = fail_urls
        self._on_goto = on_goto
        log.headless.append(headless)

    async def __aenter__(self) -> FakeSession:
        self._log.launched += 1
        self._log.open_now += 1
        self._log.max_open = max(self._log.max_open, self._log.open_now)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._log.closed += 1
        self._log.open_now -= 1

    async def new_page(self, profile: dict[str, Any], init_scripts: Any = ()) -> AsyncMock:
        self._log.profiles.append(dict(profile))
        self._log.init_scripts.append(list(init_scripts))
        page = AsyncMock()

        async def goto(url: str, **kwargs: Any) -> None:
            self._log.visited.append(url)
            if self._on_goto is not None:
                await self._on_goto(url)
            if self._error is not None:
                raise self._error
            if url in self._fail_urls:
                raise TimeoutError(f"navigation to {url} timed out")

        page.goto = AsyncMock(side_effect=goto)
        page.screenshot = AsyncMock(return_value=self._data)
        return page


class FakeSessionFactory:
    """Hands out FakeSessions; ``outcomes`` is consumed one entry per attempt.

    An outcome is either an exception (the attempt fails) or image bytes.
    Once exhausted, the last outcome repeats.
    """

    def __init__(
        self,
        outcomes: list[Exception | bytes] | None = None,
        fail_urls: frozenset[str] = frozenset(),
        on_goto: Any = None,
    ) -> None:
        self.log = SessionLog()
        self._outcomes = list(outcomes or [image_bytes(fmt="JPEG")])
        self._fail_urls = fail_urls
        self._on_goto = on_goto

    def __call__(self, *args: Any, **kwargs: Any) -> FakeSession:
        headless = kwargs.get("headless", args[0] if args else True)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            return FakeSession(self.log, headless, error=outcome, on_goto=self._on_goto)
        return FakeSession(
            self.log, headless, data=outcome, fail_urls=self._fail_urls, on_goto=self._on_goto
        )


@pytest.fixture()
def devices() -> DeviceRegistry:
    return DeviceRegistry(
        {
            "iPhone 6": IPHONE_6,
            "Desktop Chrome": {"viewport": {"width": 1280, "height": 720}},
        }
    )


@pytest.fixture()
def store(tmp_path: Path) -> OutputStore:
    return OutputStore(tmp_path)


@pytest.fixture()
def make_image():
    """Factory for encoded solid-colour images."""
    return image_bytes


@pytest.fixture()
def fake_sessions() -> type[FakeSessionFactory]:
    return FakeSessionFactory
