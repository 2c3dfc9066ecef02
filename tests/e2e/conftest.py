"""E2E fixtures — drive a real Chromium against local static pages.

These tests need the Playwright browsers installed and are opt-in:

    playwright install chromium
    DIFFSHOT_E2E=1 pytest tests/e2e/ -v
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

STATIC_PAGE = """<!doctype html>
<html>
  <head><title>diffshot fixture</title></head>
  <body style="margin:0;background:#fafafa;font-family:sans-serif">
    <h1 style="color:#333">Static fixture</h1>
    <p style="height:1500px">Tall enough to need a full-page capture.</p>
  </body>
</html>
"""


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("DIFFSHOT_E2E") == "1":
        return
    skip = pytest.mark.skip(reason="set DIFFSHOT_E2E=1 to run browser tests")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip)


@pytest.fixture()
def static_page_url(tmp_path: Path) -> str:
    page = tmp_path / "pages" / "index.html"
    page.parent.mkdir()
    page.write_text(STATIC_PAGE, encoding="utf-8")
    return page.as_uri()
