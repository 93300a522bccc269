"""
Shared fixtures for the snapshot pipeline tests.

FakeSession stands in for a Playwright-backed RenderSession: it keeps a
scroll position, serves fixed HTML, and records every call so tests can
assert ordering without launching a browser.
"""

from typing import Any, List, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

from front_pages.config import ScraperConfig
from front_pages.errors import LaunchError, NavigationError
from front_pages.models import Site
from front_pages.scrolling import (
    SCROLL_BY_JS,
    SCROLL_OFFSET_JS,
    SCROLL_TO_BOTTOM_JS,
    SCROLL_TO_TOP_JS,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 64

FRONT_PAGE_HTML = """
<html><body>
  <div class="front">
    <a href="/politics/first"><span class="hl">First story</span></a>
    <a href="https://other.example.org/second"><span class="hl">Second story</span></a>
    <a href="third.html"><span class="hl">Third story</span></a>
  </div>
</body></html>
"""


class FakeSession:
    def __init__(
        self,
        html: str = FRONT_PAGE_HTML,
        url: str = "https://news.example.com/",
        scroll_height: int = 3000,
        screenshot_bytes: bytes = PNG_BYTES,
        fail_on: Optional[str] = None,
        stuck: bool = False,
    ) -> None:
        self.html = html
        self.url = url
        self.scroll_height = scroll_height
        self.screenshot_bytes = screenshot_bytes
        self.fail_on = fail_on
        self.stuck = stuck
        self.position = 0
        self.calls: List[str] = []
        self.open_count = 0
        self.close_count = 0
        self.screenshot_position: Optional[int] = None

    async def open(self) -> "FakeSession":
        self.open_count += 1
        self.calls.append("open")
        if self.fail_on == "open":
            raise LaunchError("Could not launch browser: no chromium")
        return self

    async def navigate(self, url: str) -> None:
        self.calls.append("navigate")
        if self.fail_on == "navigate":
            raise NavigationError(f"Timeout while loading {url}")

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        if self.fail_on == "evaluate":
            raise PlaywrightError("Execution context was destroyed")
        if expression == SCROLL_OFFSET_JS:
            return -self.position
        if expression == SCROLL_TO_BOTTOM_JS:
            self.calls.append("bottom")
            self.position = self.scroll_height
        elif expression == SCROLL_BY_JS:
            self.calls.append("scroll")
            if not self.stuck:
                self.position = max(0, self.position + arg)
        elif expression == SCROLL_TO_TOP_JS:
            self.calls.append("top")
            self.position = 0
        return None

    async def content(self) -> str:
        self.calls.append("content")
        if self.fail_on == "content":
            raise PlaywrightError("Target page has been closed")
        return self.html

    async def screenshot(self) -> bytes:
        self.calls.append("screenshot")
        if self.fail_on == "screenshot":
            raise PlaywrightError("Target page has been closed")
        self.screenshot_position = self.position
        return self.screenshot_bytes

    async def close(self) -> None:
        self.close_count += 1
        self.calls.append("close")


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def config() -> ScraperConfig:
    return ScraperConfig(
        bucket_name="front-pages-screenshots",
        region="us-east-1",
        collector_base_url="https://collector.example.com",
        api_key="secret",
        scroll_delay=0,
    )


@pytest.fixture
def site() -> Site:
    return Site(
        id=7,
        name="New York Times",
        shortcode="nyt",
        url="https://news.example.com/",
        selector="div.front a",
    )


def make_site(shortcode: str, site_id: int = 1) -> Site:
    return Site(
        id=site_id,
        name=shortcode.upper(),
        shortcode=shortcode,
        url=f"https://{shortcode}.example.com/",
        selector="div.front a",
    )
