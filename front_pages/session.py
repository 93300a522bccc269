"""Render session owning one Chromium process and one page per run."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH, ScraperConfig
from .errors import LaunchError, NavigationError

logger = logging.getLogger("front_pages")


class RenderSession:
    """Scoped browser page: open, navigate, evaluate, screenshot, close.

    Use as ``async with RenderSession() as session``; the browser is
    released on every exit path and ``close`` may be called more than once.
    """

    def __init__(
        self,
        navigation_timeout: float = 30.0,
        viewport_width: int = DEFAULT_VIEWPORT_WIDTH,
        viewport_height: int = DEFAULT_VIEWPORT_HEIGHT,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.navigation_timeout = navigation_timeout
        self.viewport = {"width": viewport_width, "height": viewport_height}
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    @classmethod
    def from_config(cls, config: ScraperConfig) -> "RenderSession":
        return cls(
            navigation_timeout=config.navigation_timeout,
            viewport_width=config.viewport_width,
            viewport_height=config.viewport_height,
        )

    async def __aenter__(self) -> "RenderSession":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise LaunchError("Render session is not open")
        return self._page

    @property
    def url(self) -> str:
        return self.page.url

    async def open(self) -> "RenderSession":
        """Start Playwright, launch headless Chromium and create the page."""
        try:
            self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(headless=True)
            self._page = await self._browser.new_page(
                viewport=self.viewport,
                device_scale_factor=1,
            )
            self._page.set_default_navigation_timeout(self.navigation_timeout * 1000)
        except PlaywrightError as exc:
            await self.close()
            raise LaunchError(f"Could not launch browser: {exc}") from exc
        return self

    async def navigate(self, url: str) -> None:
        logger.info("Loading %s", url)
        try:
            await self.page.goto(url)
        except PlaywrightTimeoutError as exc:
            raise NavigationError(f"Timeout while loading {url}: {exc}") from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Failed to load {url}: {exc}") from exc

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        return await self.page.evaluate(expression, arg)

    async def content(self) -> str:
        return await self.page.content()

    async def screenshot(self) -> bytes:
        return await self.page.screenshot(full_page=True, type="png")

    async def close(self) -> None:
        """Release the browser and Playwright driver; safe to repeat."""
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        self._page = None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as exc:
                logger.warning("Failed to close browser cleanly: %s", exc)
        if playwright is not None:
            try:
                await playwright.stop()
            except PlaywrightError as exc:
                logger.warning("Failed to stop Playwright cleanly: %s", exc)
