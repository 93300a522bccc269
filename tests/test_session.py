from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from front_pages.errors import LaunchError, NavigationError
from front_pages.session import RenderSession


def _playwright_doubles():
    page = MagicMock()
    page.goto = AsyncMock()
    page.screenshot = AsyncMock(return_value=b"png")
    page.content = AsyncMock(return_value="<html></html>")
    page.evaluate = AsyncMock(return_value=-10)
    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()
    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()
    manager = MagicMock()
    manager.start = AsyncMock(return_value=playwright)
    factory = MagicMock(return_value=manager)
    return factory, playwright, browser, page


@pytest.mark.asyncio
async def test_open_uses_viewport_and_timeout():
    factory, playwright, browser, page = _playwright_doubles()

    async with RenderSession(navigation_timeout=12, playwright_factory=factory) as session:
        await session.navigate("https://news.example.com/")
        assert await session.screenshot() == b"png"
        assert await session.evaluate("() => 1") == -10

    playwright.chromium.launch.assert_awaited_once_with(headless=True)
    browser.new_page.assert_awaited_once_with(
        viewport={"width": 1440, "height": 900}, device_scale_factor=1
    )
    page.set_default_navigation_timeout.assert_called_once_with(12000)
    page.goto.assert_awaited_once_with("https://news.example.com/")
    page.screenshot.assert_awaited_once_with(full_page=True, type="png")
    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_close_is_idempotent_and_safe_before_open():
    factory, playwright, browser, _ = _playwright_doubles()
    session = RenderSession(playwright_factory=factory)

    await session.close()
    await session.open()
    await session.close()
    await session.close()

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_launch_failure_releases_driver():
    factory, playwright, _, _ = _playwright_doubles()
    playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

    with pytest.raises(LaunchError):
        await RenderSession(playwright_factory=factory).open()

    playwright.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_navigation_timeout_is_navigation_error():
    factory, _, browser, page = _playwright_doubles()
    page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
    session = RenderSession(playwright_factory=factory)
    await session.open()

    with pytest.raises(NavigationError):
        await session.navigate("https://slow.example.com/")

    await session.close()
    browser.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_navigation_failure_is_navigation_error():
    factory, _, _, page = _playwright_doubles()
    page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

    async with RenderSession(playwright_factory=factory) as session:
        with pytest.raises(NavigationError):
            await session.navigate("https://nowhere.invalid/")


@pytest.mark.asyncio
async def test_driver_stop_failure_does_not_mask_navigation_error():
    factory, playwright, browser, page = _playwright_doubles()
    page.goto.side_effect = PlaywrightError("net::ERR_CONNECTION_RESET")
    playwright.stop.side_effect = PlaywrightError("Connection closed")

    with pytest.raises(NavigationError):
        async with RenderSession(playwright_factory=factory) as session:
            await session.navigate("https://flaky.example.com/")

    browser.close.assert_awaited_once()
    playwright.stop.assert_awaited_once()
