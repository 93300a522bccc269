"""Full-page screenshot capture and validation."""

from __future__ import annotations

import logging
from typing import Any, Optional

from filetype import guess
from playwright.async_api import Error as PlaywrightError

from .errors import CaptureError
from .models import Artifact

logger = logging.getLogger("front_pages")


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        return kind.extension.lower()
    return None


async def capture_screenshot(session: Any) -> Artifact:
    """Take a full-page PNG of the session's page.

    Call only once the page has been scrolled to its completion point.
    """
    try:
        data = await session.screenshot()
    except PlaywrightError as exc:
        raise CaptureError(f"Screenshot failed: {exc}") from exc
    if not data:
        raise CaptureError("Screenshot returned no data")
    detected = detect_image_format(data)
    if detected != "png":
        raise CaptureError(f"Screenshot is not a PNG (detected {detected or 'unknown'})")
    logger.debug("Captured %d byte screenshot", len(data))
    return Artifact(data=data)
