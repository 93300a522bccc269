"""Lazy-load completion: scroll a page up from the bottom until it settles."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

from playwright.async_api import Error as PlaywrightError

from .config import DEFAULT_MAX_SCROLL_ITERATIONS, DEFAULT_SCROLL_DELAY, DEFAULT_SCROLL_STEP
from .errors import DetectionError

logger = logging.getLogger("front_pages")

# Distance from the viewport top to the document top; zero once at the top.
SCROLL_OFFSET_JS = "() => window.document.documentElement.getBoundingClientRect().top"
SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, window.document.body.scrollHeight)"
SCROLL_BY_JS = "(dy) => window.scrollBy(0, dy)"
SCROLL_TO_TOP_JS = "() => window.scrollTo(0, 0)"

# Consecutive steps that fail to bring the offset closer to zero before giving up.
MAX_STALLED_STEPS = 3


class Evaluator(Protocol):
    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        ...


async def scroll_up_from_bottom(
    session: Evaluator,
    step: int = DEFAULT_SCROLL_STEP,
    delay: float = DEFAULT_SCROLL_DELAY,
    max_iterations: int = DEFAULT_MAX_SCROLL_ITERATIONS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> int:
    """Jump to the bottom, then climb ``step`` pixels every ``delay`` seconds.

    Lazy-loaded images only start fetching as they approach the viewport, and
    there is no signal for when they are done, so each step waits a fixed
    delay. Returns the number of upward steps taken; the page always ends at
    offset zero. Raises DetectionError if the page throws mid-scroll, the
    offset stops shrinking for ``MAX_STALLED_STEPS`` steps in a row, or the
    top is not reached within ``max_iterations`` steps.
    """
    iterations = 0
    stalled = 0
    previous: Optional[float] = None
    try:
        initial = await session.evaluate(SCROLL_OFFSET_JS)
        logger.debug("Initial scroll offset %s", initial)
        await session.evaluate(SCROLL_TO_BOTTOM_JS)
        while True:
            await sleep(delay)
            offset = await session.evaluate(SCROLL_OFFSET_JS)
            if not offset:
                await session.evaluate(SCROLL_TO_TOP_JS)
                logger.debug("Reached the top after %d scroll steps", iterations)
                return iterations
            if iterations >= max_iterations:
                raise DetectionError(
                    f"Page did not reach the top within {max_iterations} scroll steps "
                    f"(offset {offset})"
                )
            if previous is not None and abs(offset) >= abs(previous):
                stalled += 1
                logger.warning(
                    "Scroll offset did not shrink (%s -> %s); page may still be growing",
                    previous,
                    offset,
                )
                if stalled >= MAX_STALLED_STEPS:
                    raise DetectionError(
                        f"Scroll offset stuck at {offset} for {stalled} steps"
                    )
            else:
                stalled = 0
            previous = offset
            await session.evaluate(SCROLL_BY_JS, -step)
            iterations += 1
    except PlaywrightError as exc:
        raise DetectionError(f"Page evaluation failed while scrolling: {exc}") from exc
