"""Per-site orchestration: navigate, scroll, extract, capture, publish, report."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional

from .capture import capture_screenshot
from .config import ScraperConfig
from .errors import InternalError, ReportError, SnapshotError
from .extractor import get_headlines
from .models import Headline, Site, SiteOutcome, Snapshot
from .publisher import ArtifactPublisher
from .reporter import SnapshotReporter
from .scrolling import scroll_up_from_bottom
from .session import RenderSession

logger = logging.getLogger("front_pages")

SessionFactory = Callable[[ScraperConfig], RenderSession]


class SiteSnapshotOrchestrator:
    """Runs the snapshot pipeline for one site at a time.

    Each call to ``run`` opens its own RenderSession, so one orchestrator can
    serve concurrent runs for different sites.
    """

    def __init__(
        self,
        config: ScraperConfig,
        publisher: Optional[ArtifactPublisher] = None,
        reporter: Optional[SnapshotReporter] = None,
        session_factory: SessionFactory = RenderSession.from_config,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.publisher = publisher or ArtifactPublisher(config.bucket_name, config.region)
        self.reporter = reporter or SnapshotReporter(
            config.collector_base_url, config.api_key
        )
        self.session_factory = session_factory
        self._sleep = sleep

    async def _capture_and_publish(self, session: RenderSession, site: Site) -> str:
        steps = await scroll_up_from_bottom(
            session,
            step=self.config.scroll_step,
            delay=self.config.scroll_delay,
            max_iterations=self.config.max_scroll_iterations,
            sleep=self._sleep,
        )
        logger.info("Scrolled %s to the top in %d steps", site.shortcode, steps)
        artifact = await capture_screenshot(session)
        return await self.publisher.publish(artifact, site)

    async def snapshot(self, site: Site) -> Snapshot:
        """Run every stage for ``site``, raising the first SnapshotError hit."""
        session = self.session_factory(self.config)
        try:
            await session.open()
            await session.navigate(site.url)

            extracted, published = await asyncio.gather(
                get_headlines(session, site.selector),
                self._capture_and_publish(session, site),
                return_exceptions=True,
            )
            if isinstance(published, BaseException):
                if isinstance(extracted, BaseException):
                    logger.error(
                        "Headline extraction for %s also failed: %s",
                        site.shortcode,
                        extracted,
                    )
                raise published
            if isinstance(extracted, BaseException):
                if isinstance(extracted, SnapshotError):
                    extracted.filename = published
                raise extracted

            headlines: List[Headline] = extracted
            snapshot = Snapshot(site=site, filename=published, headlines=headlines)
            if not headlines:
                logger.warning(
                    "Selector %r matched no headlines on %s", site.selector, site.url
                )

            try:
                await self.reporter.report(site, snapshot.filename, snapshot.headlines)
            except ReportError as exc:
                exc.filename = snapshot.filename
                raise
            return snapshot
        finally:
            await session.close()

    def _failed(self, site: Site, exc: SnapshotError) -> SiteOutcome:
        logger.error(
            "Snapshot of '%s' failed at %s: [%s] %s",
            site.name,
            exc.stage,
            exc.kind,
            exc,
        )
        return SiteOutcome.failed(site, exc, filename=exc.filename)

    async def run(self, site: Site) -> SiteOutcome:
        """Snapshot ``site`` and return its outcome instead of raising."""
        start = time.perf_counter()
        try:
            snapshot = await self.snapshot(site)
        except SnapshotError as exc:
            return self._failed(site, exc)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected error snapshotting '%s'", site.name)
            error = InternalError(f"{type(exc).__name__}: {exc}")
            error.__cause__ = exc
            return self._failed(site, error)
        logger.info(
            "Snapshot of '%s' finished in %.2fs (%s, %d headlines)",
            site.name,
            time.perf_counter() - start,
            snapshot.filename,
            len(snapshot.headlines),
        )
        return SiteOutcome.succeeded(snapshot)
