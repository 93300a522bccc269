"""Serverless entry points for the scraper and the fleet trigger."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import ScraperConfig, TriggerConfig
from .errors import ConfigurationError, SnapshotError
from .models import Site
from .orchestrator import SiteSnapshotOrchestrator
from .trigger import LambdaInvoker, trigger

logger = logging.getLogger("front_pages.handler")
logging.getLogger("front_pages").setLevel(logging.INFO)


def _failure(exc: SnapshotError) -> Dict[str, Any]:
    logger.error("[%s] %s", exc.kind, exc)
    return {"ok": False, "error": exc.kind, "message": str(exc)}


def scraper_handler(
    event: Mapping[str, Any],
    context: Any = None,
    env: Optional[Mapping[str, str]] = None,
    orchestrator_factory: Callable[
        [ScraperConfig], SiteSnapshotOrchestrator
    ] = SiteSnapshotOrchestrator,
) -> Dict[str, Any]:
    """Snapshot the site given as the invocation payload."""
    try:
        config = ScraperConfig.from_env(env)
        site = Site.from_dict(event)
    except ConfigurationError as exc:
        return _failure(exc)
    orchestrator = orchestrator_factory(config)
    return asyncio.run(orchestrator.run(site)).to_dict()


def trigger_handler(
    event: Any = None,
    context: Any = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, Any]] | Dict[str, Any]:
    """Scheduled entry point: invoke the scraper function once per site."""
    try:
        config = TriggerConfig.from_env(env)
    except ConfigurationError as exc:
        return _failure(exc)
    invoker = LambdaInvoker(config.function_name, region=config.region)
    try:
        outcomes = asyncio.run(trigger(config.registry_base_url, invoker))
    except SnapshotError as exc:
        return _failure(exc)
    return [outcome.to_dict() for outcome in outcomes]
