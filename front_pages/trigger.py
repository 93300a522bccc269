"""Fleet trigger: fan a snapshot request out to every registered site."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List, Optional, Protocol, Sequence

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from .errors import InvocationError, SnapshotError
from .models import InvocationOutcome, Site
from .orchestrator import SiteSnapshotOrchestrator
from .registry import fetch_sites_async

logger = logging.getLogger("front_pages")


class Invoker(Protocol):
    name: str

    async def invoke(self, site: Site) -> InvocationOutcome:
        ...


class LambdaInvoker:
    """Asynchronously invokes the scraper function with one Site as payload."""

    def __init__(
        self, function_name: str, region: Optional[str] = None, client: Any = None
    ) -> None:
        self.name = function_name
        self.client = client or boto3.client("lambda", region_name=region)

    def invoke_sync(self, site: Site) -> InvocationOutcome:
        try:
            response = self.client.invoke(
                FunctionName=self.name,
                Payload=json.dumps(site.to_dict()).encode("utf-8"),
                InvocationType="Event",
            )
        except (BotoCoreError, ClientError) as exc:
            raise InvocationError(
                f"Invoking '{self.name}' for site '{site.name}' failed: {exc}"
            ) from exc

        if response.get("FunctionError"):
            raise InvocationError(
                f"'{self.name}' reported {response['FunctionError']} for site '{site.name}'"
            )
        payload = None
        body = response.get("Payload")
        if body is not None:
            raw = body.read()
            payload = raw.decode("utf-8") if raw else None
        return InvocationOutcome(site=site, ok=True, payload=payload)

    async def invoke(self, site: Site) -> InvocationOutcome:
        return await asyncio.to_thread(self.invoke_sync, site)


class LocalInvoker:
    """Runs the orchestrator in-process; each site gets its own browser."""

    name = "local"

    def __init__(self, orchestrator: SiteSnapshotOrchestrator) -> None:
        self.orchestrator = orchestrator

    async def invoke(self, site: Site) -> InvocationOutcome:
        outcome = await self.orchestrator.run(site)
        return InvocationOutcome(
            site=site,
            ok=outcome.ok,
            payload=outcome.to_dict(),
            error=None if outcome.ok else f"{outcome.error_kind}: {outcome.error_message}",
        )


async def _invoke_isolated(invoker: Invoker, site: Site) -> InvocationOutcome:
    logger.info("Invoking '%s' for site '%s'", invoker.name, site.name)
    try:
        outcome = await invoker.invoke(site)
    except SnapshotError as exc:
        outcome = InvocationOutcome(site=site, ok=False, error=f"{exc.kind}: {exc}")
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception(
            "Unexpected error invoking '%s' for site '%s'", invoker.name, site.name
        )
        outcome = InvocationOutcome(site=site, ok=False, error=repr(exc))

    if outcome.ok:
        logger.info("Invoking '%s' for site '%s' succeeded.", invoker.name, site.name)
        if outcome.payload:
            logger.info("Payload for site '%s': %s", site.name, outcome.payload)
    else:
        logger.error(
            "Invoking '%s' for site '%s' failed. Error: %s",
            invoker.name,
            site.name,
            outcome.error,
        )
    return outcome


async def run_fleet(sites: Sequence[Site], invoker: Invoker) -> List[InvocationOutcome]:
    """Issue every invocation at once; one site's failure never affects another."""
    outcomes = await asyncio.gather(*(_invoke_isolated(invoker, site) for site in sites))
    failed = sum(1 for outcome in outcomes if not outcome.ok)
    logger.info(
        "Issued %d invocations (%d succeeded, %d failed)",
        len(outcomes),
        len(outcomes) - failed,
        failed,
    )
    return list(outcomes)


async def trigger(
    registry_base_url: str,
    invoker: Invoker,
    session: Optional[requests.Session] = None,
) -> List[InvocationOutcome]:
    """Fetch the registered sites and fan out one invocation per site."""
    sites = await fetch_sites_async(registry_base_url, session)
    return await run_fleet(sites, invoker)
