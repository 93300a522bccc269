"""Snapshot reporting to the collector API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import ReportError
from .models import Headline, Site
from .utils import join_url

logger = logging.getLogger("front_pages")

SNAPSHOTS_PATH = "/snapshots/create"


def build_payload(
    api_key: str, site: Site, filename: str, headlines: List[Headline]
) -> Dict[str, Any]:
    return {
        "api_key": api_key,
        "snapshot": {
            "site_id": site.id,
            "filename": filename,
            "headlines": [headline.to_dict() for headline in headlines],
        },
    }


class SnapshotReporter:
    """Posts one snapshot per run to ``{base_url}/snapshots/create``. No retries."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return join_url(self.base_url, SNAPSHOTS_PATH)

    def report_sync(
        self, site: Site, filename: str, headlines: List[Headline]
    ) -> Dict[str, Any]:
        payload = build_payload(self.api_key, site, filename, headlines)
        try:
            resp = self.session.post(
                self.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ReportError(f"Collector unreachable at {self.endpoint}: {exc}") from exc

        status = getattr(resp, "status_code", None)
        if status is None or status >= 400:
            raise ReportError(
                f"Collector rejected snapshot for {site.shortcode} (status {status})"
            )
        logger.info("Reported %s with %d headlines", filename, len(headlines))
        return {"status": status}

    async def report(
        self, site: Site, filename: str, headlines: List[Headline]
    ) -> Dict[str, Any]:
        return await asyncio.to_thread(self.report_sync, site, filename, headlines)
