"""Site registry client."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import requests

from .errors import ConfigurationError, RegistryError
from .models import Site
from .utils import join_url

logger = logging.getLogger("front_pages")


def fetch_sites(
    base_url: str, session: Optional[requests.Session] = None, timeout: float = 30.0
) -> List[Site]:
    """GET ``{base_url}/sites`` and parse the ``sites`` array."""
    session = session or requests.Session()
    url = join_url(base_url, "/sites")
    try:
        resp = session.get(url, timeout=timeout)
        resp.raise_for_status()
        body = resp.json()
    except requests.RequestException as exc:
        raise RegistryError(f"Failed to fetch sites from {url}: {exc}") from exc
    except ValueError as exc:
        raise RegistryError(f"Site registry at {url} returned invalid JSON") from exc

    records = body.get("sites") if isinstance(body, dict) else None
    if not isinstance(records, list):
        raise RegistryError(f"Site registry at {url} returned no 'sites' array")
    sites: List[Site] = []
    for index, record in enumerate(records):
        try:
            sites.append(Site.from_dict(record))
        except (AttributeError, ConfigurationError, TypeError, ValueError) as exc:
            logger.error("Skipping malformed site record #%d from %s: %s", index, url, exc)
    logger.info("Fetched %d of %d sites from %s", len(sites), len(records), url)
    return sites


async def fetch_sites_async(
    base_url: str, session: Optional[requests.Session] = None
) -> List[Site]:
    return await asyncio.to_thread(fetch_sites, base_url, session)
