"""Small helpers shared by the publisher and the entry points."""

from __future__ import annotations

import datetime as dt
from typing import Optional


def iso_timestamp(moment: Optional[dt.datetime] = None) -> str:
    """Format a UTC instant the way JavaScript's ``toISOString`` does."""
    moment = moment or dt.datetime.now(dt.timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def join_url(base_url: str, path: str) -> str:
    """Join an API base URL and an absolute path without doubling slashes."""
    return base_url.rstrip("/") + "/" + path.lstrip("/")
