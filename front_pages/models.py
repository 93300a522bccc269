"""Data models used throughout the snapshot pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import ConfigurationError, SnapshotError


@dataclass(frozen=True)
class Site:
    """A registered front page and the selector that finds its headlines."""

    id: int
    name: str
    shortcode: str
    url: str
    selector: str
    script: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Site":
        """Build a Site from a registry record, ignoring unknown keys."""
        missing = [
            key
            for key in ("id", "name", "shortcode", "url", "selector")
            if data.get(key) in (None, "")
        ]
        if missing:
            raise ConfigurationError(
                f"Site record is missing required fields: {', '.join(missing)}"
            )
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            shortcode=str(data["shortcode"]),
            url=str(data["url"]),
            selector=str(data["selector"]),
            script=data.get("script"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Headline:
    """A (title, url) pair recovered from an element matching the selector."""

    title: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "url": self.url}


@dataclass(frozen=True)
class Artifact:
    """Raw PNG bytes captured from the page."""

    data: bytes
    content_type: str = "image/png"


@dataclass(frozen=True)
class Snapshot:
    """Headlines and the artifact key captured from one rendered page."""

    site: Site
    filename: str
    headlines: List[Headline] = field(default_factory=list)


@dataclass
class SiteOutcome:
    """Result of one orchestrator run, success or typed failure."""

    site: Site
    ok: bool
    filename: Optional[str] = None
    headline_count: int = 0
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def succeeded(cls, snapshot: Snapshot) -> "SiteOutcome":
        return cls(
            site=snapshot.site,
            ok=True,
            filename=snapshot.filename,
            headline_count=len(snapshot.headlines),
        )

    @classmethod
    def failed(
        cls, site: Site, error: SnapshotError, filename: Optional[str] = None
    ) -> "SiteOutcome":
        return cls(
            site=site,
            ok=False,
            filename=filename,
            error_kind=error.kind,
            error_message=str(error),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site": self.site.shortcode,
            "ok": self.ok,
            "filename": self.filename,
            "headlines": self.headline_count,
            "error": self.error_kind,
            "message": self.error_message,
        }


@dataclass
class InvocationOutcome:
    """Result of handing one site to the invocation transport."""

    site: Site
    ok: bool
    payload: Optional[Any] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site": self.site.shortcode,
            "ok": self.ok,
            "payload": self.payload,
            "error": self.error,
        }
