"""Exception types raised by the snapshot pipeline."""

from __future__ import annotations

from typing import Optional


class SnapshotError(Exception):
    """Base class for every failure surfaced as a site outcome."""

    stage = "snapshot"
    # Key of an artifact already published when the run failed, if any.
    filename: Optional[str] = None

    @property
    def kind(self) -> str:
        return type(self).__name__


class ConfigurationError(SnapshotError):
    """A required setting is missing or malformed."""

    stage = "config"


class LaunchError(SnapshotError):
    stage = "launch"


class NavigationError(SnapshotError):
    stage = "navigate"


class DetectionError(SnapshotError):
    """Scrolling the page to its completion point failed."""

    stage = "detect"


class CaptureError(SnapshotError):
    stage = "capture"


class PublishError(SnapshotError):
    """Upload or ACL update failed; the object may exist without its ACL."""

    stage = "publish"


class ReportError(SnapshotError):
    """The collector rejected the snapshot or could not be reached."""

    stage = "report"


class RegistryError(SnapshotError):
    stage = "registry"


class InvocationError(SnapshotError):
    stage = "invoke"


class ExtractionError(SnapshotError):
    """The selector was invalid or the page HTML could not be read."""

    stage = "extract"


class InternalError(SnapshotError):
    """An unexpected exception escaped a stage; wraps the original."""
