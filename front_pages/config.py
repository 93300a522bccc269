"""Configuration objects and constants for the snapshot pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigurationError

DEFAULT_API_URL = "https://front-pages.herokuapp.com"
DEFAULT_SCROLL_STEP = 1024
DEFAULT_SCROLL_DELAY = 3.0
DEFAULT_MAX_SCROLL_ITERATIONS = 200
DEFAULT_VIEWPORT_WIDTH = 1440
DEFAULT_VIEWPORT_HEIGHT = 900


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class ScraperConfig:
    """Settings for one site snapshot run: storage, collector, and scroll policy."""

    bucket_name: str
    region: str
    collector_base_url: str = DEFAULT_API_URL
    api_key: str = ""
    navigation_timeout: float = 30.0
    scroll_step: int = DEFAULT_SCROLL_STEP
    scroll_delay: float = DEFAULT_SCROLL_DELAY
    max_scroll_iterations: int = DEFAULT_MAX_SCROLL_ITERATIONS
    viewport_width: int = DEFAULT_VIEWPORT_WIDTH
    viewport_height: int = DEFAULT_VIEWPORT_HEIGHT

    def __post_init__(self) -> None:
        if not self.bucket_name:
            raise ConfigurationError(
                "BUCKET_NAME must be set with the name of the bucket to save screenshots to."
            )
        if not self.region:
            raise ConfigurationError(
                "AWS_REGION must be set so screenshot URLs can be built."
            )
        if self.scroll_step <= 0:
            raise ConfigurationError("SCROLL_STEP must be a positive number of pixels.")
        if self.scroll_delay < 0:
            raise ConfigurationError("SCROLL_DELAY must not be negative.")
        if self.max_scroll_iterations <= 0:
            raise ConfigurationError("The scroll iteration cap must be positive.")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ScraperConfig":
        env = os.environ if env is None else env
        return cls(
            bucket_name=env.get("BUCKET_NAME", ""),
            region=env.get("AWS_REGION", ""),
            collector_base_url=env.get("FRONT_PAGES_API_URL") or DEFAULT_API_URL,
            api_key=env.get("FRONT_PAGES_API_KEY", ""),
            scroll_step=_number(env, "SCROLL_STEP", DEFAULT_SCROLL_STEP, int),
            scroll_delay=_number(env, "SCROLL_DELAY", DEFAULT_SCROLL_DELAY, float),
        )


@dataclass(frozen=True)
class TriggerConfig:
    """Settings for fanning a snapshot request out to every registered site."""

    function_name: str
    region: Optional[str] = None
    registry_base_url: str = DEFAULT_API_URL

    def __post_init__(self) -> None:
        if not self.function_name:
            raise ConfigurationError(
                "SCRAPER_FUNCTION_NAME must be set with the name of the function "
                "that scrapes the sites."
            )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "TriggerConfig":
        env = os.environ if env is None else env
        return cls(
            function_name=env.get("SCRAPER_FUNCTION_NAME", ""),
            region=env.get("AWS_REGION") or None,
            registry_base_url=env.get("FRONT_PAGES_API_URL") or DEFAULT_API_URL,
        )
