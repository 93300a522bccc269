"""Command-line entry point for front page snapshots."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from .config import DEFAULT_API_URL, ScraperConfig, TriggerConfig
from .errors import SnapshotError
from .extractor import get_headlines
from .models import Site
from .orchestrator import SiteSnapshotOrchestrator
from .publisher import ArtifactPublisher
from .session import RenderSession
from .trigger import LambdaInvoker, LocalInvoker, trigger

logger = logging.getLogger("front_pages.cli")


def _add_scroll_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    parser.add_argument(
        "--scroll-step",
        type=int,
        default=None,
        help="Pixels to scroll up per step (default: SCROLL_STEP or 1024)",
    )
    parser.add_argument(
        "--scroll-delay",
        type=float,
        default=None,
        help="Seconds to wait between scroll steps (default: SCROLL_DELAY or 3)",
    )


def _add_verbose(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Capture front page screenshots and headlines and report them to the collector.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    snapshot_parser = subparsers.add_parser(
        "snapshot", help="Snapshot a single site and report it"
    )
    snapshot_parser.add_argument(
        "--site-json",
        type=Path,
        help="Path to a JSON file holding one site record",
    )
    snapshot_parser.add_argument("--id", type=int, help="Site id")
    snapshot_parser.add_argument("--name", help="Site name")
    snapshot_parser.add_argument("--shortcode", help="Short code used in the screenshot key")
    snapshot_parser.add_argument("--url", help="Front page URL")
    snapshot_parser.add_argument("--selector", help="CSS selector matching headlines")
    _add_scroll_arguments(snapshot_parser)
    _add_verbose(snapshot_parser)

    trigger_parser = subparsers.add_parser(
        "trigger", help="Invoke a snapshot for every registered site"
    )
    trigger_parser.add_argument(
        "--local",
        action="store_true",
        help="Run every snapshot in this process instead of invoking the scraper function",
    )
    _add_scroll_arguments(trigger_parser)
    _add_verbose(trigger_parser)

    headlines_parser = subparsers.add_parser(
        "headlines", help="Print the headlines a selector finds on a page"
    )
    headlines_parser.add_argument("url", help="Page to load")
    headlines_parser.add_argument("selector", help="CSS selector matching headlines")
    headlines_parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Navigation timeout in seconds",
    )
    _add_verbose(headlines_parser)

    acl_parser = subparsers.add_parser(
        "fix-acl", help="Re-apply the bucket-owner-full-control ACL to screenshots"
    )
    acl_parser.add_argument("keys", nargs="+", help="Screenshot keys to fix")
    _add_verbose(acl_parser)

    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _scraper_config(args: argparse.Namespace) -> ScraperConfig:
    config = ScraperConfig.from_env()
    overrides = {"navigation_timeout": args.timeout}
    if args.scroll_step is not None:
        overrides["scroll_step"] = args.scroll_step
    if args.scroll_delay is not None:
        overrides["scroll_delay"] = args.scroll_delay
    return dataclasses.replace(config, **overrides)


def _load_site(args: argparse.Namespace) -> Site:
    if args.site_json:
        return Site.from_dict(json.loads(args.site_json.read_text(encoding="utf-8")))
    return Site.from_dict(
        {
            "id": args.id,
            "name": args.name or args.shortcode,
            "shortcode": args.shortcode,
            "url": args.url,
            "selector": args.selector,
        }
    )


def _run_snapshot(args: argparse.Namespace) -> int:
    config = _scraper_config(args)
    site = _load_site(args)
    outcome = asyncio.run(SiteSnapshotOrchestrator(config).run(site))
    print(json.dumps(outcome.to_dict(), indent=2))
    return 0 if outcome.ok else 1


def _run_trigger(args: argparse.Namespace) -> int:
    if args.local:
        invoker = LocalInvoker(SiteSnapshotOrchestrator(_scraper_config(args)))
        registry_url = os.environ.get("FRONT_PAGES_API_URL") or DEFAULT_API_URL
    else:
        config = TriggerConfig.from_env()
        invoker = LambdaInvoker(config.function_name, region=config.region)
        registry_url = config.registry_base_url
    outcomes = asyncio.run(trigger(registry_url, invoker))
    print(json.dumps([outcome.to_dict() for outcome in outcomes], indent=2))
    return 0


async def _print_headlines(url: str, selector: str, timeout: float) -> None:
    async with RenderSession(navigation_timeout=timeout) as session:
        await session.navigate(url)
        headlines = await get_headlines(session, selector)
    print(json.dumps([headline.to_dict() for headline in headlines], indent=2))


def _run_fix_acl(args: argparse.Namespace) -> int:
    bucket = os.environ.get("BUCKET_NAME", "")
    if not bucket:
        logger.error("BUCKET_NAME must be set with the name of the screenshot bucket.")
        return 2
    publisher = ArtifactPublisher(bucket, os.environ.get("AWS_REGION", ""))
    results = publisher.fix_acls(args.keys)
    return 0 if all(error is None for error in results.values()) else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    load_dotenv()
    _configure_logging(args.verbose)
    try:
        if args.command == "snapshot":
            return _run_snapshot(args)
        if args.command == "trigger":
            return _run_trigger(args)
        if args.command == "headlines":
            asyncio.run(_print_headlines(args.url, args.selector, args.timeout))
            return 0
        return _run_fix_acl(args)
    except SnapshotError as exc:
        logger.error("[%s] %s", exc.kind, exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
