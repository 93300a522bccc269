"""Headline extraction: recover (title, url) pairs from selector matches."""

from __future__ import annotations

import logging
import re
from typing import Any, List, Optional, Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from playwright.async_api import Error as PlaywrightError
from soupsieve import SelectorSyntaxError

from .errors import ExtractionError
from .models import Headline

logger = logging.getLogger("front_pages")

_WHITESPACE = re.compile(r"\s+")
_SKIP_TAGS = {"script", "style", "noscript", "template"}


class DomNode(Protocol):
    """The four capabilities the headline walks need from a DOM node."""

    def link_href(self) -> Optional[str]:
        ...

    def own_text(self) -> Optional[str]:
        ...

    def parent(self) -> Optional["DomNode"]:
        ...

    def first_child(self) -> Optional["DomNode"]:
        ...


def _normalize(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _is_text(element: Any) -> bool:
    return isinstance(element, NavigableString) and not isinstance(
        element, PreformattedString
    )


class SoupNode:
    """DomNode adapter over a BeautifulSoup element."""

    def __init__(self, element: Any) -> None:
        self.element = element

    def link_href(self) -> Optional[str]:
        element = self.element
        if isinstance(element, Tag) and element.name == "a":
            href = element.get("href")
            if isinstance(href, str) and href.strip():
                return href.strip()
        return None

    def own_text(self) -> Optional[str]:
        element = self.element
        if _is_text(element):
            text = _normalize(str(element))
        elif isinstance(element, Tag) and element.name not in _SKIP_TAGS:
            text = _normalize(
                " ".join(str(child) for child in element.children if _is_text(child))
            )
        else:
            return None
        return text or None

    def parent(self) -> Optional["SoupNode"]:
        parent = self.element.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return SoupNode(parent)

    def first_child(self) -> Optional["SoupNode"]:
        if not isinstance(self.element, Tag):
            return None
        for child in self.element.children:
            if isinstance(child, Tag):
                if child.name in _SKIP_TAGS:
                    continue
                return SoupNode(child)
            if _is_text(child) and child.strip():
                return SoupNode(child)
        return None


def resolve_url(node: DomNode, base_url: str) -> Optional[str]:
    """Return the absolute href of the node itself or its nearest link ancestor."""
    current: Optional[DomNode] = node
    while current is not None:
        href = current.link_href()
        if href:
            return urljoin(base_url, href)
        current = current.parent()
    return None


def resolve_title(node: DomNode) -> Optional[str]:
    """Return the node's own text, descending through first children if empty."""
    current: Optional[DomNode] = node
    while current is not None:
        text = current.own_text()
        if text:
            return text
        current = current.first_child()
    return None


def extract_headlines(html: str, selector: str, base_url: str) -> List[Headline]:
    """Match ``selector`` in ``html`` and keep matches with both title and URL."""
    soup = BeautifulSoup(html, "html.parser")
    try:
        matches = soup.select(selector)
    except SelectorSyntaxError as exc:
        raise ExtractionError(f"Invalid selector {selector!r}: {exc}") from exc

    # Relative hrefs resolve against <base href> when the document declares one.
    base = soup.find("base", href=True)
    if base is not None and base["href"].strip():
        base_url = urljoin(base_url, base["href"].strip())

    headlines: List[Headline] = []
    for element in matches:
        node = SoupNode(element)
        url = resolve_url(node, base_url)
        title = resolve_title(node)
        if not url or not title:
            logger.debug("Dropping match without %s", "url" if not url else "title")
            continue
        headlines.append(Headline(title=title, url=url))
    return headlines


async def get_headlines(session: Any, selector: str) -> List[Headline]:
    """Read the rendered DOM from an open session and extract its headlines."""
    try:
        html = await session.content()
        base_url = session.url
    except PlaywrightError as exc:
        raise ExtractionError(f"Could not read page HTML: {exc}") from exc
    headlines = extract_headlines(html, selector, base_url)
    logger.info("Found %d headlines on %s", len(headlines), base_url)
    return headlines
