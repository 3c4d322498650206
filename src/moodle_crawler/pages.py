from __future__ import annotations

import logging
from typing import Callable, Iterator

from bs4 import BeautifulSoup, Tag

from .urls import Resource

logger = logging.getLogger(__name__)

MAIN_REGION_CLASS = "region-main"

# Only these elements are followed; stylesheets, scripts and forms are not.
_LINK_ATTRIBUTES = {"a": "href", "img": "src"}


def _is_main_region(tag: Tag) -> bool:
    return tag.name == "div" and MAIN_REGION_CLASS in (tag.get("class") or [])


def find_body_and_content(soup: BeautifulSoup) -> tuple[Tag | None, Tag | None]:
    """Return the ``body`` element and the first main-region div inside it.

    The body is only reported when it is an ancestor of the content node.
    """

    content = soup.find(_is_main_region)
    if content is None:
        return None, None
    return content.find_parent("body"), content


def splice_main_region(soup: BeautifulSoup) -> bool:
    """Make the main region the only child of ``body``.

    Returns False and leaves the document untouched when either node is
    missing.
    """

    body, content = find_body_and_content(soup)
    if body is None or content is None:
        return False
    content.extract()
    body.clear()
    body.append(content)
    return True


def iter_link_targets(soup: BeautifulSoup) -> Iterator[str]:
    for tag in soup.find_all(list(_LINK_ATTRIBUTES)):
        value = tag.get(_LINK_ATTRIBUTES[tag.name])
        if value is None:
            continue
        yield str(value)


def process_page(
    body: bytes,
    resource: Resource,
    enqueue: Callable[[str, Resource], object],
) -> str:
    """Queue every link of a fetched page and return the pruned document.

    Links are collected from the whole page before pruning, so navigation
    outside the content region still drives discovery.
    """

    soup = BeautifulSoup(body, "html.parser")

    for target in iter_link_targets(soup):
        enqueue(target, resource)

    if not splice_main_region(soup):
        logger.warning("found html without expected structure: %s", resource)

    return str(soup)
