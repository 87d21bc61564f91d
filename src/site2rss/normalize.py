"""Turn raw extracted fields into canonical items."""

import html
import logging
from datetime import datetime
from urllib.parse import urljoin, urlsplit

from common.datetime import utc_now
from site2rss.models import Item, RawItem

logger = logging.getLogger(__name__)


def resolve_link(raw_link: str, origin: str) -> str:
    """Resolve `raw_link` against the host of `origin`.

    Relative and root-relative paths land on the origin host. Links that
    already carry an http(s) scheme, or are protocol-relative, keep their host.
    Returns an empty string for empty or root-only links and for links with
    any other scheme (``mailto:``, ``javascript:``, ...).
    """
    link = raw_link.strip()
    if link in ("", "/"):
        return ""

    scheme = urlsplit(link).scheme.lower()
    if scheme in ("http", "https"):
        return link
    if scheme:
        return ""

    host = urlsplit(origin).netloc or origin.strip("/")
    return urljoin(f"https://{host}/", link)


def clean_text(text: str) -> str:
    """Unescape HTML entities and trim surrounding whitespace."""
    return html.unescape(text).strip()


def normalize(raw: RawItem, origin: str, seen_at: datetime | None = None) -> Item | None:
    """Normalize one raw item; returns None if it has no usable link.

    `seen_at` is the first-seen placeholder; reconciliation replaces it for
    items that were already known.
    """
    link = resolve_link(raw.link, origin)
    if not link:
        return None

    return Item(
        title=clean_text(raw.title),
        link=link,
        description=clean_text(raw.description),
        first_seen_at=seen_at or utc_now(),
    )


def normalize_items(raw_items: list[RawItem], origin: str, seen_at: datetime | None = None) -> list[Item]:
    """Normalize raw items in order, dropping those without a usable link.

    All items share one timestamp so that items new in the same cycle keep
    their extraction order after reconciliation.
    """
    seen_at = seen_at or utc_now()
    items = []
    for raw in raw_items:
        item = normalize(raw, origin, seen_at)
        if item is None:
            logger.debug("Dropping item without link: %r", raw.title)
            continue
        items.append(item)
    return items
