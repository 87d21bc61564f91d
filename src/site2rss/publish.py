"""Render item lists as RSS, Atom and JSON feeds and hold the published result."""

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from feedgen.feed import FeedGenerator

from common.datetime import utc_now
from site2rss.config import Site
from site2rss.models import Item

logger = logging.getLogger(__name__)

JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"


@dataclass(frozen=True)
class PublishedFeeds:
    """The three renderings of one site's item list, replaced together."""
    rss: str
    atom: str
    json: str
    updated_at: datetime
    item_count: int


class FeedPublisher:
    """Renders a site's reconciled items; output depends only on the site and items."""

    def _build(self, site: Site, items: list[Item]) -> FeedGenerator:
        fg = FeedGenerator()
        fg.id(site.url)
        fg.title(site.title)
        fg.link(href=site.url, rel="alternate")
        # RSS requires a channel description.
        fg.description(site.description or site.title)
        fg.updated(_feed_updated(items))

        for item in items:
            fe = fg.add_entry(order="append")
            fe.id(item.link)
            fe.title(item.title or item.link)
            fe.link(href=item.link)
            if item.description:
                fe.description(item.description, isSummary=True)
            fe.published(item.first_seen_at)
            fe.updated(item.first_seen_at)
        return fg

    def to_rss(self, site: Site, items: list[Item]) -> str:
        return self._build(site, items).rss_str(pretty=True).decode("utf-8")

    def to_atom(self, site: Site, items: list[Item]) -> str:
        return self._build(site, items).atom_str(pretty=True).decode("utf-8")

    def to_json(self, site: Site, items: list[Item]) -> str:
        feed = {
            "version": JSON_FEED_VERSION,
            "title": site.title,
            "home_page_url": site.url,
            "description": site.description,
            "items": [
                {
                    "id": item.link,
                    "url": item.link,
                    "title": item.title,
                    "content_html": item.description,
                    "date_published": item.first_seen_at.isoformat(),
                }
                for item in items
            ],
        }
        return json.dumps(feed, ensure_ascii=False, indent=2)

    def render(self, site: Site, items: list[Item]) -> PublishedFeeds:
        """Render all three formats; raises before anything is published if one fails."""
        return PublishedFeeds(
            rss=self.to_rss(site, items),
            atom=self.to_atom(site, items),
            json=self.to_json(site, items),
            updated_at=utc_now(),
            item_count=len(items),
        )


def _feed_updated(items: list[Item]) -> datetime:
    if not items:
        return utc_now()
    return max(item.first_seen_at for item in items)


class FeedStore:
    """Lock-guarded map from site key to its last published feeds.

    The pipeline is the only writer; HTTP handlers only read.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._feeds: dict[str, PublishedFeeds] = {}

    def publish(self, site_key: str, feeds: PublishedFeeds) -> None:
        with self._lock:
            self._feeds[site_key] = feeds
        logger.debug("Published %d items for %s", feeds.item_count, site_key)

    def get(self, site_key: str) -> PublishedFeeds | None:
        with self._lock:
            return self._feeds.get(site_key)

    def snapshot(self) -> dict[str, PublishedFeeds]:
        with self._lock:
            return dict(self._feeds)
