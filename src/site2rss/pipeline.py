"""Core update logic: fetch, extract, normalize, reconcile, persist and publish.

Sites are processed one after another. A failure in one site is logged and
leaves its previously published feeds in place; other sites are unaffected.
"""

import logging
import threading
import time
from datetime import datetime

from common.datetime import utc_now
from site2rss.config import Site
from site2rss.extract import extract
from site2rss.fetch import PageFetcher
from site2rss.normalize import normalize_items
from site2rss.publish import FeedPublisher, FeedStore
from site2rss.reconcile import reconcile
from site2rss.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


def update_site(
    site: Site,
    fetcher: PageFetcher,
    snapshots: SnapshotStore,
    publisher: FeedPublisher,
    feed_store: FeedStore,
    now: datetime | None = None,
) -> int:
    """Run one update for a single site.

    Args:
        site: The site to update
        fetcher: Page fetcher
        snapshots: Snapshot store holding the previous item list
        publisher: Feed renderer
        feed_store: Published feeds read by the HTTP layer
        now: Clock reading used as first-seen time for new items

    Returns:
        Number of items in the published feed

    Raises:
        Site2RSSError: If fetching, extraction or snapshot I/O fails. Nothing
            is published in that case.
    """
    # Read the clock before comparing with the snapshot.
    seen_at = now or utc_now()

    page = fetcher.fetch(site.url)
    raw_items = extract(page.content, site.rule, page.encoding)
    fresh = normalize_items(raw_items, site.url, seen_at)
    logger.info("Extracted %d items from %s (%d raw)", len(fresh), site.name, len(raw_items))

    prior = snapshots.load(site.name)
    items = reconcile(fresh, prior)

    for item in items:
        logger.debug(
            "found site=%s title=%r description=%r link=%s",
            site.name, item.title, item.description, item.link,
        )

    snapshots.save(site.name, items)
    feed_store.publish(site.key, publisher.render(site, items))
    return len(items)


def run_cycle(
    sites: list[Site],
    fetcher: PageFetcher,
    snapshots: SnapshotStore,
    publisher: FeedPublisher,
    feed_store: FeedStore,
) -> dict[str, int | None]:
    """Update every site once.

    Returns:
        Mapping of site name to item count, or None for sites that failed
    """
    logger.info("Starting update cycle for %d sites", len(sites))
    start_time = time.monotonic()

    results: dict[str, int | None] = {}
    for site in sites:
        try:
            results[site.name] = update_site(site, fetcher, snapshots, publisher, feed_store)
        except Exception as e:
            logger.error("Failed to update %s: %s", site.name, e)
            results[site.name] = None
            continue

    failed = [name for name, count in results.items() if count is None]
    elapsed = time.monotonic() - start_time
    logger.info(
        "Update cycle complete in %.2fs: %s",
        elapsed,
        ", ".join(f"{name}={count}" for name, count in results.items() if count is not None) or "no updates",
    )
    if failed:
        logger.error("Failed sites: %s", failed)
    return results


class Poller:
    """Runs update cycles on a background thread at a fixed interval."""

    def __init__(
        self,
        sites: list[Site],
        interval: float,
        fetcher: PageFetcher,
        snapshots: SnapshotStore,
        publisher: FeedPublisher,
        feed_store: FeedStore,
    ):
        self.sites = sites
        self.interval = interval
        self.fetcher = fetcher
        self.snapshots = snapshots
        self.publisher = publisher
        self.feed_store = feed_store
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def run_once(self) -> dict[str, int | None]:
        return run_cycle(self.sites, self.fetcher, self.snapshots, self.publisher, self.feed_store)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.run_once()
            except Exception:
                logger.exception("Update cycle failed")
            if self._stop.wait(self.interval):
                break
        logger.info("Poller stopped")

    def start(self) -> None:
        """Start the loop; a loop still finishing after `stop` is waited for first."""
        if self._thread is not None and self._thread.is_alive():
            if not self._stop.is_set():
                return
            logger.info("Waiting for the previous poller to finish its cycle")
            self._thread.join()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="site2rss-poller", daemon=True)
        self._thread.start()
        logger.info("Poller started: %d sites every %.0fs", len(self.sites), self.interval)

    def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to stop and wait for the current cycle to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Poller still finishing its cycle after %ss", timeout)
            else:
                self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
