"""Merge freshly extracted items with the previous snapshot.

Items keep the first-seen timestamp of their earlier appearance, so items
that are new this cycle are the ones whose timestamp is the cycle's clock
reading. The result is newest-first and free of duplicates.
"""

import logging
from dataclasses import replace
from datetime import timedelta

from site2rss.models import Item

logger = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


def reconcile(fresh: list[Item], prior: list[Item]) -> list[Item]:
    """Carry prior timestamps forward, then order and deduplicate.

    Args:
        fresh: Items from this cycle, in extraction order.
        prior: The previous snapshot.

    Returns:
        Items sorted by first-seen time, newest first; ties keep input order.
    """
    known = {}
    for old in prior:
        known.setdefault(old.identity, old.first_seen_at)
    latest_prior = max(known.values(), default=None)

    merged = []
    new_count = 0
    for item in fresh:
        first_seen_at = known.get(item.identity)
        if first_seen_at is None:
            new_count += 1
            first_seen_at = item.first_seen_at
            # A new item must sort above everything already known.
            if latest_prior is not None and first_seen_at <= latest_prior:
                first_seen_at = latest_prior + _TICK
        if first_seen_at != item.first_seen_at:
            item = replace(item, first_seen_at=first_seen_at)
        merged.append(item)

    merged.sort(key=lambda item: item.first_seen_at, reverse=True)
    result = deduplicate(merged)

    logger.debug(
        "Reconciled %d fresh items against %d prior: %d new, %d duplicates dropped",
        len(fresh), len(prior), new_count, len(merged) - len(result),
    )
    return result


def deduplicate(items: list[Item]) -> list[Item]:
    """Keep the first occurrence of each identity, preserving order."""
    seen = set()
    result = []
    for item in items:
        if item.identity in seen:
            continue
        seen.add(item.identity)
        result.append(item)
    return result
