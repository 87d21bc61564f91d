"""Cut items out of page text between start and end markers."""

import logging

from site2rss.config import EMPTY, DelimiterRule, Marker
from site2rss.models import RawItem

logger = logging.getLogger(__name__)


def cut_between(text: str, start: Marker, end: Marker) -> tuple[str, str] | None:
    """Return the text between `start` and the next `end`, and the text after `end`.

    Returns None when either marker is missing.
    """
    start_span = start.locate(text)
    if start_span is None:
        return None
    after = text[start_span[1]:]

    end_span = end.locate(after)
    if end_span is None:
        return None
    return after[:end_span[0]], after[end_span[1]:]


def extract_delimited(text: str, rule: DelimiterRule) -> list[RawItem]:
    """Extract items by repeatedly cutting fragments between the item markers.

    Extraction stops at the first missing item start or end marker. A fragment
    lacking a usable link is skipped; one lacking title or description markers
    is skipped unless the rule's missing-field policy is ``empty``.
    """
    items = []
    rest = text
    skipped = 0

    while True:
        cut = cut_between(rest, rule.item_start, rule.item_end)
        if cut is None:
            break
        fragment, rest = cut

        link = cut_between(fragment, rule.link_start, rule.link_end)
        if link is None or link[0].strip() in ("", "/"):
            skipped += 1
            continue

        title = _cut_field(fragment, rule.title_start, rule.title_end, rule.missing_fields)
        if title is None:
            skipped += 1
            continue

        description = ""
        if rule.description_start is not None and rule.description_end is not None:
            description = _cut_field(
                fragment, rule.description_start, rule.description_end, rule.missing_fields
            )
            if description is None:
                skipped += 1
                continue

        items.append(RawItem(title=title, link=link[0], description=description))

    if skipped:
        logger.debug("Skipped %d fragments with missing fields", skipped)
    return items


def _cut_field(fragment: str, start: Marker, end: Marker, missing_fields: str) -> str | None:
    cut = cut_between(fragment, start, end)
    if cut is not None:
        return cut[0]
    return "" if missing_fields == EMPTY else None
