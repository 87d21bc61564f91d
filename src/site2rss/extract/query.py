"""Select items with CSS selectors."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from site2rss.config import SKIP, QueryRule
from site2rss.errors import ExtractionError
from site2rss.models import RawItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldQuery:
    """A parsed ``selector@attribute`` expression."""
    selector: str | None
    attribute: str | None

    @classmethod
    def parse(cls, expression: str) -> FieldQuery:
        selector, _, attribute = expression.partition("@")
        return cls(selector=selector.strip() or None, attribute=attribute.strip() or None)

    def read(self, node: Tag) -> str | None:
        """Return the field value under `node`, or None if nothing matched."""
        target = node.select_one(self.selector) if self.selector else node
        if target is None:
            return None
        if self.attribute is None:
            return target.get_text()
        value = target.get(self.attribute)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return value


def parse_document(text: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(text, "lxml")
    except Exception as e:
        raise ExtractionError(f"Failed to parse document: {e}") from e


def extract_queried(text: str, rule: QueryRule) -> list[RawItem]:
    """Extract one item per element matching the rule's item selector.

    Fields whose query matches nothing are empty strings, or skip the item
    when the rule's missing-field policy is ``skip``.
    """
    soup = parse_document(text)
    link_query = FieldQuery.parse(rule.link)
    title_query = FieldQuery.parse(rule.title)
    description_query = FieldQuery.parse(rule.description) if rule.description else None

    items = []
    for node in soup.select(rule.item):
        link = link_query.read(node)
        title = title_query.read(node)
        description = description_query.read(node) if description_query else ""

        if rule.missing_fields == SKIP and None in (link, title, description):
            logger.debug("Skipping element with missing fields in %s", rule.item)
            continue

        items.append(
            RawItem(title=_escape(title), link=link or "", description=_escape(description))
        )

    return items


def _escape(value: str | None) -> str:
    # Raw item text is markup; normalization unescapes it exactly once.
    return html.escape(value or "", quote=False)
