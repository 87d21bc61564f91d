"""Item extraction strategies.

The strategy is fixed per site by the type of its rule; both return the same
list of RawItem.
"""

import logging

from site2rss.config import DelimiterRule, ExtractionRule, QueryRule
from site2rss.errors import ExtractionError
from site2rss.extract.delimiter import extract_delimited
from site2rss.extract.query import extract_queried
from site2rss.models import RawItem

logger = logging.getLogger(__name__)

__all__ = ["decode_content", "extract", "extract_delimited", "extract_queried"]


def decode_content(content: bytes | str, encoding: str | None = None) -> str:
    """Decode page bytes to text, falling back to UTF-8 with replacement."""
    if isinstance(content, str):
        return content
    try:
        return content.decode(encoding or "utf-8")
    except LookupError as e:
        raise ExtractionError(f"Unknown content encoding: {encoding}") from e
    except UnicodeDecodeError:
        logger.debug("Content is not valid %s, decoding with replacement", encoding or "utf-8")
        return content.decode(encoding or "utf-8", errors="replace")


def extract(content: bytes | str, rule: ExtractionRule, encoding: str | None = None) -> list[RawItem]:
    """Extract raw items from page content with the strategy selected by `rule`."""
    text = decode_content(content, encoding)
    if isinstance(rule, DelimiterRule):
        return extract_delimited(text, rule)
    if isinstance(rule, QueryRule):
        return extract_queried(text, rule)
    raise TypeError(f"Unsupported extraction rule: {type(rule).__name__}")
