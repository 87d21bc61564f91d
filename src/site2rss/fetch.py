"""HTTP page fetching."""

import logging
from dataclasses import dataclass

import requests

from site2rss import __version__
from site2rss.errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = f"site2rss/{__version__} (+feed generator)"
DEFAULT_TIMEOUT = 10.0


@dataclass
class Page:
    url: str
    content: bytes
    encoding: str | None = None


class PageFetcher:
    """Fetches pages with a bounded timeout over a shared session."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: requests.Session | None = None):
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    def fetch(self, url: str) -> Page:
        """Fetch a page.

        Raises:
            FetchError: On network errors, timeouts or non-success status codes.
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {url}: {e}") from e

        logger.debug("Fetched %s (%d bytes, status %d)", url, len(response.content), response.status_code)
        # Without an explicit charset, requests assumes ISO-8859-1 for text/*.
        content_type = response.headers.get("Content-Type", "")
        encoding = response.encoding if "charset" in content_type.lower() else None
        return Page(url=url, content=response.content, encoding=encoding)

    def close(self) -> None:
        self.session.close()
