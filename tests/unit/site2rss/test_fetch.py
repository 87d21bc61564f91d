"""Tests for site2rss.fetch module."""

from unittest.mock import Mock

import pytest
import requests

from site2rss.errors import FetchError
from site2rss.fetch import USER_AGENT, PageFetcher


def _response(status: int = 200, content: bytes = b"<html></html>", content_type: str = "text/html") -> Mock:
    response = Mock()
    response.status_code = status
    response.content = content
    response.headers = {"Content-Type": content_type}
    response.encoding = "ISO-8859-1"
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return response


class TestPageFetcher:
    def test_returns_page_content(self) -> None:
        session = Mock()
        session.get.return_value = _response(content=b"<li>x</li>")

        page = PageFetcher(timeout=5, session=session).fetch("https://ex.com")

        assert page.url == "https://ex.com"
        assert page.content == b"<li>x</li>"
        session.get.assert_called_once_with("https://ex.com", timeout=5)

    def test_encoding_only_when_declared(self) -> None:
        session = Mock()
        session.get.return_value = _response()

        page = PageFetcher(session=session).fetch("https://ex.com")

        assert page.encoding is None

    def test_declared_charset_passed_through(self) -> None:
        session = Mock()
        response = _response(content_type="text/html; charset=windows-1252")
        response.encoding = "windows-1252"
        session.get.return_value = response

        page = PageFetcher(session=session).fetch("https://ex.com")

        assert page.encoding == "windows-1252"

    def test_http_error_status_raises_fetch_error(self) -> None:
        session = Mock()
        session.get.return_value = _response(status=503)

        with pytest.raises(FetchError, match="ex.com"):
            PageFetcher(session=session).fetch("https://ex.com")

    def test_network_error_raises_fetch_error(self) -> None:
        session = Mock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(FetchError):
            PageFetcher(session=session).fetch("https://ex.com")

    def test_timeout_raises_fetch_error(self) -> None:
        session = Mock()
        session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(FetchError):
            PageFetcher(timeout=0.1, session=session).fetch("https://ex.com")

    def test_default_session_sets_user_agent(self) -> None:
        fetcher = PageFetcher()

        assert fetcher.session.headers["User-Agent"] == USER_AGENT
        fetcher.close()
