"""Exception types raised by site2rss."""


class Site2RSSError(Exception):
    """Base class for all site2rss errors."""


class ConfigError(Site2RSSError):
    """The configuration file is missing, malformed or inconsistent."""


class FetchError(Site2RSSError):
    """A page could not be fetched (network error or non-success status)."""


class ExtractionError(Site2RSSError):
    """Fetched content could not be decoded or parsed as a document."""


class SnapshotError(Site2RSSError):
    """A snapshot could not be read or written."""
