"""Configuration loader for site2rss.

Sites are read from a YAML file. Each site carries exactly one extraction
rule: a ``delimiter`` rule that cuts items out of the raw page text, or a
``query`` rule that selects them with CSS selectors.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import yaml

from common.config import load_yaml
from site2rss.errors import ConfigError

logger = logging.getLogger(__name__)

SKIP = "skip"
EMPTY = "empty"
MISSING_FIELD_POLICIES = (SKIP, EMPTY)


@dataclass(frozen=True)
class Marker:
    """A cut point in page content: literal text or a regular expression."""
    pattern: str
    is_regex: bool = False

    def __post_init__(self) -> None:
        if self.is_regex:
            # Raises re.error for an invalid pattern.
            object.__setattr__(self, "_compiled", re.compile(self.pattern))

    def locate(self, text: str) -> tuple[int, int] | None:
        """Return the (start, end) span of the marker in `text`, or None.

        A regex marker cuts at the first occurrence of the text its first
        match produced. An empty match counts as not found.
        """
        if self.is_regex:
            match = self._compiled.search(text)
            if match is None or not match.group(0):
                return None
            needle = match.group(0)
        else:
            needle = self.pattern
            if not needle:
                return None
        start = text.find(needle)
        if start < 0:
            return None
        return start, start + len(needle)


@dataclass(frozen=True)
class DelimiterRule:
    item_start: Marker
    item_end: Marker
    link_start: Marker
    link_end: Marker
    title_start: Marker
    title_end: Marker
    description_start: Marker | None = None
    description_end: Marker | None = None
    missing_fields: str = SKIP


@dataclass(frozen=True)
class QueryRule:
    """CSS selector rule. Field queries use ``selector@attribute`` to read an attribute."""
    item: str
    link: str
    title: str
    description: str | None = None
    missing_fields: str = EMPTY


ExtractionRule = Union[DelimiterRule, QueryRule]


@dataclass(frozen=True)
class Site:
    name: str
    title: str
    url: str
    rule: ExtractionRule
    description: str = ""

    @property
    def key(self) -> str:
        """Lower-cased name used in HTTP routes and the published feed store."""
        return self.name.lower()


@dataclass(frozen=True)
class AppConfig:
    sites: list[Site] = field(default_factory=list)


_SITE_KEYS = {"name", "title", "description", "siteDescription", "url", "delimiter", "query"}
_DELIMITER_KEYS = {
    "itemStart": "item_start",
    "itemEnd": "item_end",
    "linkStart": "link_start",
    "linkEnd": "link_end",
    "titleStart": "title_start",
    "titleEnd": "title_end",
    "descriptionStart": "description_start",
    "descriptionEnd": "description_end",
}
_DELIMITER_REQUIRED = ("itemStart", "itemEnd", "linkStart", "linkEnd", "titleStart", "titleEnd")
_QUERY_KEYS = {"item", "link", "title", "description"}
# Site names become snapshot file names and URL path segments.
_SITE_NAME = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the site configuration from a YAML file.

    Raises:
        ConfigError: If the file cannot be read or its content is invalid.
    """
    path = Path(path)
    try:
        data = load_yaml(path)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e

    config = parse_config(data)
    logger.info("Loaded %d sites from %s", len(config.sites), path)
    return config


def parse_config(data: dict | None) -> AppConfig:
    """Parse config dictionary into AppConfig object."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")
    _check_keys(data, {"sites"}, "config")

    raw_sites = data.get("sites") or []
    if not isinstance(raw_sites, list):
        raise ConfigError("'sites' must be a list")

    sites = []
    seen = set()
    for index, raw in enumerate(raw_sites):
        site = _parse_site(raw, index)
        if site.key in seen:
            raise ConfigError(f"duplicate site name: {site.name!r}")
        seen.add(site.key)
        sites.append(site)

    return AppConfig(sites=sites)


def _parse_site(raw, index: int) -> Site:
    where = f"sites[{index}]"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")
    _check_keys(raw, _SITE_KEYS, where)

    name = _require_str(raw, "name", where)
    if not _SITE_NAME.fullmatch(name) or ".." in name:
        raise ConfigError(
            f"{where}: name {name!r} may only contain letters, digits, '.', '_' and '-'"
        )
    where = f"site {name!r}"
    url = _require_str(raw, "url", where)
    title = raw.get("title") or name
    description = raw.get("description", raw.get("siteDescription", "")) or ""

    has_delimiter = "delimiter" in raw
    has_query = "query" in raw
    if has_delimiter == has_query:
        raise ConfigError(f"{where}: exactly one of 'delimiter' or 'query' is required")

    if has_delimiter:
        rule = _parse_delimiter_rule(raw["delimiter"], where)
    else:
        rule = _parse_query_rule(raw["query"], where)

    return Site(name=name, title=str(title), url=url, rule=rule, description=str(description))


def _parse_delimiter_rule(raw, where: str) -> DelimiterRule:
    where = f"{where}.delimiter"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")
    _check_keys(raw, set(_DELIMITER_KEYS) | {"missingFields"}, where)
    for key in _DELIMITER_REQUIRED:
        if raw.get(key) in (None, ""):
            raise ConfigError(f"{where}: missing required key '{key}'")

    # An empty description marker means the description is not extracted.
    markers = {
        attr: _parse_marker(raw[key], f"{where}.{key}")
        for key, attr in _DELIMITER_KEYS.items()
        if raw.get(key) not in (None, "")
    }
    if ("description_start" in markers) != ("description_end" in markers):
        raise ConfigError(f"{where}: 'descriptionStart' and 'descriptionEnd' must be set together")
    return DelimiterRule(
        **markers,
        missing_fields=_parse_policy(raw, SKIP, where),
    )


def _parse_query_rule(raw, where: str) -> QueryRule:
    where = f"{where}.query"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where} must be a mapping")
    _check_keys(raw, _QUERY_KEYS | {"missingFields"}, where)
    return QueryRule(
        item=_require_str(raw, "item", where),
        link=_require_str(raw, "link", where),
        title=_require_str(raw, "title", where),
        description=raw.get("description"),
        missing_fields=_parse_policy(raw, EMPTY, where),
    )


def _parse_marker(raw, where: str) -> Marker:
    if isinstance(raw, str):
        return Marker(raw)
    if isinstance(raw, dict) and set(raw) == {"regex"} and isinstance(raw["regex"], str) and raw["regex"]:
        try:
            return Marker(raw["regex"], is_regex=True)
        except re.error as e:
            raise ConfigError(f"{where}: invalid regex {raw['regex']!r}: {e}") from e
    raise ConfigError(f"{where} must be a string or a mapping with a single 'regex' key")


def _parse_policy(raw: dict, default: str, where: str) -> str:
    policy = raw.get("missingFields", default)
    if policy not in MISSING_FIELD_POLICIES:
        raise ConfigError(
            f"{where}.missingFields must be one of {', '.join(MISSING_FIELD_POLICIES)}, got {policy!r}"
        )
    return policy


def _check_keys(raw: dict, allowed: set[str], where: str) -> None:
    unknown = sorted(set(raw) - allowed)
    if unknown:
        raise ConfigError(f"{where}: unknown field(s): {', '.join(unknown)}")


def _require_str(raw: dict, key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}: '{key}' must be a non-empty string")
    return value
