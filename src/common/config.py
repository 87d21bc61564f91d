"""Shared configuration utilities."""

import os
import re
from pathlib import Path

import yaml

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict."""
    with open(path) as f:
        return yaml.safe_load(f)


def lookup_env(key: str, default: str) -> str:
    """Return the environment value for `key`, or `default` when unset."""
    return os.environ.get(key, default)


def parse_duration(value: str) -> float:
    """Parse a duration such as ``90``, ``45s``, ``15m`` or ``1h30m`` into seconds.

    Args:
        value: Duration string. A bare number is taken as seconds.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If the value is empty, negative or not a valid duration.
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        for match in _DURATION_PART.finditer(text):
            if match.start() != pos:
                break
            seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            pos = match.end()
        if pos != len(text):
            raise ValueError(f"invalid duration: {value!r}") from None

    if seconds < 0:
        raise ValueError(f"negative duration: {value!r}")
    return seconds
