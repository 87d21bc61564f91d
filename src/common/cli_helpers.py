"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import logging

from common.config import parse_duration


def setup_logging(level: str = "INFO") -> None:
    """Configure standard logging format for CLI tools."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def duration_arg(value: str) -> float:
    """Parse a duration for argparse arguments.

    Args:
        value: Duration string, e.g. ``1h`` or ``30s``.

    Returns:
        Duration in seconds.

    Raises:
        argparse.ArgumentTypeError: If the value is not a valid duration.
    """
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def parse_listen_address(value: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address; an empty host means all interfaces.

    Raises:
        argparse.ArgumentTypeError: If the port is missing or not a number.
    """
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"listen address must be HOST:PORT, got {value!r}")
    return host or "0.0.0.0", int(port)
