"""Republish item lists scraped from web pages as RSS, Atom and JSON feeds."""

__version__ = "0.1.0"
