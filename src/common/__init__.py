"""Helpers shared across site2rss packages."""
