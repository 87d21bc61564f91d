"""Data models for the extraction and reconciliation pipeline."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RawItem:
    """Item fields as cut from page content, before normalization."""
    title: str
    link: str
    description: str


@dataclass(frozen=True)
class Item:
    """Normalized item with an absolute link and its first-seen timestamp."""
    title: str
    link: str
    description: str
    first_seen_at: datetime

    @property
    def identity(self) -> tuple[str, str, str]:
        """Key used to match items across cycles; the timestamp is not part of it."""
        return (self.title, self.link, self.description)
