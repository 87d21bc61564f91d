"""Per-site persistence of the last reconciled item list."""

import json
import logging
import os
import tempfile
from pathlib import Path

from common.datetime import parse_datetime
from site2rss.errors import SnapshotError
from site2rss.models import Item

logger = logging.getLogger(__name__)


def item_to_record(item: Item) -> dict:
    return {
        "title": item.title,
        "link": item.link,
        "description": item.description,
        "firstSeenAt": item.first_seen_at.isoformat(),
    }


def record_to_item(record: dict) -> Item:
    return Item(
        title=record["title"],
        link=record["link"],
        description=record["description"],
        first_seen_at=parse_datetime(record["firstSeenAt"]),
    )


class SnapshotStore:
    """Stores one JSON file per site under a directory, overwritten each cycle."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, site_id: str) -> Path:
        return self.directory / f"{site_id}.json"

    def load(self, site_id: str) -> list[Item]:
        """Load the snapshot for a site; a missing file is an empty snapshot.

        Raises:
            SnapshotError: If the file exists but cannot be read or decoded.
        """
        path = self.path_for(site_id)
        try:
            with path.open(encoding="utf-8") as f:
                records = json.load(f)
        except FileNotFoundError:
            logger.info("No snapshot for %s yet", site_id)
            return []
        except (OSError, ValueError) as e:
            raise SnapshotError(f"Failed to read snapshot {path}: {e}") from e

        if records is None:
            return []
        try:
            return [record_to_item(record) for record in records]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SnapshotError(f"Malformed snapshot {path}: {e}") from e

    def save(self, site_id: str, items: list[Item]) -> Path:
        """Replace the snapshot for a site.

        The file is written to a temporary sibling and renamed into place, so
        readers never see a partial snapshot.

        Raises:
            SnapshotError: If the file cannot be written.
        """
        path = self.path_for(site_id)
        records = [item_to_record(item) for item in items]
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{site_id}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SnapshotError(f"Failed to write snapshot {path}: {e}") from e

        logger.debug("Saved %d items to %s", len(items), path)
        return path
