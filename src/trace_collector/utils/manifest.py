"""Manifest storage for resumable trace collection.

The manifest is a JSON array with one entry per finished URL, listing the
trace files collected for it. It doubles as the index of the output
directory and as the checkpoint a restarted run resumes from.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Union

from ..models import UrlResultSet

logger = logging.getLogger(__name__)


class ManifestStore:
    """Reads and writes the collection manifest."""

    def __init__(self, path: Union[str, Path], urls: Iterable[str]):
        """Initialize the store.

        Args:
            path: Location of the manifest JSON file.
            urls: The URLs configured for this run; entries for any other
                URL are dropped on load.
        """
        self.path = Path(path)
        self.urls = list(urls)

    def load(self) -> List[UrlResultSet]:
        """Resume state from a previous run.

        Returns:
            Manifest entries whose URL is still configured, in file order.
            An empty list when no manifest exists yet.
        """
        if not self.path.exists():
            logger.info(f"No manifest at {self.path}, starting fresh")
            return []

        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f)

        entries = [UrlResultSet.model_validate(item) for item in raw]
        kept = [entry for entry in entries if entry.url in self.urls]
        if len(kept) != len(entries):
            logger.info(
                f"Dropped {len(entries) - len(kept)} manifest entries for URLs no longer configured"
            )
        logger.info(f"Loaded {len(kept)} manifest entries from {self.path}")
        return kept

    def save(self, entries: Iterable[UrlResultSet]) -> None:
        """Overwrite the manifest with a full snapshot of `entries`."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = [entry.model_dump() for entry in entries]
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        logger.debug(f"Saved {len(data)} manifest entries to {self.path}")
