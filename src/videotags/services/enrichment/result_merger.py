"""
Result merger for the dashboard display collection.

``merge`` combines the items already on screen with a freshly loaded
page set. Items that already carry enrichment keep it and only pick up
passive display fields from the new records; everything else is rebuilt.
The incoming pages are authoritative: an ID missing from them is dropped.

``DisplayCollection`` owns the live list and is its only writer. Page
refreshes and per-video enrichment results both go through it under one
lock, so a result landing while a page is being merged is never lost.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Iterable, Optional, Sequence

from videotags.models.display import DisplayItem
from videotags.models.metadata import CategorizedMetadata
from videotags.models.video import VideoRecord

logger = logging.getLogger(__name__)


def merge(
    existing_items: Iterable[DisplayItem],
    incoming_page: Iterable[VideoRecord],
) -> list[DisplayItem]:
    """
    Merge an incoming page set into the current display items.

    Parameters
    ----------
    existing_items : Iterable[DisplayItem]
        Items currently displayed.
    incoming_page : Iterable[VideoRecord]
        Every record of the currently loaded pages, in display order.

    Returns
    -------
    list[DisplayItem]
        One item per incoming record. Idempotent for identical inputs.

    Examples
    --------
    >>> items = merge([], [VideoRecord(_id="v1")])
    >>> merge(items, []) == []
    True
    """
    existing_by_id = {item.id: item for item in existing_items}
    merged: list[DisplayItem] = []
    for record in incoming_page:
        existing = existing_by_id.get(record.id)
        if existing is not None and existing.has_enrichment:
            merged.append(existing.refreshed_from(record))
        else:
            merged.append(DisplayItem.from_record(record))
    return merged


class DisplayCollection:
    """
    The live, ordered collection of display items for one view.

    Examples
    --------
    >>> collection = DisplayCollection()
    >>> collection.refresh([VideoRecord(_id="v1")])
    >>> collection.apply_enrichment("v1", CategorizedMetadata(sector="tech"))
    True
    >>> collection.get("v1").tags[0].value
    'tech'
    """

    def __init__(self, items: Optional[Sequence[DisplayItem]] = None) -> None:
        """Initialize the collection, optionally with items already shown."""
        self._items: list[DisplayItem] = list(items or [])
        self._lock = Lock()

    @property
    def items(self) -> list[DisplayItem]:
        """Snapshot of the current items, in display order."""
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, video_id: str) -> Optional[DisplayItem]:
        """Get the item for a video, or None if it is not loaded."""
        with self._lock:
            for item in self._items:
                if item.id == video_id:
                    return item
        return None

    def refresh(self, records: Iterable[VideoRecord]) -> None:
        """Replace the collection with the merge of ``records``."""
        records = list(records)
        with self._lock:
            self._items = merge(self._items, records)
            count = len(self._items)
        logger.debug(f"Display collection refreshed with {count} items")

    def refresh_item(self, record: VideoRecord) -> bool:
        """
        Re-project one loaded item from a freshly fetched record.

        The record's stored metadata replaces what is shown. A record that
        comes back without metadata only refreshes passive fields, so an
        item enriched moments ago is not blanked by a lagging read.

        Returns
        -------
        bool
            True if the item was loaded and updated.
        """
        with self._lock:
            for position, item in enumerate(self._items):
                if item.id == record.id:
                    fresh = DisplayItem.from_record(record)
                    if not fresh.has_enrichment and item.has_enrichment:
                        fresh = item.refreshed_from(record)
                    self._items[position] = fresh
                    return True
        logger.debug(f"Refreshed video {record.id} is no longer displayed; skipping")
        return False

    def apply_enrichment(self, video_id: str, metadata: CategorizedMetadata) -> bool:
        """
        Update one item in place with newly classified metadata.

        Parameters
        ----------
        video_id : str
            The enriched video.
        metadata : CategorizedMetadata
            Its classified metadata.

        Returns
        -------
        bool
            True if the item was loaded and updated; False if it has since
            dropped out of the loaded pages.
        """
        with self._lock:
            for position, item in enumerate(self._items):
                if item.id == video_id:
                    self._items[position] = item.with_enrichment(metadata)
                    return True
        logger.debug(f"Enriched video {video_id} is no longer displayed; skipping")
        return False
