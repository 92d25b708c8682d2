"""
Abstract Base Class for ingestion status lookups.

Videos that are still being indexed must not be enriched; this interface
lets the scheduler ask which videos are ready.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence


class IngestionStatusInterface(ABC):
    """Abstract interface for per-video ingestion status."""

    @abstractmethod
    async def get_statuses(
        self,
        index_id: str,
        video_ids: Sequence[str],
    ) -> dict[str, str]:
        """
        Look up the ingestion status of videos.

        Parameters
        ----------
        index_id : str
            The index the videos belong to.
        video_ids : Sequence[str]
            The videos to look up.

        Returns
        -------
        dict[str, str]
            Video ID mapped to status (``"ready"``, ``"indexing"``, ...).
            Videos with no known status are omitted.
        """
        pass
