"""
Abstract Base Class for video metadata persistence.

This interface defines the contract for writing categorized metadata back
onto a video, enabling:
- Testability via mock implementations
- Swappable storage backends
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...models.metadata import CategorizedMetadata


class MetadataStoreInterface(ABC):
    """
    Abstract interface for persisting categorized metadata.

    Examples
    --------
    >>> class InMemoryStore(MetadataStoreInterface):
    ...     def __init__(self):
    ...         self.saved = {}
    ...     async def update(self, video_id, index_id, metadata):
    ...         self.saved[(index_id, video_id)] = metadata
    ...         return True
    """

    @abstractmethod
    async def update(
        self,
        video_id: str,
        index_id: str,
        metadata: CategorizedMetadata,
    ) -> bool:
        """
        Store categorized metadata on a video.

        Parameters
        ----------
        video_id : str
            The video to update.
        index_id : str
            The index the video belongs to.
        metadata : CategorizedMetadata
            The metadata to store.

        Returns
        -------
        bool
            True if the store accepted the update, False otherwise.

        Raises
        ------
        TwelveLabsAPIError
            If the update request fails.
        """
        pass
