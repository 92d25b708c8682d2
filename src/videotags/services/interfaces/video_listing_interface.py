"""
Abstract Base Class for paginated video listings.

This interface defines the contract for reading the videos of an index,
enabling:
- Testability via mock implementations
- Swappable listing sources (live API, fixtures)
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...models.video import VideoPage, VideoRecord


class VideoListingInterface(ABC):
    """
    Abstract interface for listing the videos of an index.

    Examples
    --------
    >>> class EmptyListing(VideoListingInterface):
    ...     async def list_videos(self, index_id, page=1, page_limit=10):
    ...         return VideoPage()
    ...     async def get_video(self, index_id, video_id):
    ...         raise KeyError(video_id)
    """

    @abstractmethod
    async def list_videos(
        self,
        index_id: str,
        page: int = 1,
        page_limit: int = 10,
    ) -> VideoPage:
        """
        Fetch one page of videos.

        Parameters
        ----------
        index_id : str
            The index to list.
        page : int
            1-based page number.
        page_limit : int
            Videos per page.

        Returns
        -------
        VideoPage
            The page, with pagination details.
        """
        pass

    @abstractmethod
    async def get_video(self, index_id: str, video_id: str) -> VideoRecord:
        """
        Fetch a single video with its current metadata.

        Parameters
        ----------
        index_id : str
            The index the video belongs to.
        video_id : str
            The video to fetch.

        Returns
        -------
        VideoRecord
            The video record.
        """
        pass
