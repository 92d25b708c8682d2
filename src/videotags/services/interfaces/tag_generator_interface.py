"""
Abstract Base Class for hashtag generation services.

This interface defines the contract for asking a video-understanding
service to describe a video as hashtags, enabling:
- Testability via mock implementations with controllable resolution
- Swappable generation backends
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class TagGeneratorInterface(ABC):
    """
    Abstract interface for hashtag generation.

    Implementations return the raw generated text; classification is the
    caller's job. Implementations should handle transport retries and
    raise on unrecoverable errors.

    Examples
    --------
    >>> class FixedTagGenerator(TagGeneratorInterface):
    ...     async def generate(self, video_id: str) -> Optional[str]:
    ...         return "#female #beauty #calm #seoul #fentybeauty"
    """

    @abstractmethod
    async def generate(self, video_id: str) -> Optional[str]:
        """
        Generate hashtag text for a video.

        Parameters
        ----------
        video_id : str
            The video to describe.

        Returns
        -------
        Optional[str]
            Zero or more ``#token`` hashtags separated by whitespace or
            newlines. ``None`` or an empty string when nothing was generated.

        Raises
        ------
        TwelveLabsAPIError
            If the generation request fails.
        """
        pass
