"""
Custom exceptions for the videotags application.

This module defines domain-specific exceptions for error handling
throughout the enrichment pipeline, including Twelve Labs API errors,
tag generation and persistence failures, and invalid state transitions.
"""

from __future__ import annotations


class VideoTagsError(Exception):
    """Base exception for all videotags errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize VideoTagsError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class TwelveLabsAPIError(VideoTagsError):
    """
    Exception raised for Twelve Labs API errors.

    Wraps non-success responses and exhausted retries from the Twelve Labs
    REST API. A ``status_code`` of 0 means the request never got a response
    (connection failure or timeout).

    Attributes
    ----------
    message : str
        Human-readable error message.
    status_code : int | None
        HTTP status code returned by the API.
    video_id : str | None
        The video the request was about, if any.

    Examples
    --------
    >>> try:
    ...     await client.get_video(index_id, video_id)
    ... except TwelveLabsAPIError as e:
    ...     if e.status_code == 404:
    ...         print(f"Video {e.video_id} not found")
    """

    def __init__(
        self,
        message: str = "Twelve Labs API error occurred",
        status_code: int | None = None,
        video_id: str | None = None,
    ) -> None:
        """
        Initialize TwelveLabsAPIError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Twelve Labs API error occurred").
        status_code : int | None, optional
            HTTP status code returned by the API (default: None).
        video_id : str | None, optional
            The video the request was about (default: None).
        """
        self.status_code: int | None = status_code
        self.video_id: str | None = video_id
        super().__init__(message)


class TagGenerationError(VideoTagsError):
    """
    Exception raised when the tagging service yields no usable hashtags.

    Raised by the scheduler when generation returns empty text, so the
    failure path is the same as for a transport error.

    Attributes
    ----------
    message : str
        Human-readable error message.
    video_id : str | None
        The video whose generation failed.
    """

    def __init__(
        self,
        message: str = "Tag generation failed",
        video_id: str | None = None,
    ) -> None:
        """
        Initialize TagGenerationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Tag generation failed").
        video_id : str | None, optional
            The video whose generation failed (default: None).
        """
        self.video_id: str | None = video_id
        super().__init__(message)


class MetadataPersistenceError(VideoTagsError):
    """
    Exception raised when classified metadata could not be stored.

    Attributes
    ----------
    message : str
        Human-readable error message.
    video_id : str | None
        The video whose metadata was rejected.
    index_id : str | None
        The index the update targeted.
    """

    def __init__(
        self,
        message: str = "Metadata update failed",
        video_id: str | None = None,
        index_id: str | None = None,
    ) -> None:
        """
        Initialize MetadataPersistenceError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Metadata update failed").
        video_id : str | None, optional
            The video whose metadata was rejected (default: None).
        index_id : str | None, optional
            The index the update targeted (default: None).
        """
        self.video_id: str | None = video_id
        self.index_id: str | None = index_id
        super().__init__(message)


class EnrichmentStateError(VideoTagsError):
    """
    Exception raised for an illegal enrichment state transition.

    Attributes
    ----------
    message : str
        Human-readable error message.
    video_id : str
        The video whose transition was rejected.
    current_state : str
        The state the video was in.
    requested_state : str
        The state that was requested.

    Examples
    --------
    >>> tracker.mark_in_flight("vid-1")
    >>> tracker.mark_in_flight("vid-1")
    Traceback (most recent call last):
    ...
    EnrichmentStateError: Cannot move video vid-1 from in_flight to in_flight
    """

    def __init__(
        self,
        video_id: str,
        current_state: str,
        requested_state: str,
    ) -> None:
        """
        Initialize EnrichmentStateError.

        Parameters
        ----------
        video_id : str
            The video whose transition was rejected.
        current_state : str
            The state the video was in.
        requested_state : str
            The state that was requested.
        """
        self.video_id = video_id
        self.current_state = current_state
        self.requested_state = requested_state
        super().__init__(
            f"Cannot move video {video_id} from {current_state} to {requested_state}"
        )


class ConfigurationError(VideoTagsError):
    """
    Exception raised when required configuration is missing or invalid.

    Attributes
    ----------
    message : str
        Human-readable error message.
    setting_name : str | None
        The setting that is missing or invalid.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        setting_name: str | None = None,
    ) -> None:
        """
        Initialize ConfigurationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Invalid configuration").
        setting_name : str | None, optional
            The setting that is missing or invalid (default: None).
        """
        self.setting_name: str | None = setting_name
        super().__init__(message)


# Exit codes for CLI integration
EXIT_CODE_SUCCESS = 0
EXIT_CODE_CONFIGURATION_ERROR = 1
EXIT_CODE_API_ERROR = 2
EXIT_CODE_PARTIAL_SUCCESS = 3
EXIT_CODE_INTERRUPTED = 130  # Standard Unix signal interrupt exit code
