"""
Twelve Labs REST client.

Async client for the Twelve Labs v1.3 API covering everything the
enrichment pipeline needs: hashtag generation, metadata updates, index
listings and ingestion task statuses. Transient failures (HTTP 429, 5xx,
connection errors and timeouts) are retried with exponential backoff;
any other non-2xx response raises ``TwelveLabsAPIError`` immediately.

Classes
-------
TwelveLabsClient
    Implements the tag generator, metadata store, video listing and
    ingestion status interfaces against the live API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

import httpx

from videotags import __version__
from videotags.exceptions import TwelveLabsAPIError
from videotags.models.metadata import CategorizedMetadata
from videotags.models.video import VideoPage, VideoRecord
from videotags.services.interfaces import (
    IngestionStatusInterface,
    MetadataStoreInterface,
    TagGeneratorInterface,
    VideoListingInterface,
)

logger = logging.getLogger(__name__)

_DEFAULT_BASE_URL = "https://api.twelvelabs.io/v1.3"
_DEFAULT_TIMEOUT_SECONDS = 30.0
_DEFAULT_MAX_RETRIES = 3
_DEFAULT_BACKOFF_BASE_SECONDS = 2.0
_TASKS_PAGE_SIZE = 50
_RETRYABLE_EXCEPTIONS = (httpx.ConnectTimeout, httpx.ReadTimeout, httpx.ConnectError)

GENERATE_PROMPT = """You are a marketing assistant specialized in generating hashtags for video content.

Based on the video, generate a list of 5 to 10 relevant hashtags.

Each of the following categories must be represented by at least one hashtag:

- Demographics
- Sector
- Emotion
- Location
- Mentioned Brands

Instructions:

1. Use only the allowed options for each category.
2. Hashtags must be lowercase, contain no spaces, and be prefixed with `#`.
3. Do not output any explanations or category names. Only return the hashtag list.

Example output:

#female #beauty #uplifting #seoul #fentybeauty

Allowed options:

Demographics: male, female, 18-25, 25-34, 35-44, 45-54, 55+
Sector: beauty, fashion, tech, travel, cpg, food, retail
Emotion: happy, positive, exciting, relaxing, inspiring, serious, festive, calm
Location: any real-world location
Mentioned Brands: any brand mentioned or shown in the video"""


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code < 600


class TwelveLabsClient(
    TagGeneratorInterface,
    MetadataStoreInterface,
    VideoListingInterface,
    IngestionStatusInterface,
):
    """
    Async client for the Twelve Labs REST API.

    Parameters
    ----------
    api_key : str
        Twelve Labs API key, sent as the ``x-api-key`` header.
    base_url : str, optional
        API root including the version segment.
    timeout : float, optional
        Per-request timeout in seconds (default: 30).
    max_retries : int, optional
        Retries for transient failures (default: 3).
    backoff_base : float, optional
        First retry delay in seconds; doubles per attempt (default: 2.0).
    prompt : str, optional
        Prompt sent with each generation request.

    Examples
    --------
    >>> async with TwelveLabsClient(api_key="tlk_...") as client:
    ...     page = await client.list_videos("idx-content", page=1)
    ...     text = await client.generate(page.data[0].id)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = _DEFAULT_MAX_RETRIES,
        backoff_base: float = _DEFAULT_BACKOFF_BASE_SECONDS,
        prompt: str = GENERATE_PROMPT,
    ) -> None:
        """Initialize the client; the HTTP connection pool opens lazily."""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.prompt = prompt
        self._headers = {
            "x-api-key": api_key,
            "Content-Type": "application/json",
            "User-Agent": f"videotags/{__version__}",
        }
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "TwelveLabsClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def http(self) -> httpx.AsyncClient:
        """The shared ``httpx.AsyncClient``, created on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers=self._headers,
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    # -------------------------------------------------------------------------
    # Interface implementations
    # -------------------------------------------------------------------------

    async def generate(self, video_id: str) -> Optional[str]:
        """
        Ask the generate endpoint for hashtags describing a video.

        Parameters
        ----------
        video_id : str
            The video to describe.

        Returns
        -------
        Optional[str]
            The generated text, or None if the response carried none.

        Raises
        ------
        TwelveLabsAPIError
            If the request fails after retries.
        """
        payload = {"prompt": self.prompt, "video_id": video_id, "stream": False}
        body = await self._request(
            "POST", "/generate", json=payload, video_id=video_id
        )
        text = body.get("data") if isinstance(body, dict) else None
        return text if isinstance(text, str) else None

    async def update(
        self,
        video_id: str,
        index_id: str,
        metadata: CategorizedMetadata,
    ) -> bool:
        """
        Store categorized metadata as the video's ``user_metadata``.

        Returns
        -------
        bool
            True once the API accepted the update.

        Raises
        ------
        TwelveLabsAPIError
            If the request fails after retries.
        """
        await self._request(
            "PUT",
            f"/indexes/{index_id}/videos/{video_id}",
            json={"user_metadata": metadata.to_user_metadata()},
            video_id=video_id,
        )
        logger.debug(f"Stored metadata for video {video_id} in index {index_id}")
        return True

    async def list_videos(
        self,
        index_id: str,
        page: int = 1,
        page_limit: int = 10,
    ) -> VideoPage:
        """Fetch one page of an index listing."""
        body = await self._request(
            "GET",
            f"/indexes/{index_id}/videos",
            params={"page": page, "page_limit": page_limit},
        )
        video_page = VideoPage.model_validate(body or {})
        for record in video_page.data:
            if record.index_id is None:
                record.index_id = index_id
        return video_page

    async def get_video(self, index_id: str, video_id: str) -> VideoRecord:
        """Fetch a single video with its current metadata."""
        body = await self._request(
            "GET", f"/indexes/{index_id}/videos/{video_id}", video_id=video_id
        )
        data = dict(body or {})
        data.setdefault("_id", video_id)
        data.setdefault("index_id", index_id)
        return VideoRecord.model_validate(data)

    async def get_statuses(
        self,
        index_id: str,
        video_ids: Sequence[str],
    ) -> dict[str, str]:
        """
        Look up ingestion statuses from the index's task list.

        Only the most recent tasks are returned by the API; videos whose
        task has aged out are omitted and treated as ready by callers.
        """
        wanted = set(video_ids)
        body = await self._request(
            "GET",
            "/tasks",
            params={"index_id": index_id, "page_size": _TASKS_PAGE_SIZE},
        )
        statuses: dict[str, str] = {}
        for task in (body or {}).get("data", []):
            video_id = task.get("video_id")
            status = task.get("status")
            if video_id in wanted and isinstance(status, str):
                statuses.setdefault(video_id, status)
        return statuses

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        video_id: Optional[str] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Send a request, retrying transient failures.

        Returns
        -------
        Any
            The decoded JSON body, or None for an empty body.

        Raises
        ------
        TwelveLabsAPIError
            On a non-retryable status, a non-retryable transport error, an
            undecodable body, or when retries are exhausted. ``status_code``
            is 0 when no usable response was received.
        """
        url = f"{self.base_url}{path}"
        retries_remaining = self.max_retries

        while True:
            attempt = self.max_retries - retries_remaining
            try:
                response = await self.http.request(method, url, **kwargs)
            except _RETRYABLE_EXCEPTIONS as e:
                if retries_remaining <= 0:
                    raise TwelveLabsAPIError(
                        message=(
                            f"Twelve Labs {method} {path} failed after retries: "
                            f"{type(e).__name__}"
                        ),
                        status_code=0,
                        video_id=video_id,
                    ) from e
                delay = self.backoff_base * (2**attempt)
                retries_remaining -= 1
                logger.warning(
                    f"Twelve Labs {method} {path} attempt {attempt + 1}/"
                    f"{self.max_retries} failed ({type(e).__name__}), "
                    f"retrying in {delay:.0f}s"
                )
                await asyncio.sleep(delay)
                continue
            except httpx.HTTPError as e:
                raise TwelveLabsAPIError(
                    message=f"Twelve Labs {method} {path} failed: {type(e).__name__}: {e}",
                    status_code=0,
                    video_id=video_id,
                ) from e

            if response.is_success:
                if not response.content:
                    return None
                try:
                    return response.json()
                except ValueError as e:
                    raise TwelveLabsAPIError(
                        message=f"Twelve Labs {method} {path} returned invalid JSON",
                        status_code=0,
                        video_id=video_id,
                    ) from e

            if _is_retryable(response.status_code) and retries_remaining > 0:
                delay = self.backoff_base * (2**attempt)
                retries_remaining -= 1
                logger.warning(
                    f"Twelve Labs {method} {path} returned "
                    f"{response.status_code}, retrying in {delay:.0f}s"
                )
                await asyncio.sleep(delay)
                continue

            raise TwelveLabsAPIError(
                message=(
                    f"Twelve Labs {method} {path} returned "
                    f"{response.status_code}: {response.text[:200]}"
                ),
                status_code=response.status_code,
                video_id=video_id,
            )
