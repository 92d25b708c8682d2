"""
Pydantic models for Twelve Labs video listings.

Only the fields the enrichment pipeline and the display collection read
are modelled; everything else in the vendor payload is ignored.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from videotags.models.enums import READY_STATUS


class BaseTwelveLabsModel(BaseModel):
    """
    Base model for Twelve Labs API payloads.

    Configures:
    - populate_by_name: Allow both the wire alias (``_id``) and the Python name
    - extra='ignore': Ignore unexpected fields from API responses
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


class SystemMetadata(BaseTwelveLabsModel):
    """Metadata the platform derives from the uploaded file."""

    filename: Optional[str] = Field(default=None, description="Uploaded file name")
    video_title: Optional[str] = Field(default=None, description="Video title")
    duration: Optional[float] = Field(default=None, ge=0, description="Seconds")


class HlsInfo(BaseTwelveLabsModel):
    """Streaming details for a video."""

    video_url: Optional[str] = Field(default=None, description="HLS playlist URL")
    thumbnail_urls: list[str] = Field(default_factory=list)
    status: Optional[str] = Field(default=None, description="Streaming status")


class VideoRecord(BaseTwelveLabsModel):
    """
    A single video from an index listing.

    ``user_metadata`` is the raw, untyped bag the enrichment pipeline
    fills in. ``indexing_status`` is not part of the listing payload; it
    is attached from the ingestion task list when that source is used.
    """

    id: str = Field(..., alias="_id", min_length=1, description="Video ID")
    index_id: Optional[str] = Field(default=None)
    user_metadata: Optional[dict[str, Any]] = Field(default=None)
    system_metadata: Optional[SystemMetadata] = Field(default=None)
    hls: Optional[HlsInfo] = Field(default=None)
    indexing_status: Optional[str] = Field(default=None)

    @property
    def title(self) -> Optional[str]:
        """Video title, falling back to the uploaded file name."""
        if self.system_metadata is None:
            return None
        return self.system_metadata.video_title or self.system_metadata.filename

    @property
    def thumbnail_url(self) -> Optional[str]:
        """First HLS thumbnail, if any."""
        if self.hls is None or not self.hls.thumbnail_urls:
            return None
        return self.hls.thumbnail_urls[0]

    @property
    def video_url(self) -> Optional[str]:
        """HLS playlist URL, if any."""
        return self.hls.video_url if self.hls is not None else None

    @property
    def is_indexing(self) -> bool:
        """True while the platform reports the video as still ingesting."""
        return (
            self.indexing_status is not None
            and self.indexing_status.lower() != READY_STATUS
        )


class PageInfo(BaseTwelveLabsModel):
    """Pagination details of a listing response."""

    page: int = Field(default=1, ge=1)
    total_page: int = Field(default=1, ge=0)
    total_count: int = Field(default=0, ge=0, alias="total_results")


class VideoPage(BaseTwelveLabsModel):
    """One page of an index listing."""

    data: list[VideoRecord] = Field(default_factory=list)
    page_info: PageInfo = Field(default_factory=PageInfo)

    @property
    def has_next(self) -> bool:
        """Check whether another page follows this one."""
        return self.page_info.page < self.page_info.total_page
