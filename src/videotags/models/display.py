"""
Display item models.

A display item is a video record projected for the dashboard tables:
passive fields (title, thumbnail, media URL) plus the enrichment-bearing
fields (tags and metadata) that the merge rules protect.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from videotags.models.metadata import (
    CategorizedMetadata,
    MetadataTag,
    metadata_to_tags,
    metadata_value,
)
from videotags.models.video import VideoRecord

PLACEHOLDER_THUMBNAIL_URL = "https://placehold.co/600x400?text=No+Thumbnail"
UNTITLED_VIDEO = "Untitled Video"

_AGE_RANGE_PATTERN = re.compile(r"\d+-\d+")
_AGE_MARKERS = ("age", "old")
_GENDER_MARKERS = ("male", "women", "men")


def split_demographics(demographics: str) -> tuple[str, str]:
    """
    Split a demographics string into age and gender parts.

    Parameters
    ----------
    demographics : str
        Comma-separated demographics, e.g. ``"female, 25-34"``.

    Returns
    -------
    tuple[str, str]
        ``(demo_age, demo_gender)``, each re-joined with ``", "``.

    Examples
    --------
    >>> split_demographics("female, 25-34")
    ('25-34', 'female')
    """
    parts = [part.strip() for part in demographics.split(",") if part.strip()]
    ages = [
        part
        for part in parts
        if any(marker in part.lower() for marker in _AGE_MARKERS)
        or _AGE_RANGE_PATTERN.search(part)
    ]
    genders = [
        part
        for part in parts
        if any(marker in part.lower() for marker in _GENDER_MARKERS)
    ]
    return ", ".join(ages), ", ".join(genders)


class DisplayMetadata(BaseModel):
    """Metadata columns shown for one video."""

    source: str = ""
    sector: str = ""
    emotions: str = ""
    brands: str = ""
    locations: str = ""
    demo_age: str = ""
    demo_gender: str = ""

    model_config = ConfigDict(frozen=True)

    def is_empty(self) -> bool:
        """Check whether every column is empty."""
        return not any(self.model_dump().values())

    @classmethod
    def from_user_metadata(cls, bag: Mapping[str, Any]) -> "DisplayMetadata":
        """Project a raw metadata bag into display columns."""
        demo_age, demo_gender = split_demographics(metadata_value(bag, "demographics"))
        return cls(
            source=metadata_value(bag, "source"),
            sector=metadata_value(bag, "sector"),
            emotions=metadata_value(bag, "emotions"),
            brands=metadata_value(bag, "brands"),
            locations=metadata_value(bag, "locations"),
            demo_age=demo_age,
            demo_gender=demo_gender,
        )


class DisplayItem(BaseModel):
    """A video as presented in the dashboard."""

    id: str = Field(..., min_length=1)
    title: str = Field(default=UNTITLED_VIDEO)
    thumbnail_url: str = Field(default=PLACEHOLDER_THUMBNAIL_URL)
    video_url: str = Field(default="")
    tags: list[MetadataTag] = Field(default_factory=list)
    metadata: Optional[DisplayMetadata] = Field(default=None)
    is_indexing: bool = Field(default=False)

    model_config = ConfigDict(frozen=True)

    @property
    def has_enrichment(self) -> bool:
        """True when the item carries metadata or tags worth protecting."""
        has_metadata = self.metadata is not None and not self.metadata.is_empty()
        return has_metadata or bool(self.tags)

    @classmethod
    def from_record(cls, record: VideoRecord) -> "DisplayItem":
        """Build a fresh display item; no metadata is shown while indexing."""
        bag = record.user_metadata if not record.is_indexing else None
        return cls(
            id=record.id,
            title=record.title or UNTITLED_VIDEO,
            thumbnail_url=record.thumbnail_url or PLACEHOLDER_THUMBNAIL_URL,
            video_url=record.video_url or "",
            tags=metadata_to_tags(bag),
            metadata=DisplayMetadata.from_user_metadata(bag) if bag else None,
            is_indexing=record.is_indexing,
        )

    def refreshed_from(self, record: VideoRecord) -> "DisplayItem":
        """Take passive display fields from ``record``, keeping enrichment."""
        return self.model_copy(
            update={
                "title": record.title or self.title,
                "thumbnail_url": record.thumbnail_url or self.thumbnail_url,
                "video_url": record.video_url or self.video_url,
            }
        )

    def with_enrichment(self, metadata: CategorizedMetadata) -> "DisplayItem":
        """Apply freshly classified metadata to this item."""
        bag = metadata.to_user_metadata()
        return self.model_copy(
            update={
                "tags": metadata_to_tags(bag),
                "metadata": DisplayMetadata.from_user_metadata(bag),
            }
        )
