"""
Data models for videotags.

Pydantic models for Twelve Labs listings, categorized metadata, display
items and enrichment reports.
"""

from __future__ import annotations

from videotags.models.display import DisplayItem, DisplayMetadata, split_demographics
from videotags.models.enrichment_report import (
    EnrichmentDetail,
    EnrichmentReport,
    EnrichmentSummary,
)
from videotags.models.enums import Category, EnrichmentState, SchedulerState
from videotags.models.keyword_dictionary import DEFAULT_KEYWORDS, KeywordDictionary
from videotags.models.metadata import (
    CATEGORY_FIELDS,
    DEFAULT_COMPLETENESS_FIELDS,
    CategorizedMetadata,
    MetadataTag,
    metadata_to_tags,
)
from videotags.models.video import PageInfo, VideoPage, VideoRecord

__all__ = [
    "CATEGORY_FIELDS",
    "Category",
    "CategorizedMetadata",
    "DEFAULT_COMPLETENESS_FIELDS",
    "DEFAULT_KEYWORDS",
    "DisplayItem",
    "DisplayMetadata",
    "EnrichmentDetail",
    "EnrichmentReport",
    "EnrichmentState",
    "EnrichmentSummary",
    "KeywordDictionary",
    "MetadataTag",
    "PageInfo",
    "SchedulerState",
    "VideoPage",
    "VideoRecord",
    "metadata_to_tags",
    "split_demographics",
]
