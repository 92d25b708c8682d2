"""
Enrichment report models.

Defines Pydantic models for metadata enrichment reporting, including
summary statistics and detailed per-video enrichment results.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EnrichmentSummary(BaseModel):
    """Summary statistics for one enrichment run."""

    candidates: int = Field(
        ..., ge=0, description="Number of videos offered to the run"
    )
    already_complete: int = Field(
        default=0, ge=0, description="Videos skipped because they had metadata"
    )
    not_ready: int = Field(
        default=0, ge=0, description="Videos skipped because they were still indexing"
    )
    not_eligible: int = Field(
        default=0, ge=0, description="Videos skipped because of their tracked state"
    )
    over_limit: int = Field(
        default=0, ge=0, description="Videos left for a later run by the run limit"
    )
    videos_enriched: int = Field(
        default=0, ge=0, description="Videos classified and persisted"
    )
    videos_failed: int = Field(
        default=0, ge=0, description="Videos whose generation or update failed"
    )
    chunks: int = Field(
        default=0, ge=0, description="Number of concurrency-bounded chunks issued"
    )

    model_config = ConfigDict(
        validate_assignment=True,
    )


class EnrichmentDetail(BaseModel):
    """Detailed enrichment result for a single video."""

    video_id: str = Field(
        ..., min_length=1, description="Twelve Labs video ID"
    )
    status: Literal["enriched", "failed", "skipped"] = Field(
        ..., description="Enrichment status for this video"
    )
    hashtags: Optional[str] = Field(
        default=None, description="Raw text returned by the tagging service"
    )
    tags_count: Optional[int] = Field(
        default=None, ge=0, description="Number of display tags derived"
    )
    error: Optional[str] = Field(
        default=None, description="Error message if status is 'failed'"
    )

    model_config = ConfigDict(
        validate_assignment=True,
    )


class EnrichmentReport(BaseModel):
    """Complete report of one enrichment run."""

    timestamp: datetime = Field(
        ..., description="When the run started (ISO 8601)"
    )
    index_id: str = Field(
        ..., min_length=1, description="Index the run enriched"
    )
    summary: EnrichmentSummary = Field(
        ..., description="Summary statistics for the run"
    )
    details: List[EnrichmentDetail] = Field(
        default_factory=list, description="Detailed results for each video"
    )

    model_config = ConfigDict(
        validate_assignment=True,
    )
