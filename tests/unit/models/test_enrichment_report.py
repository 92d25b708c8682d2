"""
Tests for enrichment report models.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from videotags.models.enrichment_report import (
    EnrichmentDetail,
    EnrichmentReport,
    EnrichmentSummary,
)


def test_report_serializes_to_json() -> None:
    report = EnrichmentReport(
        timestamp=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
        index_id="idx-content",
        summary=EnrichmentSummary(candidates=2, videos_enriched=1, videos_failed=1),
        details=[
            EnrichmentDetail(
                video_id="vid-1", status="enriched", hashtags="#tech", tags_count=1
            ),
            EnrichmentDetail(video_id="vid-2", status="failed", error="timeout"),
        ],
    )

    payload = json.loads(report.model_dump_json())

    assert payload["index_id"] == "idx-content"
    assert payload["summary"]["videos_enriched"] == 1
    assert payload["details"][1]["error"] == "timeout"


def test_summary_counters_validated_on_assignment() -> None:
    summary = EnrichmentSummary(candidates=1)
    summary.chunks += 1

    with pytest.raises(ValidationError):
        summary.videos_failed = -1


def test_detail_status_is_restricted() -> None:
    with pytest.raises(ValidationError):
        EnrichmentDetail(video_id="vid-1", status="pending")  # type: ignore[arg-type]
