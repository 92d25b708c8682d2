"""
Enrichment services for videotags.

This package contains the pipeline that fills in missing video metadata:

- Per-video state tracking (eligible, queued, in flight, done)
- Bounded-concurrency batch scheduling with a post-batch cooldown
- Merging freshly loaded pages into the display collection
"""

from __future__ import annotations

from videotags.services.enrichment.result_merger import DisplayCollection, merge
from videotags.services.enrichment.scheduler import (
    EnrichmentScheduler,
    chunked,
    has_complete_metadata,
    needs_enrichment,
)
from videotags.services.enrichment.state_tracker import EnrichmentStateTracker

__all__: list[str] = [
    "DisplayCollection",
    "EnrichmentScheduler",
    "EnrichmentStateTracker",
    "chunked",
    "has_complete_metadata",
    "merge",
    "needs_enrichment",
]
