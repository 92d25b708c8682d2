"""
Enums for videotags models.

Defines enumeration types used across the enrichment pipeline for
consistent type safety and validation.
"""

from __future__ import annotations

from enum import Enum


class EnrichmentState(str, Enum):
    """Per-video position in the enrichment lifecycle."""

    ELIGIBLE = "eligible"
    QUEUED = "queued"
    IN_FLIGHT = "in_flight"
    DONE = "done"


class SchedulerState(str, Enum):
    """Batch-level state of the enrichment scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    COOLING_DOWN = "cooling_down"


class Category(str, Enum):
    """Metadata categories produced by hashtag classification."""

    SOURCE = "source"
    SECTOR = "sector"
    EMOTIONS = "emotions"
    BRANDS = "brands"
    LOCATIONS = "locations"
    DEMOGRAPHICS = "demographics"


# Ingestion status that makes a video eligible for enrichment
READY_STATUS = "ready"
