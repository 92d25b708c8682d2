"""
Pytest configuration and fixtures for videotags tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from videotags.config.settings import Settings
from videotags.services.enrichment.state_tracker import EnrichmentStateTracker
from videotags.services.interfaces import (
    MetadataStoreInterface,
    TagGeneratorInterface,
)

SAMPLE_HASHTAGS = "#male #tech #exciting #newyork #adidas"


@pytest.fixture
def mock_settings(tmp_path):
    """Settings isolated from the environment and the working directory."""
    return Settings(
        _env_file=None,
        twelvelabs_api_key="test_api_key",
        twelvelabs_api_base_url="https://api.test.local/v1.3",
        content_index_id="idx-content",
        ads_index_id="idx-ads",
        enrichment_cooldown_ms=0,
        retry_backoff=0.0,
        logs_dir=tmp_path / "logs",
        export_dir=tmp_path / "exports",
    )


@pytest.fixture
def tracker() -> EnrichmentStateTracker:
    """Fresh state tracker with unbounded retries."""
    return EnrichmentStateTracker()


@pytest.fixture
def tag_generator() -> AsyncMock:
    """Tag generator that answers every video with the sample hashtags."""
    generator = AsyncMock(spec=TagGeneratorInterface)
    generator.generate.return_value = SAMPLE_HASHTAGS
    return generator


@pytest.fixture
def metadata_store() -> AsyncMock:
    """Metadata store that accepts every update."""
    store = AsyncMock(spec=MetadataStoreInterface)
    store.update.return_value = True
    return store


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock for driving scheduler cooldowns."""
    return FakeClock()

