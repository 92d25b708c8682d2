"""
Unit tests for the videotags DI container.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from videotags.config.settings import Settings
from videotags.container import Container, container
from videotags.exceptions import ConfigurationError
from videotags.models.keyword_dictionary import DEFAULT_KEYWORDS
from videotags.services.enrichment.result_merger import DisplayCollection
from videotags.services.enrichment.scheduler import EnrichmentScheduler
from videotags.services.hashtag_classifier import HashtagClassifier
from videotags.services.twelvelabs_client import TwelveLabsClient


class TestSingletons:
    """Test cached singleton services."""

    def test_client_is_cached(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)

        client = c.twelvelabs_client

        assert isinstance(client, TwelveLabsClient)
        assert c.twelvelabs_client is client
        assert client.base_url == "https://api.test.local/v1.3"
        assert client.backoff_base == 0.0

    def test_client_requires_api_key(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings.model_copy(update={"twelvelabs_api_key": ""}))

        with pytest.raises(ConfigurationError) as exc_info:
            _ = c.twelvelabs_client

        assert exc_info.value.setting_name == "twelvelabs_api_key"

    def test_default_keyword_dictionary(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)

        assert c.keyword_dictionary is DEFAULT_KEYWORDS
        assert isinstance(c.hashtag_classifier, HashtagClassifier)
        assert c.hashtag_classifier is c.hashtag_classifier

    def test_keyword_dictionary_from_file(
        self, mock_settings: Settings, tmp_path: Path
    ) -> None:
        path = tmp_path / "keywords.json"
        path.write_text(json.dumps({"sector": ["gaming"]}))
        c = Container(
            settings=mock_settings.model_copy(update={"keyword_dictionary_path": path})
        )

        assert c.hashtag_classifier.classify("#gaming").sector == "gaming"

    @pytest.mark.parametrize("content", [None, "{broken", '{"sector": ["two words"]}'])
    def test_bad_keyword_dictionary(
        self, mock_settings: Settings, tmp_path: Path, content: str | None
    ) -> None:
        path = tmp_path / "keywords.json"
        if content is not None:
            path.write_text(content)
        c = Container(
            settings=mock_settings.model_copy(update={"keyword_dictionary_path": path})
        )

        with pytest.raises(ConfigurationError):
            _ = c.keyword_dictionary

    def test_state_tracker_uses_retry_budget(self, mock_settings: Settings) -> None:
        c = Container(
            settings=mock_settings.model_copy(update={"enrichment_max_attempts": 4})
        )

        assert c.state_tracker.max_attempts == 4
        assert c.state_tracker is c.state_tracker


class TestFactories:
    """Test transient factories."""

    def test_display_collections_are_transient(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)

        first = c.create_display_collection()

        assert isinstance(first, DisplayCollection)
        assert first is not c.create_display_collection()

    def test_scheduler_wiring(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)
        collection = c.create_display_collection()

        scheduler = c.create_scheduler("idx-content", collection)

        assert isinstance(scheduler, EnrichmentScheduler)
        assert scheduler.tag_generator is c.twelvelabs_client
        assert scheduler.metadata_store is c.twelvelabs_client
        assert scheduler.ingestion_status is c.twelvelabs_client
        assert scheduler.listing is c.twelvelabs_client
        assert scheduler.tracker is c.state_tracker
        assert scheduler.classifier is c.hashtag_classifier
        assert scheduler.collection is collection
        assert scheduler.concurrency == 10
        assert scheduler.cooldown == 0.0
        assert scheduler.call_timeout == 60.0

    def test_schedulers_share_tracker(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)

        content = c.create_scheduler("idx-content")
        ads = c.create_scheduler("idx-ads", concurrency=3)

        assert content.tracker is ads.tracker
        assert ads.concurrency == 3

    def test_scheduler_requires_index(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)

        with pytest.raises(ConfigurationError):
            c.create_scheduler("")


class TestReset:
    """Test mock injection and reset."""

    def test_injected_mock_is_cleared_by_reset(self, mock_settings: Settings) -> None:
        c = Container(settings=mock_settings)
        mock_client = MagicMock(spec=TwelveLabsClient)
        c.__dict__["twelvelabs_client"] = mock_client
        assert c.twelvelabs_client is mock_client

        c.reset()

        assert isinstance(c.twelvelabs_client, TwelveLabsClient)

    def test_global_container(self) -> None:
        assert isinstance(container, Container)
