"""
Tests for the enrich CLI commands.

The Twelve Labs client is replaced by an AsyncMock injected into a
container built over test settings, so the real scheduler, classifier
and display collection run end to end without network access.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from tests.factories.video_record_factory import (
    PageInfoFactory,
    TaggedVideoRecordFactory,
    VideoPageFactory,
    VideoRecordFactory,
)
from videotags.config.settings import Settings
from videotags.container import Container
from videotags.exceptions import (
    EXIT_CODE_API_ERROR,
    EXIT_CODE_CONFIGURATION_ERROR,
    EXIT_CODE_INTERRUPTED,
    EXIT_CODE_PARTIAL_SUCCESS,
    TwelveLabsAPIError,
)
from videotags.cli.commands.enrich import app
from videotags.services.twelvelabs_client import TwelveLabsClient

runner = CliRunner()

SAMPLE_HASHTAGS = "#female #beauty #calm #seoul #fentybeauty"


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Remove handlers the run command attaches to the package logger."""
    package_logger = logging.getLogger("videotags")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers:
        if handler not in handlers:
            package_logger.removeHandler(handler)
            handler.close()
    package_logger.setLevel(level)


@pytest.fixture
def fake_client() -> AsyncMock:
    """Client double for every Twelve Labs endpoint."""
    client = AsyncMock(spec=TwelveLabsClient)
    client.generate.return_value = SAMPLE_HASHTAGS
    client.update.return_value = True
    client.get_statuses.return_value = {}
    client.get_video.side_effect = lambda index_id, video_id: VideoRecordFactory.build(
        id=video_id, index_id=index_id
    )
    client.list_videos.return_value = VideoPageFactory.build(
        data=VideoRecordFactory.build_batch(3)
    )
    return client


def _patched(settings: Settings, client: Any = None) -> Any:
    """Patch the enrich module's settings and container."""
    test_container = Container(settings=settings)
    if client is not None:
        test_container.__dict__["twelvelabs_client"] = client
    return patch.multiple(
        "videotags.cli.commands.enrich",
        settings=settings,
        container=test_container,
    )


class TestEnrichRun:
    """Tests for `videotags enrich run`."""

    def test_run_enriches_bare_videos(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0, result.stdout
        assert "Enrichment Complete" in result.stdout
        assert fake_client.generate.await_count == 3
        assert fake_client.update.await_count == 3
        _, index_id, metadata = fake_client.update.await_args.args
        assert index_id == "idx-content"
        assert metadata.sector == "beauty"
        assert metadata.brands == "fentybeauty"
        fake_client.close.assert_awaited_once()

    def test_run_writes_log_file(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        log_files = list(mock_settings.logs_dir.glob("enrichment-*.log"))
        assert len(log_files) == 1

    def test_run_skips_tagged_videos(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.list_videos.return_value = VideoPageFactory.build(
            data=[TaggedVideoRecordFactory.build(), VideoRecordFactory.build()]
        )

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert fake_client.generate.await_count == 1

    def test_run_loads_requested_pages(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.list_videos.side_effect = [
            VideoPageFactory.build(
                data=VideoRecordFactory.build_batch(2),
                page_info=PageInfoFactory.build(page=1, total_page=2, total_count=3),
            ),
            VideoPageFactory.build(
                data=VideoRecordFactory.build_batch(1),
                page_info=PageInfoFactory.build(page=2, total_page=2, total_count=3),
            ),
        ]

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--pages", "5"])

        assert result.exit_code == 0
        assert fake_client.list_videos.await_count == 2
        assert fake_client.list_videos.await_args.kwargs["page"] == 2
        assert fake_client.generate.await_count == 3

    def test_run_saves_report(
        self, mock_settings: Settings, fake_client: AsyncMock, tmp_path: Path
    ) -> None:
        report_path = tmp_path / "reports" / "run.json"

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--report", str(report_path)])

        assert result.exit_code == 0
        report = json.loads(report_path.read_text())
        assert report["index_id"] == "idx-content"
        assert report["summary"]["videos_enriched"] == 3
        assert {detail["status"] for detail in report["details"]} == {"enriched"}

    def test_run_index_id_option(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--index-id", "idx-ads"])

        assert result.exit_code == 0
        assert fake_client.list_videos.await_args.args[0] == "idx-ads"
        assert fake_client.update.await_args.args[1] == "idx-ads"

    def test_partial_failure_exit_code(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.update.side_effect = [
            True,
            TwelveLabsAPIError("Twelve Labs PUT returned 500", status_code=500),
            True,
        ]

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == EXIT_CODE_PARTIAL_SUCCESS
        assert "Errors" in result.stdout

    def test_missing_index_id(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        settings = mock_settings.model_copy(update={"content_index_id": ""})

        with _patched(settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == EXIT_CODE_CONFIGURATION_ERROR
        assert "No index ID given" in result.stdout
        fake_client.list_videos.assert_not_awaited()

    def test_missing_api_key(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        settings = mock_settings.model_copy(update={"twelvelabs_api_key": ""})

        with _patched(settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == EXIT_CODE_CONFIGURATION_ERROR
        assert "TWELVELABS_API_KEY" in result.stdout

    def test_listing_error_exit_code(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.list_videos.side_effect = TwelveLabsAPIError(
            "Twelve Labs GET /indexes/idx-content/videos returned 401", status_code=401
        )

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == EXIT_CODE_API_ERROR
        assert "returned 401" in result.stdout
        fake_client.close.assert_awaited_once()

    def test_transport_error_exit_code(self, mock_settings: Settings) -> None:
        with _patched(mock_settings), patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ReadError("connection reset"),
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == EXIT_CODE_API_ERROR
        assert "ReadError" in result.stdout

    def test_ads_flag_selects_ads_index(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--ads"])

        assert result.exit_code == 0
        assert fake_client.list_videos.await_args.args[0] == "idx-ads"
        assert fake_client.update.await_args.args[1] == "idx-ads"

    def test_ads_flag_without_ads_index(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        settings = mock_settings.model_copy(update={"ads_index_id": ""})

        with _patched(settings, fake_client):
            result = runner.invoke(app, ["run", "--ads"])

        assert result.exit_code == EXIT_CODE_CONFIGURATION_ERROR
        assert "ADS_INDEX_ID" in result.stdout

    def test_log_level_setting_applies(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        settings = mock_settings.model_copy(update={"log_level": "WARNING"})

        with _patched(settings, fake_client):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert logging.getLogger("videotags").level == logging.WARNING

    def test_all_pages_walks_whole_index(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.list_videos.side_effect = [
            VideoPageFactory.build(
                data=VideoRecordFactory.build_batch(2),
                page_info=PageInfoFactory.build(page=page, total_page=3, total_count=6),
            )
            for page in (1, 2, 3)
        ]

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--all-pages"])

        assert result.exit_code == 0
        pages = [call.kwargs["page"] for call in fake_client.list_videos.await_args_list]
        assert pages == [1, 2, 3]
        assert fake_client.generate.await_count == 6

    def test_limit_caps_enriched_videos(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--limit", "1"])

        assert result.exit_code == 0
        assert fake_client.generate.await_count == 1
        assert "Left by Limit: 2" in result.stdout

    def test_force_regenerates_tagged_videos(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.list_videos.return_value = VideoPageFactory.build(
            data=[TaggedVideoRecordFactory.build(), VideoRecordFactory.build()]
        )

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["run", "--force"])

        assert result.exit_code == 0
        assert fake_client.generate.await_count == 2
        assert fake_client.update.await_count == 2

    def test_interrupt_exit_code(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        def interrupt(coro: Any) -> None:
            coro.close()
            raise KeyboardInterrupt

        with _patched(mock_settings, fake_client), patch(
            "videotags.cli.commands.enrich.asyncio.run", side_effect=interrupt
        ):
            result = runner.invoke(app, ["run"])

        assert result.exit_code == EXIT_CODE_INTERRUPTED
        assert "interrupted" in result.stdout


class TestEnrichPreview:
    """Tests for `videotags enrich preview`."""

    def test_preview_lists_candidates_without_changes(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        bare = VideoRecordFactory.build()
        tagged = TaggedVideoRecordFactory.build()
        indexing = VideoRecordFactory.build(indexing_status="indexing")
        fake_client.list_videos.return_value = VideoPageFactory.build(
            data=[bare, tagged, indexing]
        )

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["preview"])

        assert result.exit_code == 0, result.stdout
        assert "DRY RUN" in result.stdout
        assert "Videos that would be enriched: 1" in result.stdout
        assert bare.id in result.stdout
        fake_client.generate.assert_not_awaited()
        fake_client.update.assert_not_awaited()

    def test_preview_missing_index_id(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        settings = mock_settings.model_copy(update={"content_index_id": ""})

        with _patched(settings, fake_client):
            result = runner.invoke(app, ["preview"])

        assert result.exit_code == EXIT_CODE_CONFIGURATION_ERROR

    def test_preview_applies_ingestion_statuses(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        records = VideoRecordFactory.build_batch(2)
        fake_client.list_videos.return_value = VideoPageFactory.build(data=records)
        fake_client.get_statuses.return_value = {records[0].id: "indexing"}

        with _patched(mock_settings, fake_client):
            result = runner.invoke(app, ["preview"])

        assert result.exit_code == 0, result.stdout
        assert "indexing" in result.stdout
        assert "Videos that would be enriched: 1" in result.stdout
        fake_client.get_statuses.assert_awaited_once()
        fake_client.close.assert_awaited_once()

    def test_preview_force_and_limit(
        self, mock_settings: Settings, fake_client: AsyncMock
    ) -> None:
        fake_client.list_videos.return_value = VideoPageFactory.build(
            data=TaggedVideoRecordFactory.build_batch(3)
        )

        with _patched(mock_settings, fake_client):
            plain = runner.invoke(app, ["preview"])
            forced = runner.invoke(app, ["preview", "--force", "--limit", "2"])

        assert "Videos that would be enriched: 0" in plain.stdout
        assert "Videos that would be enriched: 2" in forced.stdout
        fake_client.generate.assert_not_awaited()

    def test_preview_transport_error_exit_code(self, mock_settings: Settings) -> None:
        with _patched(mock_settings), patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.RemoteProtocolError("peer closed connection"),
        ):
            result = runner.invoke(app, ["preview"])

        assert result.exit_code == EXIT_CODE_API_ERROR
