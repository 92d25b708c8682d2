"""
Factory definitions for Twelve Labs video records.

Provides factory-boy factories for creating test instances of listing
models with realistic and consistent test data.
"""

from __future__ import annotations

import factory
from factory import LazyFunction

from videotags.models.video import HlsInfo, PageInfo, SystemMetadata, VideoPage, VideoRecord


class SystemMetadataFactory(factory.Factory):
    """Factory for SystemMetadata models."""

    class Meta:
        model = SystemMetadata

    filename = factory.Sequence(lambda n: f"campaign_cut_{n:03d}.mp4")
    video_title = factory.Sequence(lambda n: f"Campaign Cut {n:03d}")
    duration = LazyFunction(lambda: 31.5)


class HlsInfoFactory(factory.Factory):
    """Factory for HlsInfo models."""

    class Meta:
        model = HlsInfo

    video_url = factory.Sequence(
        lambda n: f"https://stream.test.local/videos/{n:04d}/stream.m3u8"
    )
    thumbnail_urls = factory.Sequence(
        lambda n: [f"https://stream.test.local/videos/{n:04d}/thumb.jpg"]
    )
    status = LazyFunction(lambda: "COMPLETE")


class VideoRecordFactory(factory.Factory):
    """Factory for VideoRecord models; untagged and ready by default."""

    class Meta:
        model = VideoRecord

    id = factory.Sequence(lambda n: f"vid-{n:04d}")
    index_id = LazyFunction(lambda: "idx-content")
    user_metadata = LazyFunction(lambda: None)
    system_metadata = factory.SubFactory(SystemMetadataFactory)
    hls = factory.SubFactory(HlsInfoFactory)
    indexing_status = LazyFunction(lambda: None)


class TaggedVideoRecordFactory(VideoRecordFactory):
    """Factory for videos that already carry enrichment."""

    user_metadata = LazyFunction(
        lambda: {
            "source": "",
            "sector": "beauty",
            "emotions": "calm",
            "brands": "fentybeauty",
            "locations": "seoul",
            "demographics": "female, 25-34",
        }
    )


class PageInfoFactory(factory.Factory):
    """Factory for PageInfo models."""

    class Meta:
        model = PageInfo

    page = 1
    total_page = 1
    total_count = 0


class VideoPageFactory(factory.Factory):
    """Factory for VideoPage models."""

    class Meta:
        model = VideoPage

    data = LazyFunction(list)
    page_info = factory.SubFactory(PageInfoFactory)
