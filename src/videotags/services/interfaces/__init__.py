"""
Service interfaces (ABCs) for the videotags application.

These abstract base classes define the contracts the enrichment pipeline
expects from its external collaborators, enabling dependency injection,
testing with mocks, and swappable implementations.
"""

from .ingestion_status_interface import IngestionStatusInterface
from .metadata_store_interface import MetadataStoreInterface
from .tag_generator_interface import TagGeneratorInterface
from .video_listing_interface import VideoListingInterface

__all__ = [
    "IngestionStatusInterface",
    "MetadataStoreInterface",
    "TagGeneratorInterface",
    "VideoListingInterface",
]
