"""
Services module for videotags.

Contains the hashtag classifier, the Twelve Labs API client and the
enrichment pipeline.
"""

from __future__ import annotations

from videotags.services.hashtag_classifier import HashtagClassifier, classify
from videotags.services.twelvelabs_client import TwelveLabsClient

__all__: list[str] = ["HashtagClassifier", "TwelveLabsClient", "classify"]
