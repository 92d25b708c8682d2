"""
videotags - Metadata enrichment pipeline for AI-tagged video libraries.

Finds videos in a Twelve Labs index that lack structured metadata, asks the
tagging service for hashtags, classifies them into categories and writes the
result back, keeping a live display collection in sync.
"""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "videotags"
__email__ = "noreply@videotags.dev"
__license__ = "MIT"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
