"""
Configuration management module for videotags.

Handles application settings, environment variables, Twelve Labs credentials
and the tunables of the enrichment pipeline.
"""

from __future__ import annotations

__all__: list[str] = []
