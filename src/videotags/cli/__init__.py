"""
CLI interface module for videotags.

Provides Typer-based command-line interface for classifying hashtags and
enriching the videos of a Twelve Labs index.
"""

from __future__ import annotations

__all__: list[str] = []
