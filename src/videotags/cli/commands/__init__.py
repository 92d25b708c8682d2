"""CLI sub-command groups for videotags."""

from __future__ import annotations

__all__: list[str] = []
