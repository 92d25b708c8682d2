"""
Keyword dictionary for hashtag classification.

Holds one lowercase keyword set per classifiable category. The sets are
meant to be disjoint; when they are not, the classifier's priority order
decides, and ``overlaps()`` reports the conflicts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# Membership is tested in this order; the first matching set wins
PRIORITY_ORDER: tuple[str, ...] = (
    "demographics",
    "sector",
    "emotions",
    "locations",
    "brands",
)


class KeywordDictionary(BaseModel):
    """Lowercase keyword sets, one per category except ``source``."""

    demographics: frozenset[str] = Field(default_factory=frozenset)
    sector: frozenset[str] = Field(default_factory=frozenset)
    emotions: frozenset[str] = Field(default_factory=frozenset)
    locations: frozenset[str] = Field(default_factory=frozenset)
    brands: frozenset[str] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator(*PRIORITY_ORDER, mode="before")
    @classmethod
    def normalize_keywords(cls, v: object) -> frozenset[str]:
        """Lowercase keywords and reject ones a single token can never match."""
        if isinstance(v, str) or not hasattr(v, "__iter__"):
            raise ValueError("Keywords must be a list of strings")
        keywords: set[str] = set()
        for keyword in v:
            if not isinstance(keyword, str):
                raise ValueError(f"Keyword must be a string, got {type(keyword).__name__}")
            cleaned = keyword.strip().lower()
            if not cleaned or any(ch.isspace() for ch in cleaned):
                raise ValueError(f"Keyword must be a single non-empty token: {keyword!r}")
            keywords.add(cleaned)
        return frozenset(keywords)

    def overlaps(self) -> dict[str, tuple[str, ...]]:
        """
        Report keywords listed under more than one category.

        Returns
        -------
        dict[str, tuple[str, ...]]
            Keyword mapped to the categories containing it, in priority order.
        """
        seen: dict[str, list[str]] = {}
        for category in PRIORITY_ORDER:
            for keyword in getattr(self, category):
                seen.setdefault(keyword, []).append(category)
        return {
            keyword: tuple(categories)
            for keyword, categories in sorted(seen.items())
            if len(categories) > 1
        }

    @classmethod
    def from_file(cls, path: Path) -> "KeywordDictionary":
        """
        Load a dictionary from a JSON file.

        Parameters
        ----------
        path : Path
            JSON object with any of the five category keys mapped to lists.

        Returns
        -------
        KeywordDictionary
            The loaded dictionary. Overlapping keywords are logged.
        """
        dictionary = cls.model_validate_json(path.read_text(encoding="utf-8"))
        for keyword, categories in dictionary.overlaps().items():
            logger.warning(
                f"Keyword '{keyword}' appears in {', '.join(categories)}; "
                f"'{categories[0]}' takes priority"
            )
        return dictionary


DEFAULT_KEYWORDS = KeywordDictionary(
    demographics=["male", "female", "18-25", "25-34", "35-44", "45-54", "55+"],
    sector=["beauty", "fashion", "tech", "travel", "cpg", "food", "bev", "retail"],
    emotions=[
        "happy",
        "positive",
        "happypositive",
        "happy/positive",
        "exciting",
        "relaxing",
        "inspiring",
        "serious",
        "festive",
        "calm",
    ],
    locations=[
        "seoul",
        "dubai",
        "doha",
        "newyork",
        "paris",
        "tokyo",
        "london",
        "berlin",
        "lasvegas",
        "france",
        "korea",
        "qatar",
        "uae",
        "usa",
        "bocachica",
        "bocachicabeach",
    ],
    brands=[
        "fentybeauty",
        "adidas",
        "nike",
        "spacex",
        "apple",
        "microsoft",
        "google",
        "amazon",
        "ferrari",
        "heineken",
        "redbullracing",
        "redbull",
        "sailgp",
        "fifaworldcup",
        "fifa",
        "tourdefrance",
        "nttdata",
        "oracle",
    ],
)
