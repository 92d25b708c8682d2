"""
Hashtag classifier for generated video tags.

Turns the free text returned by the tagging service into a
``CategorizedMetadata`` record. The classifier is pure (no I/O) and
total: any string input yields a record, never an exception.

Classification runs in strict order:

1. Replace newlines with spaces and split on whitespace
2. Keep ``#``-prefixed tokens, strip the marker, lowercase
3. Match each token against the keyword sets in priority order
   (demographics, sector, emotions, locations, brands); first match wins
4. Collect unmatched tokens, in order, into an unclassified pool
5. Fill an empty ``locations`` from the pool, then an empty ``brands``
6. Join each category's tokens with ``", "``

Repeated tokens are kept; ``"#tech #tech"`` yields ``sector="tech, tech"``.
"""

from __future__ import annotations

import logging

from videotags.models.keyword_dictionary import (
    DEFAULT_KEYWORDS,
    PRIORITY_ORDER,
    KeywordDictionary,
)
from videotags.models.metadata import CategorizedMetadata

logger = logging.getLogger(__name__)

HASHTAG_MARKER = "#"
TOKEN_SEPARATOR = ", "


def extract_hashtags(raw_text: str) -> list[str]:
    """
    Extract normalized hashtag tokens from generator output.

    Parameters
    ----------
    raw_text : str
        Text containing ``#token`` hashtags separated by whitespace.

    Returns
    -------
    list[str]
        Tokens without the marker, lowercased, in encounter order.

    Examples
    --------
    >>> extract_hashtags("#Male #Tech\\nplain #NewYork")
    ['male', 'tech', 'newyork']
    """
    text = raw_text.replace("\n", " ")
    return [
        token[len(HASHTAG_MARKER):].lower()
        for token in text.split()
        if token.startswith(HASHTAG_MARKER)
    ]


class HashtagClassifier:
    """
    Classifier that maps hashtags onto metadata categories.

    Parameters
    ----------
    keywords : KeywordDictionary, optional
        Keyword sets to match against (default: the dashboard's built-in
        dictionary).

    Examples
    --------
    >>> HashtagClassifier().classify("#male #tech #exciting #newyork #adidas").sector
    'tech'
    """

    def __init__(self, keywords: KeywordDictionary = DEFAULT_KEYWORDS) -> None:
        self.keywords = keywords
        self._priority = [
            (category, getattr(keywords, category)) for category in PRIORITY_ORDER
        ]

    def match_category(self, token: str) -> str | None:
        """Return the highest-priority category containing ``token``."""
        for category, keyword_set in self._priority:
            if token in keyword_set:
                return category
        return None

    def classify(self, raw_text: str) -> CategorizedMetadata:
        """
        Classify generator output into categorized metadata.

        Parameters
        ----------
        raw_text : str
            Raw text from the tagging service.

        Returns
        -------
        CategorizedMetadata
            Record with every category present; unmatched categories are ``""``.

        Raises
        ------
        TypeError
            If ``raw_text`` is not a string.
        """
        if not isinstance(raw_text, str):
            raise TypeError(
                f"raw_text must be a string, got {type(raw_text).__name__}"
            )

        collected: dict[str, list[str]] = {category: [] for category in PRIORITY_ORDER}
        unclassified: list[str] = []

        for token in extract_hashtags(raw_text):
            category = self.match_category(token)
            if category is None:
                unclassified.append(token)
            else:
                collected[category].append(token)

        if not collected["locations"] and unclassified:
            collected["locations"].append(unclassified.pop(0))
        if not collected["brands"] and unclassified:
            collected["brands"].append(unclassified.pop(0))

        if unclassified:
            logger.debug(f"Dropping unclassified hashtags: {unclassified}")

        return CategorizedMetadata(
            **{
                category: TOKEN_SEPARATOR.join(tokens)
                for category, tokens in collected.items()
            }
        )


_default_classifier = HashtagClassifier()


def classify(raw_text: str) -> CategorizedMetadata:
    """Classify ``raw_text`` with the default keyword dictionary."""
    return _default_classifier.classify(raw_text)
