"""
Categorized metadata models.

Defines the fixed-shape record produced by hashtag classification and
the display chips derived from it.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from videotags.models.enums import Category

# Serialization order of the categorized fields
CATEGORY_FIELDS: tuple[str, ...] = tuple(category.value for category in Category)

# Fields that decide whether a video still needs enrichment.
# Demographics is left out: a video tagged only with demographics counts as bare.
DEFAULT_COMPLETENESS_FIELDS: tuple[str, ...] = (
    "source",
    "sector",
    "emotions",
    "brands",
    "locations",
)

# Older uploads stored the sector under this key
LEGACY_SECTOR_KEY = "topic_category"

# Display label per category, in chip order
TAG_LABELS: tuple[tuple[str, str], ...] = (
    ("source", "Source"),
    ("demographics", "Demographics"),
    ("sector", "Sector"),
    ("emotions", "Emotions"),
    ("brands", "Brands"),
    ("locations", "Location"),
)


def metadata_value(bag: Optional[Mapping[str, Any]], field: str) -> str:
    """
    Read one category from a raw vendor metadata bag.

    Non-string values count as absent. ``sector`` falls back to the
    legacy ``topic_category`` key.

    Parameters
    ----------
    bag : Mapping[str, Any] | None
        The raw ``user_metadata`` bag.
    field : str
        Category name.

    Returns
    -------
    str
        The stripped value, or ``""`` when absent.
    """
    if not bag:
        return ""
    value = bag.get(field)
    if not (isinstance(value, str) and value.strip()) and field == "sector":
        value = bag.get(LEGACY_SECTOR_KEY)
    if isinstance(value, str):
        return value.strip()
    return ""


class CategorizedMetadata(BaseModel):
    """Structured metadata for one video; absent categories are empty strings."""

    source: str = Field(default="", description="Content source")
    sector: str = Field(default="", description="Industry sector")
    emotions: str = Field(default="", description="Emotional tone")
    brands: str = Field(default="", description="Mentioned brands")
    locations: str = Field(default="", description="Locations shown or named")
    demographics: str = Field(default="", description="Target demographics")

    model_config = ConfigDict(frozen=True)

    def is_empty(self) -> bool:
        """Check whether every category is empty."""
        return not any(getattr(self, field) for field in CATEGORY_FIELDS)

    def to_user_metadata(self) -> dict[str, str]:
        """Build the ``user_metadata`` payload stored on the video."""
        return {field: getattr(self, field) for field in CATEGORY_FIELDS}

    @classmethod
    def from_user_metadata(
        cls, bag: Optional[Mapping[str, Any]]
    ) -> "CategorizedMetadata":
        """Read a raw vendor bag into a categorized record."""
        return cls(**{field: metadata_value(bag, field) for field in CATEGORY_FIELDS})


class MetadataTag(BaseModel):
    """A single display chip such as ``Sector: tech``."""

    category: str = Field(..., min_length=1, description="Display label")
    value: str = Field(..., min_length=1, description="Category value")

    model_config = ConfigDict(frozen=True)


def metadata_to_tags(bag: Optional[Mapping[str, Any]]) -> list[MetadataTag]:
    """
    Derive display chips from a metadata bag.

    One chip per non-empty category in the order Source, Demographics,
    Sector, Emotions, Brands, Location.

    Examples
    --------
    >>> [t.category for t in metadata_to_tags({"sector": "tech", "brands": "nike"})]
    ['Sector', 'Brands']
    """
    tags: list[MetadataTag] = []
    for field, label in TAG_LABELS:
        value = metadata_value(bag, field)
        if value:
            tags.append(MetadataTag(category=label, value=value))
    return tags
