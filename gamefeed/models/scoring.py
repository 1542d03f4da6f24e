"""
Scoring models: ScoredCandidate, DiversitySelection, and SmartFeedEntry.

Contains:
- ScoredCandidate: a catalog item with its composite score and sub-scores
- DiversitySelection: the genre-capped page plus the pass-one/backfill boundary
- SmartFeedEntry: an item picked by the recommendation engine, tagged with its tier
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

from .item import CatalogItem


class ScoredCandidate(BaseModel):
    """A catalog item with all its scoring components. Recomputed on every pool assembly."""

    item: CatalogItem
    score: float
    jitter: float
    seen_count: int = Field(default=0, ge=0)
    quality: float = 0.0
    rating: float = 0.0
    popularity: float = 0.0
    recency: float = 0.0
    relevance: float = 0.0
    seen_penalty: float = 0.0

    def to_feed_entry(self) -> Dict[str, Any]:
        """Flatten into the feed entry shape handed to the presentation layer."""
        item = self.item
        return {
            "id": item.id,
            "name": item.name,
            "released": item.released or "N/A",
            "background_image": item.background_image or "",
            "rating": item.rating or 0,
            "metacritic": item.metacritic,
            "stores": item.platforms,
            "genres": [g.model_dump() for g in item.genres],
            "description": item.description_raw,
            "_score": round(self.score, 4),
            "_seenCount": self.seen_count,
        }


class DiversitySelection(BaseModel):
    """
    A genre-capped page.

    items[:first_pass_count] were accepted under the per-genre cap;
    the remainder are uncapped backfill.
    """

    items: List[ScoredCandidate] = Field(default_factory=list)
    first_pass_count: int = 0

    @property
    def first_pass(self) -> List[ScoredCandidate]:
        return self.items[: self.first_pass_count]

    @property
    def backfill(self) -> List[ScoredCandidate]:
        return self.items[self.first_pass_count:]


Tier = Literal["explore", "high", "medium", "discovery"]


class SmartFeedEntry(BaseModel):
    """An item chosen by the smart feed with its preference score and tier."""

    item: CatalogItem
    score: float
    tier: Tier
