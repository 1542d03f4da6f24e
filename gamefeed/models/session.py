"""
Request/page models: one feed page request and the page delivered for it.
"""

import uuid
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .scoring import ScoredCandidate

Seed = Union[int, str]


class FeedRequest(BaseModel):
    """Parameters for one page of the feed. Invalid values are caller bugs and raise."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    pool_pages: int = Field(default=2, ge=1, le=4)
    genres: Optional[str] = None
    search: Optional[str] = None
    seed: Seed


class FeedPage(BaseModel):
    """A delivered feed page."""

    page: int
    seed: Seed
    entries: List[ScoredCandidate] = Field(default_factory=list)
    first_pass_count: int = 0
    page_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def item_ids(self) -> List[Any]:
        return [e.item.id for e in self.entries]

    def to_feed_entries(self) -> List[Dict[str, Any]]:
        return [e.to_feed_entry() for e in self.entries]
