"""
PreferenceProfile model: the persisted per-viewer preference state.

Persisted as JSON with camelCase keys (genreScores, skippedGenres, viewHistory,
totalInteractions). Unknown keys are ignored; missing keys take defaults.
Legacy profiles that stored the history under "viewTimes" are still accepted.
"""

from typing import Dict, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .item import ItemId


class ViewRecord(BaseModel):
    """One recorded view: which item, how long it stayed on screen, its genre slugs."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    item_id: ItemId = Field(alias="gameId")
    dwell_seconds: float = Field(default=0.0, alias="duration")
    genres: List[str] = Field(default_factory=list)


class PreferenceProfile(BaseModel):
    """Per-genre affinity, skip counts, bounded view history, and interaction counter."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    genre_scores: Dict[str, int] = Field(default_factory=dict, alias="genreScores")
    skipped_genres: Dict[str, int] = Field(default_factory=dict, alias="skippedGenres")
    view_history: List[ViewRecord] = Field(
        default_factory=list,
        validation_alias=AliasChoices("viewHistory", "viewTimes", "view_history"),
        serialization_alias="viewHistory",
    )
    total_interactions: int = Field(default=0, ge=0, alias="totalInteractions")

    def trim_history(self, limit: int) -> None:
        """Keep only the most recent `limit` view records."""
        if len(self.view_history) > limit:
            self.view_history = self.view_history[-limit:]

    def to_storage(self) -> Dict:
        """JSON-ready dict in the persisted camelCase shape."""
        return self.model_dump(mode="json", by_alias=True)
