"""
CatalogItem model: typed representation of an upstream game record.

Used by the pool assembler, relevance scorer, diversity selector, and
recommendation engine instead of raw dicts. Built from upstream JSON via
CatalogItem.model_validate(d); field names follow the upstream keys.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

ItemId = Union[int, str]


class Genre(BaseModel):
    """Genre tag. A bare string is accepted as both slug and name."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    slug: str = ""
    name: str = ""

    @model_validator(mode="before")
    @classmethod
    def from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"slug": data, "name": data}
        return data

    @property
    def key(self) -> str:
        """Identity used for affinity and per-page genre counting."""
        return self.slug or self.name


class CatalogItem(BaseModel):
    """
    Game payload used across the feed stages.

    Only id is required; every other field has an explicit default so the
    pipeline never has to ask whether a field was present upstream.
    """

    model_config = ConfigDict(extra="allow")

    id: ItemId
    name: str = ""
    released: Optional[str] = None
    background_image: Optional[str] = None
    rating: Optional[float] = None
    metacritic: Optional[float] = None
    added: Optional[int] = None
    genres: List[Genre] = []
    platforms: List[Dict[str, Any]] = []
    description_raw: str = ""

    @field_validator("id")
    @classmethod
    def id_present(cls, v: ItemId) -> ItemId:
        if isinstance(v, str) and not v.strip():
            raise ValueError("item id cannot be empty")
        return v

    @field_validator("name", "description_raw", mode="before")
    @classmethod
    def none_to_empty_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("genres", "platforms", mode="before")
    @classmethod
    def none_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def key(self) -> str:
        """String-encoded identity, as used for persisted seen counts."""
        return str(self.id)

    @property
    def dedup_strength(self) -> float:
        """Quality + rating sum used to pick the survivor among duplicate records."""
        return (self.metacritic or 0) + (self.rating or 0)

    @property
    def genre_keys(self) -> List[str]:
        return [g.key for g in self.genres if g.key]

    @property
    def genre_slugs(self) -> List[str]:
        return [g.slug for g in self.genres if g.slug]

    @property
    def has_image(self) -> bool:
        return bool(self.background_image)


def ensure_item(item: Union[Dict[str, Any], "CatalogItem"]) -> "CatalogItem":
    """Convert a dict to a CatalogItem; raises ValidationError (a ValueError) when it has no id."""
    return CatalogItem.model_validate(item) if isinstance(item, dict) else item


def ensure_items(items: List[Union[Dict[str, Any], "CatalogItem"]]) -> List["CatalogItem"]:
    """Convert list of dicts or CatalogItems to CatalogItem models for use in the pipeline."""
    return [ensure_item(i) for i in items]


def parse_upstream_rows(rows: List[Any]) -> List["CatalogItem"]:
    """
    Parse upstream rows at the ingestion boundary.

    Rows without a usable identity (or not objects at all) are skipped and
    logged rather than failing the whole page.
    """
    items: List[CatalogItem] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, dict) or not row.get("id"):
            skipped += 1
            continue
        try:
            items.append(CatalogItem.model_validate(row))
        except ValidationError as e:
            skipped += 1
            logger.warning("[ingest] ROW_REJECTED id=%s errors=%s", row.get("id"), e.error_count())
    if skipped:
        logger.warning("[ingest] ROWS_SKIPPED skipped=%s total=%s", skipped, len(rows))
    return items
