"""Data models for the feed pipeline."""

from .config import DEFAULT_CONFIG, FeedConfig, resolve_config
from .item import CatalogItem, Genre, ensure_item, ensure_items, parse_upstream_rows
from .profile import PreferenceProfile, ViewRecord
from .scoring import DiversitySelection, ScoredCandidate, SmartFeedEntry
from .session import FeedPage, FeedRequest

__all__ = [
    "DEFAULT_CONFIG",
    "CatalogItem",
    "DiversitySelection",
    "FeedConfig",
    "FeedPage",
    "FeedRequest",
    "Genre",
    "PreferenceProfile",
    "ScoredCandidate",
    "SmartFeedEntry",
    "ViewRecord",
    "ensure_item",
    "ensure_items",
    "parse_upstream_rows",
    "resolve_config",
]
