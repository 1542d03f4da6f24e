"""
gamefeed: personalized, non-repeating game feed assembly

Single entry point for the feed package:
- models/: FeedConfig, CatalogItem, ScoredCandidate, PreferenceProfile, FeedRequest/FeedPage
- stages/: candidate_pool (Stage A), relevance (Stage B), diversity, orchestrator
- utils/: seeded randomness, score helpers, platform normalization
- seen_tracker, recommendation_engine, session: per-viewer state and the page loop
"""

from gamefeed.models.config import DEFAULT_CONFIG, FeedConfig, resolve_config
from gamefeed.models.item import CatalogItem, Genre, ensure_item, ensure_items
from gamefeed.models.profile import PreferenceProfile
from gamefeed.models.scoring import DiversitySelection, ScoredCandidate, SmartFeedEntry
from gamefeed.models.session import FeedPage, FeedRequest
from gamefeed.persistence import InMemoryPersistence, JsonFilePersistence, StatePersistence
from gamefeed.recommendation_engine import RecommendationEngine
from gamefeed.seen_tracker import SeenTracker
from gamefeed.session import FeedSession
from gamefeed.stages import (
    assemble_candidate_pool,
    assemble_feed_page,
    score_candidates,
    select_diverse_page,
)
from gamefeed.utils.seeded import derive

__all__ = [
    "CatalogItem",
    "DEFAULT_CONFIG",
    "DiversitySelection",
    "FeedConfig",
    "FeedPage",
    "FeedRequest",
    "FeedSession",
    "Genre",
    "InMemoryPersistence",
    "JsonFilePersistence",
    "PreferenceProfile",
    "RecommendationEngine",
    "ScoredCandidate",
    "SeenTracker",
    "SmartFeedEntry",
    "StatePersistence",
    "assemble_candidate_pool",
    "assemble_feed_page",
    "derive",
    "ensure_item",
    "ensure_items",
    "resolve_config",
    "score_candidates",
    "select_diverse_page",
]
