"""
Feed configuration: pool sampling, relevance scoring, diversity, and preference learning.

FeedConfig defaults are defined here. Callers may pass a sectioned dict
(e.g. loaded from a JSON file); from_dict() flattens it and merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, model_validator


class FeedConfig(BaseModel):
    """Configuration for the feed-assembly pipeline and recommendation engine."""

    # -------------------------------------------------------------------------
    # Candidate Pool
    # -------------------------------------------------------------------------

    # Items requested per upstream page and per delivered feed page.
    page_size: int = 20

    # Number of upstream pages sampled per request (requested page included).
    pool_pages: int = 2

    # Discriminator used with the seed to pick the extra upstream pages.
    page_sampling_sentinel: int = 999

    # -------------------------------------------------------------------------
    # Relevance Scoring
    # score = sum(weight_* x sub-score) + seen_penalty
    # -------------------------------------------------------------------------

    weight_quality: float = 0.15
    weight_rating: float = 0.05
    weight_recency: float = 0.05
    # Applied to (1 - popularity) so less saturated items get a small lift.
    weight_discovery: float = 0.05
    weight_relevance: float = 0.10
    # Seeded randomness. Keeps repeated queries fresh across seeds.
    weight_jitter: float = 0.50

    # Per-field defaults for partial upstream data.
    default_quality: float = 50.0
    default_rating: float = 3.0
    default_years_since_release: float = 10.0

    # Stepped seen penalty: one prior display vs. two or more.
    seen_penalty_once: float = -0.5
    seen_penalty_repeat: float = -10.0

    # Minimum-viability gate: metacritic >= floor OR rating >= floor OR has image.
    viability_quality_floor: float = 30.0
    viability_rating_floor: float = 2.0

    # -------------------------------------------------------------------------
    # Diversity
    # max items per genre on a page = ceil(page_size / diversity_divisor)
    # -------------------------------------------------------------------------

    diversity_divisor: int = 3

    # -------------------------------------------------------------------------
    # Preference Learning
    # -------------------------------------------------------------------------

    # Dwell below this many seconds counts as a skip.
    skip_threshold_seconds: float = 2.0
    # Dwell above short threshold adds short_view_delta to each genre.
    short_view_seconds: float = 3.0
    short_view_delta: int = 2
    # Dwell above long threshold adds long_view_delta on top.
    long_view_seconds: float = 8.0
    long_view_delta: int = 5
    skip_delta: int = -1
    genre_interest_delta: int = 10
    view_history_limit: int = 30

    # -------------------------------------------------------------------------
    # Preference Scoring (score_item)
    # -------------------------------------------------------------------------

    base_item_score: float = 50.0
    affinity_scale: float = 1.0
    # Genres skipped more often than this start losing skip_penalty_step per extra skip.
    skip_penalty_threshold: int = 3
    skip_penalty_step: float = 5.0
    seen_item_score: float = -1000.0

    # -------------------------------------------------------------------------
    # Smart Feed
    # -------------------------------------------------------------------------

    bootstrap_interactions: int = 10
    # Exploration phase samples from the top (factor x limit) ranked items.
    exploration_pool_factor: int = 2
    high_tier_floor: float = 70.0
    medium_tier_floor: float = 50.0
    discovery_tier_floor: float = 30.0
    high_tier_share: float = 0.6
    medium_tier_share: float = 0.3
    discovery_tier_share: float = 0.1
    # When every pooled item was already seen, look this many pages further
    # for unseen ones before serving the penalized pool instead.
    smart_feed_page_advance: int = 3

    @model_validator(mode="after")
    def check_ranges(self):
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if not 1 <= self.pool_pages <= 4:
            raise ValueError(f"pool_pages must be between 1 and 4, got {self.pool_pages}")
        if self.weight_jitter < self.weight_quality:
            raise ValueError(
                f"weight_jitter ({self.weight_jitter}) must be at least weight_quality ({self.weight_quality})"
            )
        if self.seen_penalty_repeat > self.seen_penalty_once or self.seen_penalty_once > 0:
            raise ValueError("Seen penalties must be non-increasing: 0 >= once >= repeat")
        total = self.high_tier_share + self.medium_tier_share + self.discovery_tier_share
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Smart feed tier shares must sum to 1.0, got {total}")
        if self.smart_feed_page_advance < 0:
            raise ValueError(f"smart_feed_page_advance cannot be negative, got {self.smart_feed_page_advance}")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "FeedConfig":
        """Create config from a sectioned or flat dictionary (e.g., loaded from JSON)."""
        flat = {}
        for section in ("pool", "scoring", "diversity", "preferences", "smart_feed"):
            if section in config_dict:
                flat.update(config_dict[section])
        if "seen_penalty" in config_dict:
            sp = config_dict["seen_penalty"]
            if "once" in sp:
                flat["seen_penalty_once"] = sp["once"]
            if "repeat" in sp:
                flat["seen_penalty_repeat"] = sp["repeat"]
        allowed = set(cls.model_fields)
        flat.update({k: v for k, v in config_dict.items() if k in allowed})
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = FeedConfig()


def resolve_config(config: Optional["FeedConfig"]) -> "FeedConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
