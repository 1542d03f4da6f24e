"""
Recommendation engine: on-device preference learning and smart feed assembly.

Learns per-genre affinity from dwell time, skips, and explicit genre interest,
scores items against that profile, and mixes a feed from three score tiers
once enough interactions have been observed.

One engine instance is constructed per viewer session and passed to whoever
needs it; it owns the PreferenceProfile and is the only writer of it.
"""

import logging
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from pydantic import ValidationError

from gamefeed.models.config import FeedConfig, resolve_config
from gamefeed.models.item import CatalogItem, ensure_item, ensure_items
from gamefeed.models.profile import PreferenceProfile, ViewRecord
from gamefeed.models.scoring import SmartFeedEntry
from gamefeed.models.session import Seed
from gamefeed.persistence import InMemoryPersistence, StatePersistence
from gamefeed.seen_tracker import SeenTracker
from gamefeed.utils.scores import parse_release_date, years_since
from gamefeed.utils.seeded import clock_seed, seeded_shuffle

logger = logging.getLogger(__name__)

ItemLike = Union[Dict[str, Any], CatalogItem]

TIERS = ("high", "medium", "discovery")


class RecommendationEngine:
    """Preference profile plus scoring and smart feed for one viewer."""

    def __init__(
        self,
        persistence: Optional[StatePersistence] = None,
        seen_tracker: Optional[SeenTracker] = None,
        config: Optional[FeedConfig] = None,
    ):
        self.config = resolve_config(config)
        self._persistence = persistence if persistence is not None else InMemoryPersistence()
        self._seen_tracker = seen_tracker
        self._session_seen: Set[str] = set()
        self._profile = self._load_profile()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load_profile(self) -> PreferenceProfile:
        try:
            raw = self._persistence.load()
        except Exception as e:
            logger.warning("[profile] LOAD_FAILED error=%s: %s, using defaults", type(e).__name__, e)
            return PreferenceProfile()
        if raw is None:
            return PreferenceProfile()
        try:
            profile = PreferenceProfile.model_validate(raw)
        except ValidationError as e:
            logger.warning("[profile] LOAD_UNPARSEABLE errors=%s, using defaults", e.error_count())
            return PreferenceProfile()
        profile.trim_history(self.config.view_history_limit)
        return profile

    def _save_profile(self) -> None:
        self._profile.trim_history(self.config.view_history_limit)
        try:
            self._persistence.save(self._profile.to_storage())
        except Exception:
            logger.exception(
                "[profile] SAVE_FAILED interactions=%s, keeping in-memory state",
                self._profile.total_interactions,
            )

    @property
    def profile(self) -> PreferenceProfile:
        """Copy of the current profile."""
        return self._profile.model_copy(deep=True)

    @property
    def seen_ids(self) -> Set[str]:
        """Ids seen during this session (viewed or skipped)."""
        return set(self._session_seen)

    # -------------------------------------------------------------------------
    # Learning
    # -------------------------------------------------------------------------

    def _add_affinity(self, genres: List[str], delta: int) -> None:
        scores = self._profile.genre_scores
        for slug in genres:
            scores[slug] = scores.get(slug, 0) + delta

    def record_attention(self, item: ItemLike, dwell_seconds: float) -> str:
        """
        Resolve a shown item into "skipped" or "viewed" by dwell time and record it.
        """
        if dwell_seconds < self.config.skip_threshold_seconds:
            self.record_skip(item)
            return "skipped"
        self.record_view(item, dwell_seconds)
        return "viewed"

    def record_view(self, item: ItemLike, dwell_seconds: float) -> None:
        """
        Record a view. Longer dwell adds affinity to every genre of the item:
        short_view_delta past the short threshold, plus long_view_delta past the long one.
        """
        if dwell_seconds < 0:
            raise ValueError(f"dwell_seconds cannot be negative, got {dwell_seconds}")
        item = ensure_item(item)
        cfg = self.config
        genres = item.genre_keys

        self._session_seen.add(item.key)
        self._profile.total_interactions += 1
        self._profile.view_history.append(
            ViewRecord(item_id=item.id, dwell_seconds=dwell_seconds, genres=genres)
        )
        if dwell_seconds > cfg.short_view_seconds:
            self._add_affinity(genres, cfg.short_view_delta)
        if dwell_seconds > cfg.long_view_seconds:
            self._add_affinity(genres, cfg.long_view_delta)
        self._save_profile()

    def record_skip(self, item: ItemLike) -> None:
        """Record a skip: each genre gains a skip and loses a little affinity."""
        item = ensure_item(item)
        genres = item.genre_keys

        self._session_seen.add(item.key)
        self._profile.total_interactions += 1
        skipped = self._profile.skipped_genres
        for slug in genres:
            skipped[slug] = skipped.get(slug, 0) + 1
        self._add_affinity(genres, self.config.skip_delta)
        self._save_profile()

    def record_genre_interest(self, genre_slug: str) -> None:
        """Explicit interest in a genre (e.g. picked during onboarding)."""
        if not genre_slug or not genre_slug.strip():
            raise ValueError("genre_slug cannot be empty")
        self._add_affinity([genre_slug], self.config.genre_interest_delta)
        self._save_profile()

    def reset(self) -> None:
        """Restore the default profile and forget this session's seen items."""
        self._profile = PreferenceProfile()
        self._session_seen.clear()
        self._save_profile()

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def _is_seen(self, item: CatalogItem) -> bool:
        if item.key in self._session_seen:
            return True
        return self._seen_tracker is not None and self._seen_tracker.count_of(item.id) > 0

    def _rating_bonus(self, rating: Optional[float]) -> float:
        if not rating:
            return 0.0
        if rating >= 4.5:
            return 10.0
        if rating >= 4.0:
            return 5.0
        if rating >= 3.0:
            return 0.0
        return -10.0

    def _skip_penalty(self, genres: List[str]) -> float:
        skipped = self._profile.skipped_genres
        threshold = self.config.skip_penalty_threshold
        penalty = 0.0
        for slug in genres:
            extra = skipped.get(slug, 0) - threshold
            if extra > 0:
                penalty += extra * self.config.skip_penalty_step
        return penalty

    def _release_bonus(self, released: Optional[str]) -> float:
        if parse_release_date(released) is None:
            return 0.0
        age = years_since(released)
        if age <= 1:
            return 5.0
        if age <= 3:
            return 2.0
        if age >= 15:
            return -5.0
        return 0.0

    def score_item(self, item: ItemLike) -> float:
        """
        Preference score for one item.

        base + mean genre affinity (scaled) + rating tier - skip penalty + release bonus.
        Items already seen score seen_item_score, which no positive filter lets through.
        """
        item = ensure_item(item)
        cfg = self.config
        if self._is_seen(item):
            return cfg.seen_item_score

        genres = item.genre_keys
        score = cfg.base_item_score
        if genres:
            scores = self._profile.genre_scores
            affinity = sum(scores.get(g, 0) for g in genres) / len(genres)
            score += affinity * cfg.affinity_scale
        score += self._rating_bonus(item.rating)
        score -= self._skip_penalty(genres)
        score += self._release_bonus(item.released)
        return score

    def tier_of(self, score: float) -> Optional[str]:
        cfg = self.config
        if score >= cfg.high_tier_floor:
            return "high"
        if score >= cfg.medium_tier_floor:
            return "medium"
        if score >= cfg.discovery_tier_floor:
            return "discovery"
        return None

    # -------------------------------------------------------------------------
    # Smart feed
    # -------------------------------------------------------------------------

    def _rank(self, candidates: List[CatalogItem]) -> List[Tuple[CatalogItem, float]]:
        """Distinct candidates with positive scores, best first."""
        seen_keys: Set[str] = set()
        ranked: List[Tuple[CatalogItem, float]] = []
        for item in candidates:
            if item.key in seen_keys:
                continue
            seen_keys.add(item.key)
            score = self.score_item(item)
            if score > 0:
                ranked.append((item, score))
        ranked.sort(key=lambda pair: pair[1], reverse=True)
        return ranked

    def _tier_quotas(self, limit: int, sizes: Dict[str, int]) -> Tuple[Dict[str, int], Dict[str, int]]:
        """
        Slots per tier as (share quotas, backfill).

        Share quotas are about limit x share, with at least one slot for every
        non-empty tier while slots remain. Backfill hands the shortfall to tiers
        that still have items, high first.
        """
        cfg = self.config
        shares = {
            "high": cfg.high_tier_share,
            "medium": cfg.medium_tier_share,
            "discovery": cfg.discovery_tier_share,
        }
        quotas = {t: min(int(limit * shares[t]), sizes[t]) for t in TIERS}
        for t in TIERS:
            if sizes[t] and quotas[t] == 0 and sum(quotas.values()) < limit:
                quotas[t] = 1
        backfill = {t: 0 for t in TIERS}
        remaining = limit - sum(quotas.values())
        for t in TIERS:
            if remaining <= 0:
                break
            backfill[t] = min(remaining, sizes[t] - quotas[t])
            remaining -= backfill[t]
        return quotas, backfill

    def get_smart_feed(
        self,
        candidates: List[ItemLike],
        limit: Optional[int] = None,
        seed: Optional[Seed] = None,
    ) -> List[SmartFeedEntry]:
        """
        Pick up to `limit` candidates by preference score.

        Before bootstrap_interactions interactions: a shuffled sample from the top
        of the ranking. Afterwards: high/medium/discovery tiers sampled about
        60/30/10, each tier shuffled on its own and the mix shuffled once more.
        Slots a short tier cannot fill go to the best-ranked leftovers of the others.
        """
        cfg = self.config
        limit = cfg.page_size if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")
        if seed is None:
            seed = clock_seed()

        ranked = self._rank(ensure_items(candidates))
        if not ranked:
            return []

        if self._profile.total_interactions < cfg.bootstrap_interactions:
            top = ranked[: limit * cfg.exploration_pool_factor]
            picked = seeded_shuffle(top, seed, "explore")[:limit]
            return [SmartFeedEntry(item=i, score=s, tier="explore") for i, s in picked]

        bands: Dict[str, List[Tuple[CatalogItem, float]]] = {t: [] for t in TIERS}
        for item, score in ranked:
            tier = self.tier_of(score)
            if tier is not None:
                bands[tier].append((item, score))

        quotas, backfill = self._tier_quotas(limit, {t: len(bands[t]) for t in TIERS})
        logger.debug(
            "[smart_feed] bands=%s quotas=%s backfill=%s",
            {t: len(bands[t]) for t in TIERS}, quotas, backfill,
        )
        chosen: List[SmartFeedEntry] = []
        for tier in TIERS:
            sampled = seeded_shuffle(bands[tier], seed, tier)[: quotas[tier]]
            taken = {item.key for item, _ in sampled}
            # Shortfall slots go to the best-ranked items the sample left behind.
            best_rest = [pair for pair in bands[tier] if pair[0].key not in taken][: backfill[tier]]
            for item, score in sampled + best_rest:
                chosen.append(SmartFeedEntry(item=item, score=score, tier=tier))
        return seeded_shuffle(chosen, seed, "mix")

    def get_top_genres(self, limit: int = 5) -> List[Dict[str, Any]]:
        """Genres with the highest affinity, best first."""
        ordered = sorted(self._profile.genre_scores.items(), key=lambda kv: kv[1], reverse=True)
        return [{"slug": slug, "score": score} for slug, score in ordered[:limit]]
