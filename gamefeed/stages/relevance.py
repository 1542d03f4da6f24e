"""
Stage B: Relevance Scoring

Scores every candidate from normalized sub-scores (quality, rating, recency,
discovery, search relevance, seeded jitter) plus a seen penalty, drops
unviable entries, and sorts by score with jitter as tie-break.

The public entry point is score_candidates. It reads seen counts but never mutates them.
"""

from datetime import datetime, timezone
from typing import List, Mapping, Optional

import numpy as np

from gamefeed.models.config import DEFAULT_CONFIG, FeedConfig
from gamefeed.models.item import CatalogItem
from gamefeed.models.scoring import ScoredCandidate
from gamefeed.models.session import Seed
from gamefeed.utils.scores import clamp, search_relevance, years_since
from gamefeed.utils.seeded import derive


def seen_penalty(seen_count: int, config: FeedConfig = DEFAULT_CONFIG) -> float:
    """Stepped penalty: 0 unseen, small after one display, large after two or more."""
    if seen_count >= 2:
        return config.seen_penalty_repeat
    if seen_count == 1:
        return config.seen_penalty_once
    return 0.0


def is_viable(item: CatalogItem, config: FeedConfig = DEFAULT_CONFIG) -> bool:
    """Minimum-viability gate: decent metacritic, decent rating, or at least an image."""
    if item.metacritic is not None and item.metacritic >= config.viability_quality_floor:
        return True
    if item.rating is not None and item.rating >= config.viability_rating_floor:
        return True
    return item.has_image


def _weights(config: FeedConfig) -> np.ndarray:
    # Column order matches _components.
    return np.array([
        config.weight_quality,
        config.weight_rating,
        config.weight_recency,
        config.weight_discovery,
        config.weight_relevance,
        config.weight_jitter,
    ])


def score_candidates(
    candidates: List[CatalogItem],
    seen_counts: Mapping[str, int],
    seed: Seed,
    search: Optional[str] = None,
    config: FeedConfig = DEFAULT_CONFIG,
    now: Optional[datetime] = None,
) -> List[ScoredCandidate]:
    """
    Score, filter, and sort candidates (descending score, then descending jitter).

    seen_counts is keyed by string-encoded item id.
    """
    if not candidates:
        return []
    now = now or datetime.now(timezone.utc)
    max_added = max(max((c.added or 0) for c in candidates), 1)

    rows = []
    for item in candidates:
        quality = clamp((item.metacritic if item.metacritic is not None else config.default_quality) / 100)
        rating = clamp((item.rating if item.rating is not None else config.default_rating) / 5)
        popularity = clamp((item.added or 0) / max_added)
        recency = clamp(1 / (1 + years_since(item.released, now, config.default_years_since_release)))
        relevance = search_relevance(item.name, search)
        jitter = derive(seed, item.id)
        rows.append((quality, rating, recency, 1 - popularity, relevance, jitter, popularity))

    components = np.array([r[:6] for r in rows], dtype=float)
    base_scores = components @ _weights(config)

    scored: List[ScoredCandidate] = []
    for item, row, base in zip(candidates, rows, base_scores):
        if not is_viable(item, config):
            continue
        count = max(0, int(seen_counts.get(item.key, 0)))
        penalty = seen_penalty(count, config)
        scored.append(
            ScoredCandidate(
                item=item,
                score=float(base) + penalty,
                jitter=row[5],
                seen_count=count,
                quality=row[0],
                rating=row[1],
                recency=row[2],
                popularity=row[6],
                relevance=row[4],
                seen_penalty=penalty,
            )
        )

    scored.sort(key=lambda s: (s.score, s.jitter), reverse=True)
    return scored
