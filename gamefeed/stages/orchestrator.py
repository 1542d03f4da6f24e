"""
Pipeline orchestrator: runs pool assembly, relevance scoring, and diversity
selection to produce one feed page.

The main entry point is assemble_feed_page. It is stateless: seen counts are
passed in and nothing is recorded as displayed here.
"""

import logging
from typing import List, Mapping

from gamefeed.models.config import FeedConfig, resolve_config
from gamefeed.models.scoring import ScoredCandidate
from gamefeed.models.session import FeedPage, FeedRequest
from gamefeed.stages.candidate_pool import PageSource, assemble_candidate_pool
from gamefeed.stages.diversity import select_diverse_page
from gamefeed.stages.relevance import score_candidates

logger = logging.getLogger(__name__)


async def rank_pool(
    provider: PageSource,
    request: FeedRequest,
    seen_counts: Mapping[str, int],
    config: FeedConfig = None,
) -> List[ScoredCandidate]:
    """Stage A then Stage B: fetched, deduplicated, viable candidates in ranked order."""
    config = resolve_config(config)
    candidates = await assemble_candidate_pool(provider, request, config)
    return score_candidates(candidates, seen_counts, request.seed, request.search, config)


async def assemble_feed_page(
    provider: PageSource,
    request: FeedRequest,
    seen_counts: Mapping[str, int],
    config: FeedConfig = None,
) -> FeedPage:
    """
    Create one feed page (pool → score → diversity select).

    An empty pool yields an empty page, which callers treat as "no more results".
    """
    config = resolve_config(config)
    ranked = await rank_pool(provider, request, seen_counts, config)
    if not ranked:
        logger.info("[feed_page] EMPTY_PAGE page=%s seed=%s", request.page, request.seed)
        return FeedPage(page=request.page, seed=request.seed)
    selection = select_diverse_page(ranked, request.page_size, config.diversity_divisor)
    return FeedPage(
        page=request.page,
        seed=request.seed,
        entries=selection.items,
        first_pass_count=selection.first_pass_count,
    )
