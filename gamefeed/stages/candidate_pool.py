"""
Stage A: Candidate Pool Assembly

Samples a few upstream pages chosen by the seed, fetches them concurrently,
and merges the rows into one deduplicated candidate list.
A failed page contributes nothing; it never aborts the other pages.

The public entry point is assemble_candidate_pool.
"""

import asyncio
import logging
import math
from typing import Any, Dict, Iterable, List, Optional, Protocol

from gamefeed.models.config import DEFAULT_CONFIG, FeedConfig
from gamefeed.models.item import CatalogItem, parse_upstream_rows
from gamefeed.models.session import FeedRequest, Seed
from gamefeed.utils.seeded import derive

logger = logging.getLogger(__name__)


class PageSource(Protocol):
    """The part of the upstream catalog the pool assembler needs."""

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        genres: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        ...


def choose_pages(
    page: int,
    seed: Seed,
    pool_pages: int,
    sentinel: int = DEFAULT_CONFIG.page_sampling_sentinel,
) -> List[int]:
    """
    Upstream page numbers to sample for one request.

    The requested page is always first; the others are spaced by a seeded
    distance: page + i * (floor(derive(seed, sentinel) * 10) + 1).
    """
    base_distance = math.floor(derive(seed, sentinel) * 10)
    return [page + i * (base_distance + 1) for i in range(pool_pages)]


def merge_and_dedupe(batches: Iterable[List[CatalogItem]]) -> List[CatalogItem]:
    """
    Merge page batches and keep one record per identity.

    When two records share an id, the one with the higher (metacritic + rating)
    survives; on a tie the first one seen stays. First-seen order is preserved.
    """
    by_id: Dict[str, CatalogItem] = {}
    for batch in batches:
        for item in batch:
            prev = by_id.get(item.key)
            if prev is None or item.dedup_strength > prev.dedup_strength:
                by_id[item.key] = item
    return list(by_id.values())


async def _fetch_all(
    provider: PageSource,
    pages: List[int],
    request: FeedRequest,
) -> List[List[CatalogItem]]:
    """Fetch every page concurrently; settle all and keep only the successes."""
    results = await asyncio.gather(
        *(
            provider.fetch_page(p, request.page_size, genres=request.genres, search=request.search)
            for p in pages
        ),
        return_exceptions=True,
    )
    batches: List[List[CatalogItem]] = []
    for page_num, result in zip(pages, results):
        if isinstance(result, BaseException):
            logger.warning(
                "[feed_pool] PAGE_FETCH_FAILED page=%s error=%s: %s",
                page_num, type(result).__name__, result,
            )
            continue
        batches.append(parse_upstream_rows(result or []))
    return batches


async def assemble_candidate_pool(
    provider: PageSource,
    request: FeedRequest,
    config: FeedConfig = DEFAULT_CONFIG,
) -> List[CatalogItem]:
    """
    Stage A: build the deduplicated candidate pool for one feed request.

    Returns an empty list when no page succeeded or the catalog is empty.
    """
    pages = choose_pages(request.page, request.seed, request.pool_pages, config.page_sampling_sentinel)
    batches = await _fetch_all(provider, pages, request)
    if len(batches) < len(pages):
        logger.info(
            "[feed_pool] PARTIAL_POOL succeeded=%s requested=%s", len(batches), len(pages)
        )
    candidates = merge_and_dedupe(batches)
    logger.debug("[feed_pool] pages=%s candidates=%s", pages, len(candidates))
    return candidates
