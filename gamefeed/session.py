"""
Feed session: the page-by-page control loop for one viewer.

Owns the active context (seed, genre filter, search text, next page), the
in-flight guard for load-more, and the wiring between the stateless pipeline
and the stateful seen tracker and recommendation engine.

Every event (start, load more, display confirmation, dwell report, reset) is
handled one at a time on the caller's event loop; no locking is needed.
"""

import logging
from typing import List, Optional, Set

from gamefeed.models.config import FeedConfig, resolve_config
from gamefeed.models.scoring import ScoredCandidate
from gamefeed.models.session import FeedPage, FeedRequest, Seed
from gamefeed.recommendation_engine import ItemLike, RecommendationEngine
from gamefeed.seen_tracker import SeenTracker
from gamefeed.stages.candidate_pool import PageSource
from gamefeed.stages.diversity import select_diverse_page
from gamefeed.stages.orchestrator import assemble_feed_page, rank_pool
from gamefeed.utils.seeded import clock_seed

logger = logging.getLogger(__name__)


class FeedSession:
    """One viewer's feed: pages in, display and attention events out."""

    def __init__(
        self,
        provider: PageSource,
        seen_tracker: SeenTracker,
        engine: RecommendationEngine,
        config: Optional[FeedConfig] = None,
        use_smart_feed: bool = False,
    ):
        self.provider = provider
        self.seen_tracker = seen_tracker
        self.engine = engine
        self.config = resolve_config(config)
        self.use_smart_feed = use_smart_feed

        self.genres: Optional[str] = None
        self.search: Optional[str] = None
        self.seed: Seed = clock_seed()
        self.next_page = 1
        self.exhausted = False

        self._generation = 0
        self._loading = False
        # Page ids delivered in the current context, and those already confirmed.
        self._issued_pages: Set[str] = set()
        self._confirmed_pages: Set[str] = set()

    @property
    def is_loading(self) -> bool:
        return self._loading

    def _new_context(self, genres: Optional[str], search: Optional[str], seed: Optional[Seed]) -> None:
        self._generation += 1
        self.genres = genres or None
        self.search = search or None
        self.seed = seed if seed is not None else clock_seed()
        self.next_page = 1
        self.exhausted = False
        self._loading = False
        self._issued_pages.clear()
        self._confirmed_pages.clear()

    async def start(
        self,
        genres: Optional[str] = None,
        search: Optional[str] = None,
        seed: Optional[Seed] = None,
    ) -> Optional[FeedPage]:
        """
        Begin a new context (filters and seed) and return its first page.

        Any load still running for the previous context is abandoned. Returns
        None when another start() replaced this context before its page arrived.
        """
        self._new_context(genres, search, seed)
        logger.info(
            "[feed_session] START genres=%s search=%s seed=%s", self.genres, self.search, self.seed
        )
        return await self._load(self._generation)

    async def load_more(self) -> Optional[FeedPage]:
        """
        Fetch the next page for the current context.

        Returns None without fetching when a load is already in flight or the feed
        has ended, and None when the context changed before the result arrived.
        """
        if self._loading:
            logger.debug("[feed_session] LOAD_IGNORED in_flight page=%s", self.next_page)
            return None
        if self.exhausted:
            return None
        return await self._load(self._generation)

    async def _load(self, generation: int) -> Optional[FeedPage]:
        request = FeedRequest(
            page=self.next_page,
            page_size=self.config.page_size,
            pool_pages=self.config.pool_pages,
            genres=self.genres,
            search=self.search,
            seed=self.seed,
        )
        self._loading = True
        try:
            if self.use_smart_feed:
                page = await self._smart_page(request)
            else:
                page = await assemble_feed_page(
                    self.provider, request, self.seen_tracker.snapshot(), self.config
                )
        finally:
            if generation == self._generation:
                self._loading = False

        if generation != self._generation:
            logger.info(
                "[feed_session] STALE_PAGE_DISCARDED page=%s generation=%s current=%s",
                request.page, generation, self._generation,
            )
            return None
        # A smart page may come from further along than the requested page.
        self.next_page = page.page + 1
        if page.is_empty:
            self.exhausted = True
        self._issued_pages.add(page.page_id)
        return page

    def _capped_page(self, request: FeedRequest, candidates: List[ScoredCandidate]) -> FeedPage:
        selection = select_diverse_page(candidates, request.page_size, self.config.diversity_divisor)
        return FeedPage(
            page=request.page,
            seed=request.seed,
            entries=selection.items,
            first_pass_count=selection.first_pass_count,
        )

    def _smart_picks(self, ranked: List[ScoredCandidate], request: FeedRequest) -> List[ScoredCandidate]:
        by_key = {c.item.key: c for c in ranked}
        picks = self.engine.get_smart_feed(
            [c.item for c in ranked], limit=request.page_size, seed=f"{request.seed}-{request.page}"
        )
        return [by_key[p.item.key] for p in picks]

    async def _smart_page(self, request: FeedRequest) -> FeedPage:
        """
        Page chosen by the recommendation engine, then genre-capped.

        The feed only ends when the requested pool is empty. When the engine
        rejects the whole pool (everything already seen), the following pages are
        tried; if none of them yields a pick, the requested pool is served with its
        seen penalties, as the plain pipeline does.
        """
        seen = self.seen_tracker.snapshot()
        requested_pool = await rank_pool(self.provider, request, seen, self.config)
        if not requested_pool:
            logger.info("[feed_page] EMPTY_PAGE page=%s seed=%s", request.page, request.seed)
            return FeedPage(page=request.page, seed=request.seed)

        current, ranked = request, requested_pool
        for advance in range(self.config.smart_feed_page_advance + 1):
            if advance:
                current = current.model_copy(update={"page": current.page + 1})
                ranked = await rank_pool(self.provider, current, seen, self.config)
                if not ranked:
                    break
            picks = self._smart_picks(ranked, current)
            if picks:
                return self._capped_page(current, picks)
            logger.info("[feed_session] SMART_POOL_ALL_SEEN page=%s pool=%s", current.page, len(ranked))

        logger.info("[feed_session] SMART_FALLBACK page=%s serving penalized pool", request.page)
        return self._capped_page(request, requested_pool)

    def confirm_displayed(self, page: FeedPage) -> bool:
        """
        Record that a page was actually shown. Each page of the current context
        counts once, however often it is re-rendered. Returns False for repeat
        confirmations and for pages this context did not deliver.
        """
        if page.page_id not in self._issued_pages or page.page_id in self._confirmed_pages:
            return False
        self._confirmed_pages.add(page.page_id)
        self.seen_tracker.mark_displayed(page.item_ids)
        return True

    def report_dwell(self, item: ItemLike, dwell_seconds: float) -> str:
        """Forward how long an item stayed on screen to the recommendation engine."""
        if isinstance(item, ScoredCandidate):
            item = item.item
        return self.engine.record_attention(item, dwell_seconds)

    def reset(self) -> None:
        """Forget learned preferences and seen history and drop the active context."""
        self.engine.reset()
        self.seen_tracker.clear()
        self._new_context(None, None, None)
