"""Pipeline stages: candidate pool (Stage A), relevance scoring (Stage B), diversity selection, orchestration."""

from .candidate_pool import PageSource, assemble_candidate_pool, choose_pages, merge_and_dedupe
from .diversity import genre_cap, select_diverse_page
from .orchestrator import assemble_feed_page, rank_pool
from .relevance import is_viable, score_candidates, seen_penalty

__all__ = [
    "PageSource",
    "assemble_candidate_pool",
    "assemble_feed_page",
    "choose_pages",
    "genre_cap",
    "is_viable",
    "merge_and_dedupe",
    "rank_pool",
    "score_candidates",
    "seen_penalty",
    "select_diverse_page",
]
