"""
Genre diversity: greedy selection with a per-genre cap and uncapped backfill.

Diversity is applied during selection rather than by reordering afterwards:
pass one walks the ranked list and skips candidates whose genres are already
at the cap; pass two fills any remaining slots from the same ranked list.
"""

import math
from typing import Dict, List, Set

from gamefeed.models.scoring import DiversitySelection, ScoredCandidate


def genre_cap(page_size: int, divisor: int = 3) -> int:
    """Max items sharing one genre within the capped part of a page."""
    return math.ceil(page_size / divisor)


def select_diverse_page(
    scored_list: List[ScoredCandidate],
    page_size: int,
    divisor: int = 3,
) -> DiversitySelection:
    """
    Select up to page_size candidates, at most ceil(page_size / divisor) per genre in pass one.

    Args:
        scored_list: Candidates sorted by score (desc). Not mutated.
        page_size: Number to select. Must be positive.
        divisor: Cap divisor (3 gives the one-third rule).

    Returns:
        DiversitySelection whose first first_pass_count items respect the cap and
        whose remaining items are best-ranked backfill.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    cap = genre_cap(page_size, divisor)
    selected: List[ScoredCandidate] = []
    used_ids: Set[str] = set()
    genre_count: Dict[str, int] = {}

    for candidate in scored_list:
        if len(selected) >= page_size:
            break
        key = candidate.item.key
        if key in used_ids:
            continue
        genres = candidate.item.genre_keys
        # Blocked candidates stay eligible for backfill.
        if any(genre_count.get(g, 0) >= cap for g in genres):
            continue
        selected.append(candidate)
        used_ids.add(key)
        for g in genres:
            genre_count[g] = genre_count.get(g, 0) + 1

    first_pass_count = len(selected)

    for candidate in scored_list:
        if len(selected) >= page_size:
            break
        key = candidate.item.key
        if key not in used_ids:
            selected.append(candidate)
            used_ids.add(key)

    return DiversitySelection(items=selected, first_pass_count=first_pass_count)
