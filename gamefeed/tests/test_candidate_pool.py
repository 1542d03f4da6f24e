"""
Candidate pool tests: seeded page choice, concurrent fetch with partial failure,
and identity dedup keeping the stronger record.
"""

import asyncio

from gamefeed.models.item import CatalogItem
from gamefeed.models.session import FeedRequest
from gamefeed.stages.candidate_pool import assemble_candidate_pool, choose_pages, merge_and_dedupe

from feed_fakes import ScriptedProvider


def _run(coro):
    return asyncio.run(coro)


class TestChoosePages:

    def test_seeded_distance(self):
        # derive("abc123", 999) = 0.8207 -> base distance 8 -> step 9
        assert choose_pages(1, "abc123", 2) == [1, 10]
        assert choose_pages(4, "abc123", 3) == [4, 13, 22]

    def test_requested_page_always_first(self):
        for seed in ("a", "b", 17, "zz"):
            pages = choose_pages(5, seed, 3)
            assert pages[0] == 5
            assert len(set(pages)) == 3

    def test_same_seed_same_pages(self):
        assert choose_pages(2, "s", 4) == choose_pages(2, "s", 4)


class TestMergeAndDedupe:

    def test_keeps_higher_quality_plus_rating(self):
        strong = CatalogItem(id=1, metacritic=80, rating=4.5)
        weak = CatalogItem(id=1, metacritic=60, rating=4.0)
        other = CatalogItem(id=2, metacritic=40, rating=2.0)
        for batches in ([[weak, other], [strong]], [[strong], [weak, other]]):
            merged = merge_and_dedupe(batches)
            assert len(merged) == 2
            survivor = next(i for i in merged if i.id == 1)
            assert survivor.metacritic == 80

    def test_tie_keeps_first_seen(self):
        first = CatalogItem(id=1, name="first", metacritic=50)
        second = CatalogItem(id=1, name="second", metacritic=50)
        assert merge_and_dedupe([[first], [second]])[0].name == "first"

    def test_survivor_never_weaker_than_discarded(self):
        records = [CatalogItem(id=i % 5, metacritic=(i * 37) % 100, rating=(i * 13) % 5) for i in range(40)]
        merged = {m.key: m for m in merge_and_dedupe([records[:20], records[20:]])}
        for rec in records:
            assert merged[rec.key].dedup_strength >= rec.dedup_strength


class TestAssembleCandidatePool:

    def test_example_two_pages_with_duplicate(self):
        provider = ScriptedProvider({
            1: [
                {"id": 1, "metacritic": 80, "rating": 4.5, "genres": ["rpg"]},
                {"id": 2, "metacritic": 40, "rating": 2.0, "genres": ["action"]},
            ],
            10: [{"id": 1, "metacritic": 60, "rating": 4.0, "genres": ["rpg"]}],
        })
        request = FeedRequest(page=1, page_size=20, pool_pages=2, seed="abc123")
        pool = _run(assemble_candidate_pool(provider, request))
        assert sorted(provider.calls) == [1, 10]
        assert len(pool) == 2
        by_id = {i.id: i for i in pool}
        assert by_id[1].metacritic == 80
        assert 2 in by_id

    def test_failed_page_contributes_nothing(self):
        provider = ScriptedProvider({
            1: [{"id": 1, "rating": 4}],
            10: RuntimeError("503 upstream"),
        })
        pool = _run(assemble_candidate_pool(provider, FeedRequest(seed="abc123")))
        assert [i.id for i in pool] == [1]

    def test_all_pages_failing_yields_empty_pool(self):
        provider = ScriptedProvider({1: RuntimeError("down"), 10: RuntimeError("down")})
        assert _run(assemble_candidate_pool(provider, FeedRequest(seed="abc123"))) == []

    def test_empty_catalog(self):
        assert _run(assemble_candidate_pool(ScriptedProvider({}), FeedRequest(seed="x"))) == []

    def test_malformed_rows_are_dropped(self):
        provider = ScriptedProvider({1: [{"id": 1}, {"name": "no id"}], 10: None})
        pool = _run(assemble_candidate_pool(provider, FeedRequest(seed="abc123")))
        assert [i.id for i in pool] == [1]
