"""
Seeded generator tests.

Reference values were produced by the rolling-hash + mulberry32 construction
run in a separate runtime, so they also pin cross-process reproducibility.
"""

import pytest

from gamefeed.utils.seeded import SeededStream, derive, hash_string, seeded_shuffle


class TestHashString:

    def test_small_strings(self):
        assert hash_string("") == 0
        assert hash_string("a") == 97
        assert hash_string("ab") == 97 * 31 + 98

    def test_reference_values(self):
        assert hash_string("abc123-999") == 4133641308
        assert hash_string("abc123-1") == 1211003956
        assert hash_string("héllo") == 103094734

    def test_stays_within_32_bits(self):
        assert 0 <= hash_string("x" * 10_000) < 2 ** 32


class TestDerive:

    def test_reference_values(self):
        assert derive("abc123", 999) == pytest.approx(0.8206999697722495, abs=1e-15)
        assert derive("abc123", 1) == pytest.approx(0.10086295288056135, abs=1e-15)
        assert derive("abc123", 2) == pytest.approx(0.6197360067162663, abs=1e-15)
        assert derive(42, "x") == pytest.approx(0.6492982178460807, abs=1e-15)

    def test_repeatable(self):
        assert all(derive("seed", 7) == derive("seed", 7) for _ in range(20))

    def test_range_and_spread(self):
        values = [derive("spread", i) for i in range(200)]
        assert all(0.0 <= v < 1.0 for v in values)
        assert len(set(values)) > 190
        assert 0.35 < sum(values) / len(values) < 0.65

    def test_int_and_string_ids_agree(self):
        # Identity is string-encoded before hashing.
        assert derive("s", 5) == derive("s", "5")
        assert derive(10, 1) == derive(10.0, 1)


class TestSeededShuffle:

    def test_same_seed_same_order(self):
        items = list(range(30))
        assert seeded_shuffle(items, "a") == seeded_shuffle(items, "a")

    def test_is_permutation_and_input_untouched(self):
        items = list(range(30))
        out = seeded_shuffle(items, "a")
        assert sorted(out) == items
        assert items == list(range(30))

    def test_salt_changes_order(self):
        items = list(range(30))
        assert seeded_shuffle(items, "a", "x") != seeded_shuffle(items, "a", "y")

    def test_stream_first_value_matches_derive(self):
        assert SeededStream.for_key("abc123", 1).next() == derive("abc123", 1)
