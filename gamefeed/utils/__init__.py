"""Shared utilities for seeded randomness, scoring, and platform metadata."""

from .platforms import normalize_platforms
from .scores import clamp, parse_release_date, search_relevance, years_since
from .seeded import SeededStream, clock_seed, derive, hash_string, seeded_shuffle

__all__ = [
    "SeededStream",
    "clamp",
    "clock_seed",
    "derive",
    "hash_string",
    "normalize_platforms",
    "parse_release_date",
    "search_relevance",
    "seeded_shuffle",
    "years_since",
]
