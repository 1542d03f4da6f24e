"""
Seen tracker: persisted count of how many times each item has been displayed.

Read by the relevance scorer before every scoring pass; written once per
display event. Counts never decay or expire.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from pydantic import NonNegativeInt, TypeAdapter, ValidationError

from gamefeed.models.item import ItemId
from gamefeed.persistence import InMemoryPersistence, StatePersistence

logger = logging.getLogger(__name__)

_SEEN_MAP = TypeAdapter(Dict[str, NonNegativeInt])


class SeenTracker:
    """Seen map owned by one viewer session."""

    def __init__(self, persistence: Optional[StatePersistence] = None):
        self._persistence = persistence if persistence is not None else InMemoryPersistence()
        self._counts: Dict[str, int] = self._load()

    def _load(self) -> Dict[str, int]:
        try:
            raw: Any = self._persistence.load()
        except Exception as e:
            logger.warning("[seen] LOAD_FAILED error=%s: %s, starting empty", type(e).__name__, e)
            return {}
        if raw is None:
            return {}
        try:
            return dict(_SEEN_MAP.validate_python(raw))
        except ValidationError as e:
            logger.warning("[seen] LOAD_UNPARSEABLE errors=%s, starting empty", e.error_count())
            return {}

    def _save(self) -> None:
        try:
            self._persistence.save(dict(self._counts))
        except Exception:
            logger.exception("[seen] SAVE_FAILED entries=%s, keeping in-memory state", len(self._counts))

    def mark_displayed(self, ids: Iterable[ItemId]) -> None:
        """Increment each distinct id in the batch by one, then persist once."""
        batch = {str(i) for i in ids}
        if not batch:
            return
        for key in batch:
            self._counts[key] = self._counts.get(key, 0) + 1
        self._save()

    def count_of(self, item_id: ItemId) -> int:
        return self._counts.get(str(item_id), 0)

    def snapshot(self) -> Dict[str, int]:
        """Copy of the current counts, keyed by string id."""
        return dict(self._counts)

    def clear(self) -> None:
        """Forget all counts (explicit viewer reset)."""
        self._counts = {}
        self._save()

    def __len__(self) -> int:
        return len(self._counts)
