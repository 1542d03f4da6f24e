"""
Catalog Provider abstraction.

Supplies pages of games, per-game details, screenshots, and the genre list
to the feed pipeline. Implementations: HTTP (RAWG-style REST API) and
in-memory (local runs and tests).
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

import requests

from .errors import UpstreamError

logger = logging.getLogger(__name__)


class CatalogProvider(Protocol):
    """Protocol for upstream catalog access. Implement for HTTP or in-memory."""

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        genres: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict]:
        """
        Return the rows of one list page. Raises UpstreamError when the page is rejected.
        """
        ...

    async def fetch_details(self, item_id: Any) -> Optional[Dict]:
        """One game's detail record, or None when it cannot be fetched."""
        ...

    async def fetch_screenshots(self, item_id: Any) -> List[Dict]:
        """Screenshot rows for one game; empty when they cannot be fetched."""
        ...

    async def fetch_genres(self) -> List[Dict]:
        """All genres ({id, slug, name}). Raises UpstreamError on failure."""
        ...


class HttpCatalogProvider:
    """
    Catalog provider backed by a RAWG-style REST API.

    Blocking requests calls run in worker threads so several pages can be
    fetched concurrently from one event loop.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.rawg.io/api",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        query = {k: v for k, v in params.items() if v not in (None, "")}
        if self._api_key:
            query["key"] = self._api_key
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._session.get(url, params=query, timeout=self._timeout)
        except requests.RequestException as e:
            raise UpstreamError(None, f"{type(e).__name__}: {e}") from e
        if not response.ok:
            raise UpstreamError(response.status_code, (response.text or "")[:200])
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(response.status_code, "invalid JSON body") from e

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        genres: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict]:
        params = {"page": page, "page_size": page_size, "genres": genres, "search": search}
        data = await asyncio.to_thread(self._get, "games", params)
        return list(data.get("results") or []) if isinstance(data, dict) else []

    async def fetch_details(self, item_id: Any) -> Optional[Dict]:
        try:
            return await asyncio.to_thread(self._get, f"games/{item_id}", {})
        except UpstreamError as e:
            logger.warning("[catalog] DETAILS_FAILED id=%s status=%s", item_id, e.status)
            return None

    async def fetch_screenshots(self, item_id: Any) -> List[Dict]:
        try:
            data = await asyncio.to_thread(self._get, f"games/{item_id}/screenshots", {})
        except UpstreamError as e:
            logger.warning("[catalog] SCREENSHOTS_FAILED id=%s status=%s", item_id, e.status)
            return []
        return list(data.get("results") or []) if isinstance(data, dict) else []

    async def fetch_genres(self) -> List[Dict]:
        data = await asyncio.to_thread(self._get, "genres", {})
        return list(data.get("results") or []) if isinstance(data, dict) else []


def _genre_tokens(item: Dict) -> Set[str]:
    tokens: Set[str] = set()
    for g in item.get("genres") or []:
        if isinstance(g, dict):
            tokens.update(str(g.get(k)).lower() for k in ("id", "slug", "name") if g.get(k) is not None)
        else:
            tokens.add(str(g).lower())
    return tokens


class InMemoryCatalogProvider:
    """
    Catalog provider backed by a list of game dicts.
    Used for local testing and evaluation. Pages listed in failing_pages raise UpstreamError.
    """

    def __init__(
        self,
        items: Iterable[Dict],
        genres: Optional[List[Dict]] = None,
        failing_pages: Optional[Iterable[int]] = None,
    ):
        self._items = list(items)
        self._genres = list(genres or [])
        self.failing_pages: Set[int] = set(failing_pages or [])
        self.requested_pages: List[int] = []

    async def fetch_page(
        self,
        page: int,
        page_size: int,
        genres: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict]:
        self.requested_pages.append(page)
        if page in self.failing_pages:
            raise UpstreamError(503, f"page {page} unavailable")
        rows = self._items
        if genres:
            wanted = {g.strip().lower() for g in genres.split(",") if g.strip()}
            rows = [r for r in rows if _genre_tokens(r) & wanted]
        if search:
            q = search.lower()
            rows = [r for r in rows if q in str(r.get("name") or "").lower()]
        start = (page - 1) * page_size
        return [dict(r) for r in rows[start:start + page_size]]

    async def fetch_details(self, item_id: Any) -> Optional[Dict]:
        for r in self._items:
            if str(r.get("id")) == str(item_id):
                return dict(r)
        return None

    async def fetch_screenshots(self, item_id: Any) -> List[Dict]:
        details = await self.fetch_details(item_id)
        return list((details or {}).get("short_screenshots") or [])

    async def fetch_genres(self) -> List[Dict]:
        return list(self._genres)
