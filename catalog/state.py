"""Application state: providers, persisted per-viewer stores, and feed sessions."""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from gamefeed.models.config import FeedConfig, resolve_config
from gamefeed.persistence import JsonFilePersistence
from gamefeed.recommendation_engine import RecommendationEngine
from gamefeed.seen_tracker import SeenTracker
from gamefeed.session import FeedSession
from gamefeed.utils.platforms import normalize_platforms

from .config import ServiceConfig, configure_logging, get_config
from .services import (
    CatalogProvider,
    HttpCatalogProvider,
    IgdbStoreLinkProvider,
    StoreLinkProvider,
    choose_primary_store_link,
    lookup_store_links,
)

logger = logging.getLogger(__name__)


class AppState:
    """Wires collaborators and per-viewer state for one device."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        feed_config: Optional[FeedConfig] = None,
        catalog: Optional[CatalogProvider] = None,
        store_links: Optional[StoreLinkProvider] = None,
    ):
        self.config = config or get_config()
        self.feed_config = resolve_config(feed_config)
        configure_logging(self.config.log_level)
        _, errors = self.config.validate()
        for err in errors:
            logger.warning("[startup] CONFIG %s", err)

        self.catalog = catalog or HttpCatalogProvider(
            api_key=self.config.rawg_api_key,
            base_url=self.config.rawg_base_url,
            timeout=self.config.request_timeout,
        )
        self.store_links = store_links or IgdbStoreLinkProvider(
            client_id=self.config.igdb_client_id,
            client_secret=self.config.igdb_client_secret,
            base_url=self.config.igdb_base_url,
            token_url=self.config.twitch_token_url,
            timeout=self.config.request_timeout,
        )

        self.config.ensure_directories()
        self.seen_tracker = SeenTracker(JsonFilePersistence(self.config.seen_path))
        self.engine = RecommendationEngine(
            JsonFilePersistence(self.config.profile_path),
            seen_tracker=self.seen_tracker,
            config=self.feed_config,
        )
        logger.info(
            "[startup] catalog=%s store_links=%s seen_entries=%s interactions=%s",
            type(self.catalog).__name__,
            type(self.store_links).__name__,
            len(self.seen_tracker),
            self.engine.profile.total_interactions,
        )

    def new_session(self, use_smart_feed: bool = False) -> FeedSession:
        """A feed session sharing this device's seen tracker and engine."""
        return FeedSession(
            self.catalog,
            self.seen_tracker,
            self.engine,
            config=self.feed_config,
            use_smart_feed=use_smart_feed,
        )

    def onboard(self, genre_slugs: Iterable[str]) -> None:
        """Record explicit interest in each genre picked during onboarding."""
        for slug in genre_slugs:
            self.engine.record_genre_interest(slug)

    async def item_details(self, item_id: Any, prefer_mobile: bool = False) -> Optional[Dict[str, Any]]:
        """
        Detail view data for one game: the upstream record, screenshots,
        normalized platforms, store links, and the featured store link.
        """
        details, screenshots = await asyncio.gather(
            self.catalog.fetch_details(item_id),
            self.catalog.fetch_screenshots(item_id),
        )
        if details is None:
            return None
        name = details.get("name") or ""
        stores = await asyncio.to_thread(lookup_store_links, self.store_links, name) if name else []
        primary = choose_primary_store_link(stores, prefer_mobile=prefer_mobile)
        return {
            "details": details,
            "screenshots": screenshots,
            "platforms": normalize_platforms(details.get("platforms") or []),
            "stores": [s.model_dump() for s in stores],
            "primary_store": primary.model_dump() if primary else None,
        }

    async def genres(self) -> List[Dict[str, Any]]:
        return await self.catalog.fetch_genres()
