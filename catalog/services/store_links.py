"""
Store-link lookup.

Resolves a game name to an ordered list of {name, url} store links, and picks
the link to feature for a viewer. Implementation: IGDB (Twitch client-credentials
token, Apicalypse query over websites).
"""

import logging
import time
from typing import List, Optional, Protocol

import requests
from pydantic import BaseModel

from .errors import UpstreamError

logger = logging.getLogger(__name__)

# IGDB website category -> display name
WEBSITE_CATEGORY_NAMES = {
    1: "Official",
    13: "Steam",
    16: "Epic Games",
    17: "GOG",
}

STORE_PRIORITY = ["steam", "epicgames", "gog", "playstation", "xbox", "nintendo", "website"]


class StoreLink(BaseModel):
    """One place a game can be bought or read about."""

    name: str
    url: str

    @property
    def store_type(self) -> str:
        return url_to_store_type(self.url)


def url_to_store_type(url: str = "") -> str:
    """Classify a store URL into a storefront family; unknown hosts are "website"."""
    u = (url or "").lower()
    if "store.steampowered.com" in u or "steam" in u:
        return "steam"
    if "epicgames" in u:
        return "epicgames"
    if "gog.com" in u or "gog" in u:
        return "gog"
    if "playstation.com" in u or "psn" in u or "playstation" in u:
        return "playstation"
    if "xbox.com" in u or "microsoft.com" in u or "xbox" in u:
        return "xbox"
    if "nintendo" in u or "eshop" in u:
        return "nintendo"
    return "website"


def choose_primary_store_link(
    links: List[StoreLink],
    prefer_mobile: bool = False,
) -> Optional[StoreLink]:
    """
    The link to feature: Steam first on desktop, then by storefront priority,
    falling back to the first link. None when there are no links.
    """
    if not links:
        return None
    if not prefer_mobile:
        for link in links:
            if link.store_type == "steam":
                return link
    for store_type in STORE_PRIORITY:
        for link in links:
            if link.store_type == store_type:
                return link
    return links[0]


class StoreLinkProvider(Protocol):
    """Protocol for store-link lookup by game name."""

    def lookup(self, name: str) -> List[StoreLink]:
        """Ordered store links for the best match (possibly empty). Raises UpstreamError on failure."""
        ...


class IgdbStoreLinkProvider:
    """Store links from IGDB websites, authenticated with a cached Twitch app token."""

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        base_url: str = "https://api.igdb.com/v4",
        token_url: str = "https://id.twitch.tv/oauth2/token",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = base_url.rstrip("/")
        self._token_url = token_url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._token: Optional[str] = None
        self._token_expires_at = 0.0

    def _access_token(self) -> str:
        if self._token and time.time() < self._token_expires_at:
            return self._token
        if not self._client_id or not self._client_secret:
            raise UpstreamError(401, "IGDB client credentials are not configured")
        try:
            response = self._session.post(
                self._token_url,
                params={
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "grant_type": "client_credentials",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(None, f"{type(e).__name__}: {e}") from e
        if not response.ok:
            raise UpstreamError(response.status_code, "token request rejected")
        data = response.json()
        self._token = data.get("access_token")
        if not self._token:
            raise UpstreamError(response.status_code, "token response without access_token")
        # Refresh a minute early.
        self._token_expires_at = time.time() + max(0, int(data.get("expires_in") or 0) - 60)
        return self._token

    def lookup(self, name: str) -> List[StoreLink]:
        if not name or not name.strip():
            raise ValueError("game name cannot be empty")
        escaped = name.strip().replace('"', '\\"')
        query = f'fields name, websites.url, websites.category; search "{escaped}"; limit 1;'
        try:
            response = self._session.post(
                f"{self._base_url}/games",
                data=query,
                headers={
                    "Client-ID": self._client_id or "",
                    "Authorization": f"Bearer {self._access_token()}",
                    "Content-Type": "text/plain",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError(None, f"{type(e).__name__}: {e}") from e
        if not response.ok:
            raise UpstreamError(response.status_code, (response.text or "")[:200])
        games = response.json()
        if not games:
            return []
        links = []
        for site in games[0].get("websites") or []:
            if not site.get("url"):
                continue
            label = WEBSITE_CATEGORY_NAMES.get(site.get("category"), "Website")
            links.append(StoreLink(name=label, url=site["url"]))
        return links


def lookup_store_links(provider: StoreLinkProvider, name: str) -> List[StoreLink]:
    """Store links for a game, or an empty list when the lookup service fails."""
    try:
        return provider.lookup(name)
    except UpstreamError as e:
        logger.warning("[store_links] LOOKUP_FAILED name=%r status=%s message=%s", name, e.status, e.message)
        return []
