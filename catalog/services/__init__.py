"""Collaborators around the feed core: upstream catalog and store-link lookup."""

from .catalog_provider import CatalogProvider, HttpCatalogProvider, InMemoryCatalogProvider
from .errors import UpstreamError
from .store_links import (
    IgdbStoreLinkProvider,
    StoreLink,
    StoreLinkProvider,
    choose_primary_store_link,
    lookup_store_links,
    url_to_store_type,
)

__all__ = [
    "CatalogProvider",
    "HttpCatalogProvider",
    "IgdbStoreLinkProvider",
    "InMemoryCatalogProvider",
    "StoreLink",
    "StoreLinkProvider",
    "UpstreamError",
    "choose_primary_store_link",
    "lookup_store_links",
    "url_to_store_type",
]
