"""Catalog provider tests: HTTP request shaping and error mapping, in-memory paging."""

import asyncio

import pytest

from catalog.services import HttpCatalogProvider, InMemoryCatalogProvider, UpstreamError

from catalog_fakes import FakeResponse, FakeSession, connection_error


def _http(responses, api_key="k"):
    session = FakeSession(responses)
    return HttpCatalogProvider(api_key, base_url="https://rawg.test/api/", timeout=3, session=session), session


class TestHttpCatalogProvider:

    def test_fetch_page_request_shape(self):
        provider, session = _http([FakeResponse({"results": [{"id": 1}, {"id": 2}]})])
        rows = asyncio.run(provider.fetch_page(3, 20, genres="rpg", search=""))
        assert rows == [{"id": 1}, {"id": 2}]
        call = session.calls[0]
        assert call["url"] == "https://rawg.test/api/games"
        assert call["params"] == {"page": 3, "page_size": 20, "genres": "rpg", "key": "k"}
        assert call["timeout"] == 3

    def test_no_key_sent_without_api_key(self):
        provider, session = _http([FakeResponse({"results": []})], api_key=None)
        assert asyncio.run(provider.fetch_page(1, 10)) == []
        assert "key" not in session.calls[0]["params"]

    def test_rejected_page_raises(self):
        provider, _ = _http([FakeResponse(status_code=503, text="busy")])
        with pytest.raises(UpstreamError) as exc:
            asyncio.run(provider.fetch_page(1, 20))
        assert exc.value.status == 503

    def test_transport_error_raises_upstream_error(self):
        provider, _ = _http([connection_error()])
        with pytest.raises(UpstreamError) as exc:
            asyncio.run(provider.fetch_page(1, 20))
        assert exc.value.status is None

    def test_invalid_json_raises(self):
        provider, _ = _http([FakeResponse(bad_json=True)])
        with pytest.raises(UpstreamError):
            asyncio.run(provider.fetch_genres())

    def test_details_and_screenshots_degrade_quietly(self):
        provider, session = _http([FakeResponse(status_code=404), FakeResponse(status_code=500)])
        assert asyncio.run(provider.fetch_details(9)) is None
        assert asyncio.run(provider.fetch_screenshots(9)) == []
        assert session.calls[0]["url"].endswith("/games/9")
        assert session.calls[1]["url"].endswith("/games/9/screenshots")

    def test_details_and_genres(self):
        provider, _ = _http([
            FakeResponse({"id": 9, "name": "Hades"}),
            FakeResponse({"results": [{"id": 5, "slug": "rpg", "name": "RPG"}]}),
        ])
        assert asyncio.run(provider.fetch_details(9))["name"] == "Hades"
        assert asyncio.run(provider.fetch_genres())[0]["slug"] == "rpg"


class TestInMemoryCatalogProvider:

    ROWS = [
        {"id": 1, "name": "Portal", "genres": [{"id": 7, "slug": "puzzle", "name": "Puzzle"}]},
        {"id": 2, "name": "Hades", "genres": [{"id": 5, "slug": "rpg", "name": "RPG"}]},
        {"id": 3, "name": "Portal 2", "genres": ["puzzle"], "short_screenshots": [{"image": "a.jpg"}]},
        {"id": 4, "name": "Celeste", "genres": []},
    ]

    def test_paging(self):
        provider = InMemoryCatalogProvider(self.ROWS)
        assert [r["id"] for r in asyncio.run(provider.fetch_page(2, 3))] == [4]
        assert asyncio.run(provider.fetch_page(3, 3)) == []
        assert provider.requested_pages == [2, 3]

    def test_genre_filter_by_slug_or_id(self):
        provider = InMemoryCatalogProvider(self.ROWS)
        assert [r["id"] for r in asyncio.run(provider.fetch_page(1, 10, genres="puzzle"))] == [1, 3]
        assert [r["id"] for r in asyncio.run(provider.fetch_page(1, 10, genres="5,7"))] == [1, 2]

    def test_search(self):
        provider = InMemoryCatalogProvider(self.ROWS)
        assert [r["id"] for r in asyncio.run(provider.fetch_page(1, 10, search="portal"))] == [1, 3]

    def test_failing_page(self):
        provider = InMemoryCatalogProvider(self.ROWS, failing_pages=[2])
        with pytest.raises(UpstreamError):
            asyncio.run(provider.fetch_page(2, 2))

    def test_details_and_screenshots(self):
        provider = InMemoryCatalogProvider(self.ROWS, genres=[{"id": 5, "slug": "rpg"}])
        assert asyncio.run(provider.fetch_details("3"))["name"] == "Portal 2"
        assert asyncio.run(provider.fetch_details(99)) is None
        assert asyncio.run(provider.fetch_screenshots(3)) == [{"image": "a.jpg"}]
        assert asyncio.run(provider.fetch_genres()) == [{"id": 5, "slug": "rpg"}]
