import time

import httpx
import pytest

from core.exceptions import CatalogUnavailable
from services.catalog_service import IGDBClient, TwitchTokenCache, escape_query, normalize_game

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
GAMES_URL = "https://api.igdb.com/v4/games"

IGDB_CHESS = {
    "id": 101,
    "name": "Chess",
    "cover": {"id": 9, "url": "//images.igdb.com/igdb/image/upload/t_thumb/co1.jpg"},
    "first_release_date": 631152000,  # 1990-01-01
    "summary": "Kings and queens.",
}


class FakeIGDB:
    """Serves the Twitch token endpoint and the IGDB games endpoint."""

    def __init__(self, games=None, games_status=200, token_status=200, expires_in=3600):
        self.games = [IGDB_CHESS] if games is None else games
        self.games_status = games_status
        self.token_status = token_status
        self.expires_in = expires_in
        self.token_requests = 0
        self.game_requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url).startswith(TOKEN_URL):
            self.token_requests += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"message": "invalid client"})
            return httpx.Response(200, json={
                "access_token": f"token-{self.token_requests}",
                "expires_in": self.expires_in,
                "token_type": "bearer",
            })
        if str(request.url) == GAMES_URL:
            self.game_requests.append(request)
            return httpx.Response(self.games_status, json=self.games)
        return httpx.Response(404)


def make_client(fake, client_id="client-id", client_secret="client-secret", cache=None):
    return IGDBClient(
        client_id=client_id,
        client_secret=client_secret,
        token_cache=cache,
        transport=httpx.MockTransport(fake),
    )


class TestNormalizeGame:
    def test_full_record(self):
        assert normalize_game(IGDB_CHESS) == {
            "catalog_id": 101,
            "title": "Chess",
            "cover_url": "https://images.igdb.com/igdb/image/upload/t_cover_big/co1.jpg",
            "release_year": 1990,
            "summary": "Kings and queens.",
        }

    def test_sparse_record(self):
        assert normalize_game({"id": 7, "name": "Mystery"}) == {
            "catalog_id": 7,
            "title": "Mystery",
            "cover_url": None,
            "release_year": None,
            "summary": None,
        }


def test_escape_query():
    assert escape_query('say "hi"') == 'say \\"hi\\"'
    assert escape_query("back\\slash") == "back\\\\slash"


class TestTwitchTokenCache:
    def test_empty_cache_is_stale(self):
        assert not TwitchTokenCache().is_fresh()

    def test_token_within_margin_is_stale(self):
        cache = TwitchTokenCache(refresh_margin_seconds=300)
        cache.token = "abc"
        now = time.time()

        cache.expires_at = now + 301
        assert cache.is_fresh(now)
        cache.expires_at = now + 299
        assert not cache.is_fresh(now)


class TestSearch:
    async def test_search_sends_igdb_query(self):
        fake = FakeIGDB()
        client = make_client(fake)

        games = await client.search('Chess "Deluxe"', limit=5)

        assert [game["catalog_id"] for game in games] == [101]
        request = fake.game_requests[0]
        assert request.headers["Client-ID"] == "client-id"
        assert request.headers["Authorization"] == "Bearer token-1"
        body = request.content.decode()
        assert body.startswith('search "Chess \\"Deluxe\\"";')
        assert "limit 5;" in body

    async def test_token_is_cached_across_requests(self):
        fake = FakeIGDB()
        client = make_client(fake)

        await client.search("chess")
        await client.search("portal")

        assert fake.token_requests == 1
        assert [r.headers["Authorization"] for r in fake.game_requests] == ["Bearer token-1", "Bearer token-1"]

    async def test_token_near_expiry_is_refreshed(self):
        # 200s of lifetime is inside the 300s safety window
        fake = FakeIGDB(expires_in=200)
        client = make_client(fake)

        await client.search("chess")
        await client.search("chess")

        assert fake.token_requests == 2
        assert fake.game_requests[1].headers["Authorization"] == "Bearer token-2"

    async def test_empty_result(self):
        client = make_client(FakeIGDB(games=[]))
        assert await client.search("nothing") == []

    async def test_upstream_error_is_catalog_unavailable(self):
        client = make_client(FakeIGDB(games_status=500))
        with pytest.raises(CatalogUnavailable):
            await client.search("chess")

    async def test_token_failure_is_catalog_unavailable(self):
        fake = FakeIGDB(token_status=400)
        client = make_client(fake)

        with pytest.raises(CatalogUnavailable):
            await client.search("chess")
        assert fake.game_requests == []

    async def test_unauthorized_drops_cached_token(self):
        cache = TwitchTokenCache()
        client = make_client(FakeIGDB(games_status=401), cache=cache)

        with pytest.raises(CatalogUnavailable):
            await client.search("chess")
        assert cache.token is None

    async def test_transport_error_is_catalog_unavailable(self):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = IGDBClient("client-id", "client-secret", transport=httpx.MockTransport(unreachable))

        with pytest.raises(CatalogUnavailable):
            await client.search("chess")

    async def test_missing_credentials(self):
        fake = FakeIGDB()
        client = make_client(fake, client_id=None)

        with pytest.raises(CatalogUnavailable):
            await client.search("chess")
        assert fake.token_requests == 0


class TestRandom:
    async def test_random_query_shape(self):
        fake = FakeIGDB()
        client = make_client(fake)

        games = await client.random(limit=10)

        assert games[0]["title"] == "Chess"
        body = fake.game_requests[0].content.decode()
        assert "where cover != null" in body
        assert "limit 10;" in body
        assert "offset " in body
