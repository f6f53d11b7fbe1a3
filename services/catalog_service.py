"""IGDB game catalog client authenticated with a Twitch app access token."""

import logging
import random
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from core.exceptions import CatalogUnavailable
from core.settings import settings

logger = logging.getLogger(__name__)

GAME_FIELDS = "id, name, cover.url, first_release_date, summary"
RANDOM_POOL_SIZE = 200


class TwitchTokenCache:
    """Process-wide app access token, refreshed lazily when close to expiry.

    Concurrent refreshes are not serialised; whichever response lands last is
    kept and every issued token is usable until it expires.
    """

    def __init__(self, refresh_margin_seconds: int = 300):
        self.refresh_margin_seconds = refresh_margin_seconds
        self.token: Optional[str] = None
        self.expires_at: float = 0.0

    def is_fresh(self, now: Optional[float] = None) -> bool:
        if self.token is None:
            return False
        now = time.time() if now is None else now
        return now < self.expires_at - self.refresh_margin_seconds

    def invalidate(self) -> None:
        self.token = None
        self.expires_at = 0.0

    async def get_token(
        self,
        client: httpx.AsyncClient,
        token_url: str,
        client_id: str,
        client_secret: str,
    ) -> str:
        if self.is_fresh():
            return self.token

        response = await client.post(
            token_url,
            params={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "client_credentials",
            },
        )
        if response.status_code != 200:
            raise CatalogUnavailable("Failed to get Twitch access token")

        data = response.json()
        token = data.get("access_token")
        if not token:
            raise CatalogUnavailable("Twitch token response did not include an access token")

        self.token = token
        self.expires_at = time.time() + int(data.get("expires_in", 0))
        logger.info(f"Refreshed Twitch access token, expires in {data.get('expires_in')}s")
        return token


def escape_query(query: str) -> str:
    return query.replace("\\", "\\\\").replace('"', '\\"')


def normalize_game(game: Dict[str, Any]) -> Dict[str, Any]:
    """Map a raw IGDB game record onto a catalog entry."""
    cover = game.get("cover") or {}
    cover_url = cover.get("url") if isinstance(cover, dict) else None
    if cover_url:
        # IGDB returns protocol-relative thumbnail URLs
        cover_url = cover_url.replace("t_thumb", "t_cover_big")
        if cover_url.startswith("//"):
            cover_url = "https:" + cover_url

    release_year = None
    if game.get("first_release_date"):
        release_year = datetime.fromtimestamp(game["first_release_date"], tz=timezone.utc).year

    return {
        "catalog_id": game["id"],
        "title": game.get("name") or "",
        "cover_url": cover_url,
        "release_year": release_year,
        "summary": game.get("summary") or None,
    }


class IGDBClient:

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        base_url: str = "https://api.igdb.com/v4",
        token_url: str = "https://id.twitch.tv/oauth2/token",
        timeout: float = 10.0,
        token_cache: Optional[TwitchTokenCache] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.token_url = token_url
        self.timeout = timeout
        self.token_cache = token_cache or TwitchTokenCache()
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "IGDBClient":
        return cls(
            client_id=settings.TWITCH_CLIENT_ID,
            client_secret=settings.TWITCH_CLIENT_SECRET,
            base_url=settings.IGDB_BASE_URL,
            token_url=settings.TWITCH_TOKEN_URL,
            timeout=settings.CATALOG_TIMEOUT_SECONDS,
            token_cache=TwitchTokenCache(settings.CATALOG_TOKEN_REFRESH_MARGIN_SECONDS),
        )

    async def search(self, query: str, limit: int = 20) -> List[Dict[str, Any]]:
        body = f'search "{escape_query(query)}"; fields {GAME_FIELDS}; limit {limit};'
        return await self._query_games(body)

    async def random(self, limit: int = 10) -> List[Dict[str, Any]]:
        """A page of well-known games with covers, starting at a random offset."""
        offset = random.randint(0, RANDOM_POOL_SIZE - limit) if limit < RANDOM_POOL_SIZE else 0
        body = (
            f"fields {GAME_FIELDS}; "
            "where cover != null & total_rating_count > 50; "
            "sort total_rating_count desc; "
            f"limit {limit}; offset {offset};"
        )
        return await self._query_games(body)

    async def _query_games(self, body: str) -> List[Dict[str, Any]]:
        if not self.client_id or not self.client_secret:
            logger.error("Missing TWITCH_CLIENT_ID or TWITCH_CLIENT_SECRET")
            raise CatalogUnavailable("Game catalog is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                token = await self.token_cache.get_token(
                    client, self.token_url, self.client_id, self.client_secret
                )
                response = await client.post(
                    f"{self.base_url}/games",
                    headers={
                        "Client-ID": self.client_id,
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "text/plain",
                    },
                    content=body,
                )
            if response.status_code == 401:
                self.token_cache.invalidate()
            if response.status_code != 200:
                logger.error(f"IGDB API error {response.status_code}: {response.text}")
                raise CatalogUnavailable("Failed to search games")
            games = response.json()
        except httpx.HTTPError as e:
            logger.error(f"IGDB request failed: {e!r}")
            raise CatalogUnavailable("Failed to search games") from e
        except ValueError as e:
            logger.error(f"IGDB returned an unreadable body: {e}")
            raise CatalogUnavailable("Failed to search games") from e

        if not isinstance(games, list):
            raise CatalogUnavailable("Unexpected response from game catalog")
        return [normalize_game(game) for game in games if "id" in game]


catalog_client = IGDBClient.from_settings()
