from typing import Optional
from fastapi import APIRouter

from core.depends import CatalogClient
from core.exceptions import ValidationError
from core.settings import settings
from schemas.game_schema import GameListResponseSchema


router = APIRouter(
    prefix="/games",
)


@router.get("/search", response_model=GameListResponseSchema)
async def search_games(
    catalog: CatalogClient,
    q: Optional[str] = None
):
    """Search the game catalog; an upstream failure is a 502, never an empty result."""
    if not q or not q.strip():
        raise ValidationError("Search query is required")

    games = await catalog.search(q.strip(), settings.CATALOG_SEARCH_LIMIT)
    return GameListResponseSchema(games=games)


@router.get("/random", response_model=GameListResponseSchema)
async def random_games(catalog: CatalogClient):
    games = await catalog.random(settings.CATALOG_RANDOM_LIMIT)
    return GameListResponseSchema(games=games)
