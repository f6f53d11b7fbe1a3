from typing import List, Optional
from pydantic import BaseModel, Field


class CatalogGameSchema(BaseModel):
    catalog_id: int
    title: str
    cover_url: Optional[str] = None
    release_year: Optional[int] = None
    summary: Optional[str] = None


class GameListResponseSchema(BaseModel):
    games: List[CatalogGameSchema] = Field(default_factory=list)
