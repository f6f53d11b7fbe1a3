from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import PollGame


class PollGameCrud:
    def __init__(self):
        self.table = PollGame

    async def create_game(self, session: AsyncSession, game_data: dict) -> PollGame:
        stmt = insert(PollGame).values(**game_data).returning(PollGame)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_game_by_catalog_id(self, session: AsyncSession, poll_id: UUID, catalog_id: int) -> Optional[PollGame]:
        stmt = select(PollGame).where(PollGame.poll_id == poll_id, PollGame.catalog_id == catalog_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_game_in_poll(self, session: AsyncSession, poll_game_id: UUID, poll_id: UUID) -> Optional[PollGame]:
        stmt = select(PollGame).where(PollGame.id == poll_game_id, PollGame.poll_id == poll_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_games_by_poll(self, session: AsyncSession, poll_id: UUID) -> Sequence[PollGame]:
        stmt = (
            select(PollGame)
            .where(PollGame.poll_id == poll_id)
            .order_by(PollGame.created_at.asc(), PollGame.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


poll_game_crud = PollGameCrud()
