from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select, delete, insert
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from models import UserModel, Vote


class VoteCrud:

    def __init__(self):
        self.table = Vote

    async def create_vote(self, session: AsyncSession, poll_game_id: UUID, user_id: UUID) -> Vote:
        stmt = insert(Vote).values(
            poll_game_id=poll_game_id,
            user_id=user_id,
        ).returning(Vote)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def delete_vote(self, session: AsyncSession, poll_game_id: UUID, user_id: UUID) -> bool:
        stmt = delete(Vote).where(
            Vote.poll_game_id == poll_game_id,
            Vote.user_id == user_id
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def get_vote(self, session: AsyncSession, poll_game_id: UUID, user_id: UUID) -> Optional[Vote]:
        stmt = select(Vote).where(
            Vote.poll_game_id == poll_game_id,
            Vote.user_id == user_id
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_voters_by_games(self, session: AsyncSession, poll_game_ids: Sequence[UUID]) -> Sequence[Row]:
        """Rows of (poll_game_id, user_id, username) in voting order; username is None on a profile miss."""
        if not poll_game_ids:
            return []
        stmt = (
            select(Vote.poll_game_id, Vote.user_id, UserModel.username)
            .outerjoin(UserModel, Vote.user_id == UserModel.id)
            .where(Vote.poll_game_id.in_(poll_game_ids))
            .order_by(Vote.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.all()


vote_crud = VoteCrud()
