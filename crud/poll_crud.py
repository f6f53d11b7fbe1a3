from typing import Optional, Sequence
from uuid import UUID
from sqlalchemy import insert, select, func
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession
from models import Poll, PollGame, UserModel, Vote


class PollCrud:
    def __init__(self):
        self.table = Poll

    async def create_poll(self, session: AsyncSession, poll_data: dict) -> Poll:
        stmt = insert(Poll).values(**poll_data).returning(Poll)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_poll_by_id(self, session: AsyncSession, poll_id: UUID) -> Optional[Poll]:
        stmt = select(Poll).where(Poll.id == poll_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_polls_created_by(self, session: AsyncSession, user_id: UUID) -> Sequence[Row]:
        """Polls owned by the user with their suggestion count, newest first."""
        stmt = (
            select(
                Poll.id,
                Poll.title,
                Poll.description,
                Poll.created_at,
                func.count(PollGame.id).label("game_count"),
            )
            .outerjoin(PollGame, PollGame.poll_id == Poll.id)
            .where(Poll.creator_id == user_id)
            .group_by(Poll.id, Poll.title, Poll.description, Poll.created_at)
            .order_by(Poll.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.all()

    async def get_polls_voted_by(self, session: AsyncSession, user_id: UUID) -> Sequence[Row]:
        """Polls of other users in which the user voted on at least one suggestion."""
        stmt = (
            select(
                Poll.id,
                Poll.title,
                Poll.description,
                Poll.created_at,
                UserModel.username.label("creator_username"),
            )
            .select_from(Vote)
            .join(PollGame, Vote.poll_game_id == PollGame.id)
            .join(Poll, PollGame.poll_id == Poll.id)
            .outerjoin(UserModel, Poll.creator_id == UserModel.id)
            .where(Vote.user_id == user_id, Poll.creator_id != user_id)
            .distinct()
            .order_by(Poll.created_at.desc())
        )
        result = await session.execute(stmt)
        return result.all()


poll_crud = PollCrud()
