import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from crud.poll_crud import poll_crud as PollCrud
from schemas.user_schema import AuthUser

logger = logging.getLogger(__name__)

UNKNOWN_USERNAME = "Unknown"


class HistoryService:

    async def get_history(self, session: AsyncSession, user: AuthUser) -> Dict[str, List[Dict[str, Any]]]:
        """Polls the user created and polls of other users they voted in.

        Each half is read on its own; a failed read leaves that half empty.
        """
        return {
            "created": await self.get_created(session, user),
            "participated": await self.get_participated(session, user),
        }

    async def get_created(self, session: AsyncSession, user: AuthUser) -> List[Dict[str, Any]]:
        try:
            rows = await PollCrud.get_polls_created_by(session, user.id)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning(f"Created polls fetch failed for user {user.id}: {e}")
            return []

        return [
            {
                "id": row.id,
                "title": row.title,
                "description": row.description,
                "created_at": row.created_at,
                "game_count": row.game_count or 0,
            }
            for row in rows
        ]

    async def get_participated(self, session: AsyncSession, user: AuthUser) -> List[Dict[str, Any]]:
        try:
            rows = await PollCrud.get_polls_voted_by(session, user.id)
        except SQLAlchemyError as e:
            await session.rollback()
            logger.warning(f"Voted polls fetch failed for user {user.id}: {e}")
            return []

        participated = {}
        for row in rows:
            if row.id in participated:
                continue
            participated[row.id] = {
                "id": row.id,
                "title": row.title,
                "description": row.description,
                "created_at": row.created_at,
                "creator_username": row.creator_username or UNKNOWN_USERNAME,
            }
        return sorted(participated.values(), key=lambda poll: poll["created_at"], reverse=True)


history_service = HistoryService()
