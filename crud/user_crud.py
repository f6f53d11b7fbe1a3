from typing import Optional
from uuid import UUID
from sqlalchemy import insert, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from models.user_model import UserModel


class UserCrud:

    def __init__(self):
        self.table = UserModel

    async def create_user(self, session: AsyncSession, username: str, hashed_password: str) -> UserModel:
        stmt = insert(UserModel).values(username=username, hashed_password=hashed_password).returning(UserModel)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_user_by_username(self, session: AsyncSession, username: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(func.lower(UserModel.username) == username.lower())
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_user_by_id(self, session: AsyncSession, user_id: UUID) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await session.execute(stmt)
        return result.scalars().first()


user_crud = UserCrud()
