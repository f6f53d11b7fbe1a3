from sqlalchemy import String, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from core.base import Base, TimestampMixin


class UserModel(TimestampMixin, Base):
    """Identity and public profile (id -> username) in one row."""
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(20), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)


# Usernames are unique regardless of case.
Index("uq_users_username_lower", func.lower(UserModel.username), unique=True)
