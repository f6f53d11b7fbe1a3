import uuid

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, relationship, mapped_column

from core.base import Base, TimestampMixin


class Vote(TimestampMixin, Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint('poll_game_id', 'user_id', name='uq_votes_game_user'),
    )

    poll_game_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("poll_games.id"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    poll_game: Mapped["PollGame"] = relationship(back_populates="votes")
