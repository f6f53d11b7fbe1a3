import uuid
from typing import List, Optional

from sqlalchemy import Integer, String, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, relationship, mapped_column

from core.base import Base, TimestampMixin


class PollGame(TimestampMixin, Base):
    __tablename__ = "poll_games"
    __table_args__ = (
        UniqueConstraint('poll_id', 'catalog_id', name='uq_poll_games_poll_catalog'),
    )

    poll_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("polls.id"), nullable=False, index=True)
    catalog_id: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    cover_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    poll: Mapped["Poll"] = relationship(back_populates="poll_games")
    votes: Mapped[List["Vote"]] = relationship(back_populates="poll_game")
