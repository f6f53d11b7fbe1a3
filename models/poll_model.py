import uuid
from typing import List, Optional

from sqlalchemy import String, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, relationship, mapped_column

from core.base import Base, TimestampMixin


class Poll(TimestampMixin, Base):
    __tablename__ = "polls"

    creator_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    poll_games: Mapped[List["PollGame"]] = relationship(back_populates="poll", order_by="PollGame.created_at")
