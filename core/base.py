import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, declared_attr


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    # Set client-side so rows inserted within the same second keep their order.
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)


class Base(DeclarativeBase):
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    @declared_attr
    def __tablename__(self) -> str:
        return self.__name__.lower()
