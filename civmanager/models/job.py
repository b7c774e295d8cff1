from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from civmanager.models.base import Base


class Job(Base):
    """Global job catalog entry. Not owned by any civilization."""

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    min_strength: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_intelligence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_charisma: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
