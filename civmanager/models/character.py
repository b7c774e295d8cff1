from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from civmanager.models.base import Base

DEFAULT_STAT = 10


class Character(Base):
    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    civilization_id: Mapped[int] = mapped_column(
        ForeignKey("civilizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False, default=18)
    strength: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_STAT)
    intelligence: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_STAT)
    charisma: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_STAT)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    loyalty: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    # Weak reference: removing a job leaves the character unemployed
    job_id: Mapped[int | None] = mapped_column(
        ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
