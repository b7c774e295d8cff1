from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from civmanager.models.base import Base

# Declaration order; the ledger reports the first offending counter in this order
RESOURCE_NAMES: tuple[str, ...] = ("food", "gold", "materials", "military_power")

STARTING_RESOURCES: dict[str, int] = {
    "food": 100,
    "gold": 50,
    "materials": 30,
    "military_power": 0,
}

# Counters are 32-bit INTEGER columns
MAX_RESOURCE_VALUE = 2**31 - 1


class CivilizationResources(Base):
    __tablename__ = "civilization_resources"
    __table_args__ = (
        CheckConstraint("food >= 0", name="ck_civilization_resources_food_nonnegative"),
        CheckConstraint("gold >= 0", name="ck_civilization_resources_gold_nonnegative"),
        CheckConstraint("materials >= 0", name="ck_civilization_resources_materials_nonnegative"),
        CheckConstraint(
            "military_power >= 0", name="ck_civilization_resources_military_power_nonnegative"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    civilization_id: Mapped[int] = mapped_column(
        ForeignKey("civilizations.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    food: Mapped[int] = mapped_column(Integer, default=STARTING_RESOURCES["food"], nullable=False)
    gold: Mapped[int] = mapped_column(Integer, default=STARTING_RESOURCES["gold"], nullable=False)
    materials: Mapped[int] = mapped_column(
        Integer, default=STARTING_RESOURCES["materials"], nullable=False
    )
    military_power: Mapped[int] = mapped_column(
        Integer, default=STARTING_RESOURCES["military_power"], nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in RESOURCE_NAMES}
