from sqlalchemy import String, ForeignKey, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from flatflow.models.base import BaseModel

if TYPE_CHECKING:
    from flatflow.models.household import Household


class Chore(BaseModel):
    """
    A recurring household task that rotates through the participant list.
    ``current_turn`` indexes the household's members ordered by join time.
    """

    __tablename__ = "chores"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    frequency: Mapped[str] = mapped_column(String(50), nullable=False, default="Weekly")
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, default=None)

    current_turn: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_completed: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    household: Mapped["Household"] = relationship("Household", back_populates="chores")
