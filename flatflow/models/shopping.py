from sqlalchemy import String, ForeignKey, Integer, Boolean, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from flatflow.models.base import BaseModel

if TYPE_CHECKING:
    from flatflow.models.household import Household


class ShoppingItem(BaseModel):
    """
    A household supply. Anyone can flag it as running low; buying it clears
    the flag and hands responsibility to the next participant.
    """

    __tablename__ = "shopping_items"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[Optional[float]] = mapped_column(Float, nullable=True, default=None)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, default=None)

    # Low-stock flag
    is_low: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    flagged_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, default=None
    )

    # Rotation cursor into the participant list
    assigned_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_purchased: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    added_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    household: Mapped["Household"] = relationship("Household", back_populates="shopping_items")
