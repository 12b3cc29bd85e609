import enum
from sqlalchemy import String, ForeignKey, Numeric, Date, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import date as date_type
from decimal import Decimal
from typing import Optional, TYPE_CHECKING
from flatflow.models.base import BaseModel

if TYPE_CHECKING:
    from flatflow.models.household import Household


class SplitType(str, enum.Enum):
    ALL = "all"                # divided evenly across participants
    INDIVIDUAL = "individual"  # settled manually via bank details


class Expense(BaseModel):
    """A shared expense paid by one member."""

    __tablename__ = "expenses"

    description: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    split_type: Mapped[SplitType] = mapped_column(
        SQLEnum(SplitType, values_callable=lambda e: [m.value for m in e], name="split_type"),
        nullable=False,
        default=SplitType.ALL,
    )
    bank_details: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, default=None)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, default=date_type.today)

    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    paid_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    household: Mapped["Household"] = relationship("Household", back_populates="expenses")
