from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, TYPE_CHECKING
from flatflow.models.base import BaseModel

if TYPE_CHECKING:
    from flatflow.models.membership import HouseholdMember
    from flatflow.models.invitation import HouseholdInvitation
    from flatflow.models.chore import Chore
    from flatflow.models.shopping import ShoppingItem
    from flatflow.models.expense import Expense


class Household(BaseModel):
    """
    A shared living space. Has exactly one creator and one or more members,
    at least one of whom is an admin.
    """

    __tablename__ = "households"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    members: Mapped[List["HouseholdMember"]] = relationship(
        "HouseholdMember",
        back_populates="household",
        cascade="all, delete-orphan",
        order_by="HouseholdMember.joined_at",
        lazy="selectin",
    )

    invitations: Mapped[List["HouseholdInvitation"]] = relationship(
        "HouseholdInvitation",
        back_populates="household",
        cascade="all, delete-orphan",
    )

    chores: Mapped[List["Chore"]] = relationship(
        "Chore",
        back_populates="household",
        cascade="all, delete-orphan",
    )

    shopping_items: Mapped[List["ShoppingItem"]] = relationship(
        "ShoppingItem",
        back_populates="household",
        cascade="all, delete-orphan",
    )

    expenses: Mapped[List["Expense"]] = relationship(
        "Expense",
        back_populates="household",
        cascade="all, delete-orphan",
    )

    @property
    def member_count(self) -> int:
        return len(self.members)
