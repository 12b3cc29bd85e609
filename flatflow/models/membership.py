import enum
from sqlalchemy import ForeignKey, DateTime, UniqueConstraint, Enum as SQLEnum, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from typing import TYPE_CHECKING
from flatflow.models.base import BaseModel, utcnow

if TYPE_CHECKING:
    from flatflow.models.household import Household
    from flatflow.models.user import User


class MemberRole(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"


class HouseholdMember(BaseModel):
    """A (household, user, role) triple. A user belongs to a household at most once."""

    __tablename__ = "household_members"
    __table_args__ = (
        UniqueConstraint("household_id", "user_id", name="uq_household_member"),
    )

    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[MemberRole] = mapped_column(
        SQLEnum(MemberRole, values_callable=lambda e: [m.value for m in e], name="member_role"),
        nullable=False,
        default=MemberRole.MEMBER,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )

    household: Mapped["Household"] = relationship("Household", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships", lazy="selectin")
