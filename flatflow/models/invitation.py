import enum
from sqlalchemy import String, ForeignKey, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timedelta
from typing import Optional, TYPE_CHECKING
from flatflow.config import settings
from flatflow.models.base import BaseModel, utcnow, as_utc

if TYPE_CHECKING:
    from flatflow.models.household import Household
    from flatflow.models.user import User


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


def default_expiry() -> datetime:
    return utcnow() + timedelta(days=settings.INVITATION_EXPIRE_DAYS)


class HouseholdInvitation(BaseModel):
    """
    Single-use invitation of an email address into a household.

    Status only moves forward: pending -> accepted or pending -> declined.
    """

    __tablename__ = "household_invitations"

    household_id: Mapped[int] = mapped_column(
        ForeignKey("households.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    invited_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Set when the invited email already belongs to an account
    invited_user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, default=None
    )
    status: Mapped[InvitationStatus] = mapped_column(
        SQLEnum(InvitationStatus, values_callable=lambda e: [m.value for m in e], name="invitation_status"),
        nullable=False,
        default=InvitationStatus.PENDING,
        index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=default_expiry
    )

    household: Mapped["Household"] = relationship(
        "Household", back_populates="invitations", lazy="selectin"
    )
    invited_by: Mapped["User"] = relationship(
        "User", foreign_keys=[invited_by_id], lazy="selectin"
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())

    @property
    def is_pending(self) -> bool:
        return self.status == InvitationStatus.PENDING
