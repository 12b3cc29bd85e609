from sqlalchemy import String, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship, Mapped, mapped_column
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from flatflow.models.base import Base, BaseModel
if TYPE_CHECKING:
    from flatflow.models.membership import HouseholdMember


class User(BaseModel):
    """Session identity: the account a bearer token is issued for."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    profile: Mapped[Optional["Profile"]] = relationship(
        "Profile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin"
    )
    memberships: Mapped[List["HouseholdMember"]] = relationship(
        "HouseholdMember",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin"
    )


class Profile(Base):
    """
    Public details of a user, keyed by the user id.
    Created or backfilled lazily the first time a user acts on a household.
    """

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    email: Mapped[str] = mapped_column(String(255), index=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=True
    )

    user: Mapped["User"] = relationship("User", back_populates="profile")
