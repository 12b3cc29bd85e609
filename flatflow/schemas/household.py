from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from flatflow.models.membership import MemberRole


def _strip_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Household name must not be empty")
    return value


class HouseholdCreate(BaseModel):
    """Schema for creating a new household."""
    name: str = Field(..., min_length=1, max_length=100, description="Household name")

    normalize_name = field_validator("name")(_strip_name)


class HouseholdUpdate(BaseModel):
    """Schema for renaming a household."""
    name: str = Field(..., min_length=1, max_length=100)

    normalize_name = field_validator("name")(_strip_name)


class HouseholdMemberResponse(BaseModel):
    """A member of a household with profile details."""
    id: int
    user_id: int
    role: MemberRole = Field(..., description="Member role: 'admin' or 'member'")
    joined_at: datetime
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class HouseholdResponse(BaseModel):
    id: int
    uuid: str
    name: str
    created_by_id: int
    created_at: datetime
    updated_at: Optional[datetime]
    member_count: Optional[int] = None

    class Config:
        from_attributes = True


class PromoteMemberRequest(BaseModel):
    """Member to promote to admin when the last admin leaves."""
    new_admin_id: int = Field(..., description="User ID of member to promote to admin")
