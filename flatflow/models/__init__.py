from flatflow.models.base import Base, BaseModel
from flatflow.models.user import User, Profile
from flatflow.models.household import Household
from flatflow.models.membership import HouseholdMember, MemberRole
from flatflow.models.invitation import HouseholdInvitation, InvitationStatus
from flatflow.models.chore import Chore
from flatflow.models.shopping import ShoppingItem
from flatflow.models.expense import Expense, SplitType

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # Identity
    "User",
    "Profile",
    # Household
    "Household",
    "HouseholdMember",
    "MemberRole",
    "HouseholdInvitation",
    "InvitationStatus",
    # Coordination
    "Chore",
    "ShoppingItem",
    "Expense",
    "SplitType",
]
