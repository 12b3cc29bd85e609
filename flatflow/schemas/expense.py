from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from flatflow.models.expense import SplitType


class ExpenseCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    paid_by_id: Optional[int] = Field(None, description="Defaults to the current user")
    split_type: SplitType = SplitType.ALL
    bank_details: Optional[str] = Field(None, max_length=255)
    expense_date: Optional[date] = Field(None, alias="date")

    model_config = {"populate_by_name": True}


class ExpenseShare(BaseModel):
    user_id: int
    amount: Decimal


class ExpenseResponse(BaseModel):
    id: int
    uuid: str
    household_id: int
    description: str
    amount: Decimal
    paid_by_id: int
    split_type: SplitType
    bank_details: Optional[str]
    date: date
    created_at: datetime
    shares: List[ExpenseShare] = []

    class Config:
        from_attributes = True


class MemberBalance(BaseModel):
    user_id: int
    paid: Decimal   # total paid out
    owed: Decimal   # others owe this member
    owes: Decimal   # this member owes others
    net: Decimal    # owed - owes
