from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ShoppingItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, max_length=50)
    is_low: bool = False
    assigned_index: int = Field(0, ge=0)


class ShoppingItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, max_length=50)


class ShoppingItemResponse(BaseModel):
    id: int
    uuid: str
    household_id: int
    name: str
    quantity: Optional[float]
    category: Optional[str]
    is_low: bool
    flagged_by_id: Optional[int]
    assigned_index: int
    assigned_user_id: Optional[int] = None
    last_purchased: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
