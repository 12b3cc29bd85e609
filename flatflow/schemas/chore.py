from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ChoreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    frequency: str = Field("Weekly", min_length=1, max_length=50, description="e.g. Weekly, Bi-weekly")
    description: Optional[str] = Field(None, max_length=500)
    current_turn: int = Field(0, ge=0, description="Index of the participant whose turn it is")


class ChoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    frequency: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)


class ChoreResponse(BaseModel):
    id: int
    uuid: str
    household_id: int
    name: str
    frequency: str
    description: Optional[str]
    current_turn: int
    last_completed: Optional[datetime]
    assigned_user_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
