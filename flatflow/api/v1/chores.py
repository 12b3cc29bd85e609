from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from flatflow.database import get_db
from flatflow.dependencies import get_current_user
from flatflow.models.user import User
from flatflow.schemas.chore import ChoreCreate, ChoreUpdate, ChoreResponse
from flatflow.schemas.result import Result
from flatflow.services.chore_service import ChoreService

router = APIRouter()


@router.post("", response_model=Result[ChoreResponse], status_code=status.HTTP_201_CREATED)
async def create_chore(
    household_id: int,
    chore_data: ChoreCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a chore to the household rotation."""
    service = ChoreService(db)
    chore = service.create_chore(household_id, current_user.id, chore_data)
    return Result.successful(data=chore)


@router.get("", response_model=Result[List[ChoreResponse]])
async def list_chores(
    household_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChoreService(db)
    chores = service.list_chores(household_id, current_user.id, skip, limit)
    return Result.successful(data=chores)


@router.get("/{chore_id}", response_model=Result[ChoreResponse])
async def get_chore(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChoreService(db)
    chore = service.get_chore(household_id, chore_id, current_user.id)
    return Result.successful(data=chore)


@router.put("/{chore_id}", response_model=Result[ChoreResponse])
async def update_chore(
    household_id: int,
    chore_id: int,
    chore_data: ChoreUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChoreService(db)
    chore = service.update_chore(household_id, chore_id, current_user.id, chore_data)
    return Result.successful(data=chore)


@router.delete("/{chore_id}", response_model=Result[dict])
async def delete_chore(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ChoreService(db)
    result = service.delete_chore(household_id, chore_id, current_user.id)
    return Result.successful(data=result)


@router.post("/{chore_id}/complete", response_model=Result[ChoreResponse])
async def complete_chore(
    household_id: int,
    chore_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark the chore done and pass the turn to the next member."""
    service = ChoreService(db)
    chore = service.complete_chore(household_id, chore_id, current_user.id)
    return Result.successful(data=chore, message="Chore marked as done")
