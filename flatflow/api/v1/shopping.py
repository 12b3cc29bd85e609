from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from flatflow.database import get_db
from flatflow.dependencies import get_current_user
from flatflow.models.user import User
from flatflow.schemas.shopping import ShoppingItemCreate, ShoppingItemUpdate, ShoppingItemResponse
from flatflow.schemas.result import Result
from flatflow.services.shopping_service import ShoppingService

router = APIRouter()


@router.post("", response_model=Result[ShoppingItemResponse], status_code=status.HTTP_201_CREATED)
async def add_item(
    household_id: int,
    item_data: ShoppingItemCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShoppingService(db)
    item = service.add_item(household_id, current_user.id, item_data)
    return Result.successful(data=item)


@router.get("", response_model=Result[List[ShoppingItemResponse]])
async def list_items(
    household_id: int,
    low_only: bool = Query(False, description="Only items flagged as running low"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShoppingService(db)
    items = service.list_items(household_id, current_user.id, low_only=low_only, skip=skip, limit=limit)
    return Result.successful(data=items)


@router.put("/{item_id}", response_model=Result[ShoppingItemResponse])
async def update_item(
    household_id: int,
    item_id: int,
    item_data: ShoppingItemUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShoppingService(db)
    item = service.update_item(household_id, item_id, current_user.id, item_data)
    return Result.successful(data=item)


@router.delete("/{item_id}", response_model=Result[dict])
async def delete_item(
    household_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShoppingService(db)
    result = service.delete_item(household_id, item_id, current_user.id)
    return Result.successful(data=result)


@router.post("/{item_id}/flag", response_model=Result[ShoppingItemResponse])
async def flag_low(
    household_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Flag an item as running low."""
    service = ShoppingService(db)
    item = service.flag_low(household_id, item_id, current_user.id)
    return Result.successful(data=item)


@router.post("/{item_id}/purchase", response_model=Result[ShoppingItemResponse])
async def complete_purchase(
    household_id: int,
    item_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record a purchase and hand the item to the next member."""
    service = ShoppingService(db)
    item = service.complete_purchase(household_id, item_id, current_user.id)
    return Result.successful(data=item, message="Purchase recorded")
