from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from flatflow.database import get_db
from flatflow.dependencies import get_current_user
from flatflow.models.user import User
from flatflow.schemas.expense import ExpenseCreate, ExpenseResponse, MemberBalance
from flatflow.schemas.result import Result
from flatflow.services.expense_service import ExpenseService

router = APIRouter()


@router.post("", response_model=Result[ExpenseResponse], status_code=status.HTTP_201_CREATED)
async def create_expense(
    household_id: int,
    expense_data: ExpenseCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Record a shared expense.

    With ``split_type`` "all" the amount is split evenly over every member,
    payer included, and the response lists what each other member owes.
    """
    service = ExpenseService(db)
    expense = service.create_expense(household_id, current_user.id, expense_data)
    return Result.successful(data=expense)


@router.get("", response_model=Result[List[ExpenseResponse]])
async def list_expenses(
    household_id: int,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Expenses newest first, each with its computed shares."""
    service = ExpenseService(db)
    expenses = service.list_expenses(household_id, current_user.id, skip, limit)
    return Result.successful(data=expenses)


@router.get("/balances", response_model=Result[List[MemberBalance]])
async def get_balances(
    household_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ExpenseService(db)
    balances = service.get_balances(household_id, current_user.id)
    return Result.successful(data=balances)


@router.get("/{expense_id}", response_model=Result[ExpenseResponse])
async def get_expense(
    household_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ExpenseService(db)
    expense = service.get_expense(household_id, expense_id, current_user.id)
    return Result.successful(data=expense)


@router.delete("/{expense_id}", response_model=Result[dict])
async def delete_expense(
    household_id: int,
    expense_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ExpenseService(db)
    result = service.delete_expense(household_id, expense_id, current_user.id)
    return Result.successful(data=result)
