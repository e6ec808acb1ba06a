from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError, NotFoundError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.models.expense import ExpenseType
from buildbooks.schemas.expense import (
    ExpenseCreate,
    ExpenseListResponse,
    ExpenseResponse,
    ExpenseUpdate,
)
from buildbooks.services.cash_position import effective_amount
from buildbooks.services.expense_service import (
    create_expense,
    get_all_expenses,
    get_expense_by_id,
    update_expense,
)

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense_route(
    data: ExpenseCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """
    Create an expense.

    A material expense may be entered already partly or fully paid
    (vendor_payment_status / vendor_paid_amount); that amount is booked
    against the expense's own bank account or cash locker.
    """
    try:
        expense = create_expense(db, acting_user=acting_user, **data.model_dump())
        return ExpenseResponse.model_validate(expense)
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error creating expense")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create expense",
        )


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    project_id: Optional[str] = Query(None),
    expense_type: Optional[ExpenseType] = Query(None, alias="type"),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """List expenses, newest first, with effective amounts and payment history."""
    try:
        rows = get_all_expenses(db, project_id=project_id, type=expense_type)
        return ExpenseListResponse(
            total=len(rows),
            total_amount=sum((r.amount for r in rows), Decimal("0.00")),
            total_effective_amount=sum((effective_amount(r) for r in rows), Decimal("0.00")),
            expenses=[ExpenseResponse.model_validate(r) for r in rows],
        )
    except Exception:
        logger.exception("Error fetching expenses")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expenses",
        )


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    expense = get_expense_by_id(db, expense_id)
    if not expense:
        raise NotFoundError("Expense", expense_id)
    return ExpenseResponse.model_validate(expense)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense_route(
    expense_id: str,
    data: ExpenseUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Edit an expense (owners only). Payments are recorded through vendor payments, not here."""
    try:
        expense = update_expense(db, expense_id, acting_user, **data.model_dump(exclude_unset=True))
        return ExpenseResponse.model_validate(expense)
    except LedgerError:
        raise
    except Exception:
        logger.exception(f"Error updating expense {expense_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update expense",
        )
