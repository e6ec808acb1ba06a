from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.schemas.income import (
    IncomeCreate,
    IncomeListResponse,
    IncomeResponse,
    IncomeUpdate,
)
from buildbooks.services.income_service import create_income, get_all_income, update_income

router = APIRouter()


@router.post("", response_model=IncomeResponse, status_code=status.HTTP_201_CREATED)
def create_income_route(
    data: IncomeCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        income = create_income(
            db,
            project_id=data.project_id,
            amount=data.amount,
            date=data.date,
            mode=data.mode,
            acting_user=acting_user,
            cash_location=data.cash_location,
            bank_name=data.bank_name,
            account_number=data.account_number,
            description=data.description,
        )
        return IncomeResponse.model_validate(income)
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error creating income")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create income",
        )


@router.get("", response_model=IncomeListResponse)
def list_income(
    project_id: Optional[str] = Query(None),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Income, newest first."""
    try:
        rows = get_all_income(db, project_id=project_id)
        return IncomeListResponse(
            total=len(rows),
            total_amount=sum((r.amount for r in rows), Decimal("0.00")),
            income=[IncomeResponse.model_validate(r) for r in rows],
        )
    except Exception:
        logger.exception("Error fetching income")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch income",
        )


@router.put("/{income_id}", response_model=IncomeResponse)
def update_income_route(
    income_id: str,
    data: IncomeUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Edit an income record (owners only)."""
    try:
        income = update_income(db, income_id, acting_user, **data.model_dump(exclude_unset=True))
        return IncomeResponse.model_validate(income)
    except LedgerError:
        raise
    except Exception:
        logger.exception(f"Error updating income {income_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update income",
        )
