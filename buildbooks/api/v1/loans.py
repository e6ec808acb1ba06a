from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.models.loan import LoanDirection, LoanType
from buildbooks.schemas.loan import LoanCreate, LoanListResponse, LoanResponse, LoanReturn
from buildbooks.services.loan_service import (
    create_external_loan,
    create_inter_project_loan,
    get_all_loans,
    record_loan_return,
)

router = APIRouter()


@router.post("", response_model=LoanResponse, status_code=status.HTTP_201_CREATED)
def create_loan(
    data: LoanCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """
    Give a loan. For an inter-project loan the lender's (payable) row is
    returned; the borrower's receivable row is created alongside it.
    """
    try:
        if data.loan_type == LoanType.inter_project:
            loan = create_inter_project_loan(
                db,
                project_id=data.project_id,
                linked_project_id=data.linked_project_id,
                amount_given=data.amount_given,
                date_given=data.date_given,
                acting_user=acting_user,
                description=data.description,
            )
        else:
            loan = create_external_loan(
                db,
                project_id=data.project_id,
                borrower_name=data.borrower_name,
                amount_given=data.amount_given,
                date_given=data.date_given,
                acting_user=acting_user,
                amount_returned=data.amount_returned,
                date_returned=data.date_returned,
                description=data.description,
            )
        return LoanResponse.model_validate(loan)
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error creating loan")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create loan",
        )


@router.get("", response_model=LoanListResponse)
def list_loans(
    project_id: Optional[str] = Query(None),
    direction: Optional[LoanDirection] = Query(None, description="Implies inter-project loans only"),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        loans = get_all_loans(db, project_id=project_id, direction=direction)
        return LoanListResponse(
            total=len(loans),
            loans=[LoanResponse.model_validate(loan) for loan in loans],
        )
    except Exception:
        logger.exception("Error fetching loans")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch loans",
        )


@router.patch("/{loan_id}/return", response_model=LoanResponse)
def return_loan(
    loan_id: str,
    data: LoanReturn,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Record the cumulative amount returned. Inter-project pairs are updated together."""
    try:
        loan = record_loan_return(
            db,
            loan_id,
            acting_user,
            amount_returned=data.amount_returned,
            date_returned=data.date_returned,
        )
        return LoanResponse.model_validate(loan)
    except LedgerError:
        raise
    except Exception:
        logger.exception(f"Error recording return on loan {loan_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record loan return",
        )
