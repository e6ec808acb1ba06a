"""
Loan Service
Loans given out of a project, to an outside borrower or to another project

Inter-project loans are written as a linked pair in one transaction:
- payable row on the lending project
- receivable row on the borrowing project
Every return is applied to both rows together or not at all.
"""

from datetime import date as date_type
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from buildbooks.core.exceptions import NotFoundError, TransactionFailure, ValidationError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.models.loan import Loan, LoanDirection, LoanType, derive_loan_status
from buildbooks.models.project import Project
from buildbooks.utils.transactions import unit_of_work

ZERO = Decimal("0.00")


def _ensure_project(db: Session, project_id: str) -> None:
    if not db.query(Project).filter(Project.id == project_id).first():
        raise NotFoundError("Project", project_id)


def _validate_returned(amount_returned: Decimal, amount_given: Decimal) -> None:
    if amount_returned < 0:
        raise ValidationError("Amount returned cannot be negative")
    if amount_returned > amount_given:
        raise ValidationError(f"Amount returned {amount_returned} exceeds amount given {amount_given}")


def create_external_loan(
    db: Session,
    project_id: str,
    borrower_name: str,
    amount_given: Decimal,
    date_given: date_type,
    acting_user: ActingUser,
    amount_returned: Optional[Decimal] = None,
    date_returned: Optional[date_type] = None,
    description: Optional[str] = None,
) -> Loan:
    if amount_given is None or amount_given <= 0:
        raise ValidationError("Amount given must be greater than 0")
    if not borrower_name or not borrower_name.strip():
        raise ValidationError("Borrower name is required for an external loan")
    amount_returned = amount_returned or ZERO
    _validate_returned(amount_returned, amount_given)
    _ensure_project(db, project_id)

    with unit_of_work(db, "Failed to create loan"):
        loan = Loan(
            project_id=project_id,
            borrower_name=borrower_name.strip(),
            amount_given=amount_given,
            date_given=date_given,
            amount_returned=amount_returned,
            date_returned=date_returned,
            description=description,
            status=derive_loan_status(amount_returned, amount_given),
            loan_type=LoanType.external,
            entered_by_id=acting_user.id,
        )
        db.add(loan)

    db.refresh(loan)
    logger.info(f"Loan {loan.id} created - Project: {project_id}, Borrower: {loan.borrower_name}, Amount: {amount_given}")
    return loan


def create_inter_project_loan(
    db: Session,
    project_id: str,
    linked_project_id: str,
    amount_given: Decimal,
    date_given: date_type,
    acting_user: ActingUser,
    description: Optional[str] = None,
) -> Loan:
    """Create the payable/receivable pair and return the lender's (payable) row."""
    if amount_given is None or amount_given <= 0:
        raise ValidationError("Amount given must be greater than 0")
    if not linked_project_id:
        raise ValidationError("Borrowing project is required for an inter-project loan")
    if linked_project_id == project_id:
        raise ValidationError("A project cannot lend to itself")
    _ensure_project(db, project_id)
    _ensure_project(db, linked_project_id)

    with unit_of_work(db, "Failed to create inter-project loan"):
        payable = Loan(
            project_id=project_id,
            amount_given=amount_given,
            date_given=date_given,
            amount_returned=ZERO,
            description=description,
            status=derive_loan_status(ZERO, amount_given),
            loan_type=LoanType.inter_project,
            direction=LoanDirection.payable,
            linked_project_id=linked_project_id,
            entered_by_id=acting_user.id,
        )
        db.add(payable)
        db.flush()

        receivable = Loan(
            project_id=linked_project_id,
            amount_given=amount_given,
            date_given=date_given,
            amount_returned=ZERO,
            description=description,
            status=derive_loan_status(ZERO, amount_given),
            loan_type=LoanType.inter_project,
            direction=LoanDirection.receivable,
            linked_project_id=project_id,
            linked_loan_id=payable.id,
            entered_by_id=acting_user.id,
        )
        db.add(receivable)
        db.flush()

        payable.linked_loan_id = receivable.id

    db.refresh(payable)
    logger.info(
        f"Inter-project loan {payable.id}/{receivable.id} created - "
        f"{project_id} -> {linked_project_id}, Amount: {amount_given}"
    )
    return payable


def get_loan_by_id(db: Session, loan_id: str) -> Optional[Loan]:
    return db.query(Loan).filter(Loan.id == loan_id).first()


def get_all_loans(
    db: Session,
    project_id: Optional[str] = None,
    direction: Optional[LoanDirection] = None,
) -> List[Loan]:
    """Loans, newest first. A direction filter implies inter-project loans only."""
    query = db.query(Loan)
    if project_id:
        query = query.filter(Loan.project_id == project_id)
    if direction:
        query = query.filter(
            Loan.direction == LoanDirection(direction),
            Loan.loan_type == LoanType.inter_project,
        )
    return query.order_by(Loan.date_given.desc(), Loan.created_at.desc()).all()


def record_loan_return(
    db: Session,
    loan_id: str,
    acting_user: ActingUser,
    amount_returned: Optional[Decimal] = None,
    date_returned: Optional[date_type] = None,
) -> Loan:
    """
    Set the cumulative amount returned on a loan.

    For an inter-project loan the linked row receives the same amount, date
    and status in the same transaction.
    """
    loan = get_loan_by_id(db, loan_id)
    if not loan:
        raise NotFoundError("Loan", loan_id)

    new_amount = amount_returned if amount_returned is not None else loan.amount_returned
    _validate_returned(new_amount, loan.amount_given)
    new_date = date_returned or loan.date_returned

    with unit_of_work(db, "Failed to record loan return"):
        status = loan.apply_return(new_amount, new_date)

        if loan.loan_type == LoanType.inter_project and loan.linked_loan_id:
            linked = get_loan_by_id(db, loan.linked_loan_id)
            if not linked:
                raise TransactionFailure(
                    f"Linked loan {loan.linked_loan_id} of {loan.id} is missing",
                    details={"loan_id": loan.id, "linked_loan_id": loan.linked_loan_id},
                )
            linked.amount_returned = new_amount
            linked.date_returned = new_date
            linked.status = status

    db.refresh(loan)
    logger.info(
        f"Loan {loan.id} return recorded by {acting_user.id} - Returned: {new_amount}, "
        f"Status: {loan.status.value}"
        + (f", mirrored to {loan.linked_loan_id}" if loan.linked_loan_id else "")
    )
    return loan
