from datetime import date as date_type
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from buildbooks.core.exceptions import NotFoundError, ValidationError
from buildbooks.core.identity import ActingUser, ensure_owner
from buildbooks.logger_config import logger
from buildbooks.models.income import Income
from buildbooks.models.project import Project
from buildbooks.utils.payment_validation import validate_payment_channel
from buildbooks.utils.transactions import unit_of_work


def create_income(
    db: Session,
    project_id: str,
    amount: Decimal,
    date: date_type,
    mode,
    acting_user: ActingUser,
    cash_location=None,
    bank_name: Optional[str] = None,
    account_number: Optional[str] = None,
    description: Optional[str] = None,
) -> Income:
    """Record money received into a project's bank account or cash locker."""
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    mode, cash_location, bank_name, account_number = validate_payment_channel(
        mode, cash_location, bank_name, account_number
    )
    if not db.query(Project).filter(Project.id == project_id).first():
        raise NotFoundError("Project", project_id)

    with unit_of_work(db, "Failed to create income"):
        income = Income(
            project_id=project_id,
            amount=amount,
            date=date,
            description=description,
            mode=mode,
            bank_name=bank_name,
            account_number=account_number,
            cash_location=cash_location,
            entered_by_id=acting_user.id,
        )
        db.add(income)

    db.refresh(income)
    logger.info(f"Income {income.id} created - Project: {project_id}, Amount: {amount}, Mode: {mode.value}")
    return income


def get_income_by_id(db: Session, income_id: str) -> Optional[Income]:
    return db.query(Income).filter(Income.id == income_id).first()


def get_all_income(db: Session, project_id: Optional[str] = None) -> List[Income]:
    query = db.query(Income)
    if project_id:
        query = query.filter(Income.project_id == project_id)
    return query.order_by(Income.date.desc(), Income.created_at.desc()).all()


def update_income(
    db: Session,
    income_id: str,
    acting_user: ActingUser,
    amount: Optional[Decimal] = None,
    date: Optional[date_type] = None,
    description: Optional[str] = None,
    mode=None,
    cash_location=None,
    bank_name: Optional[str] = None,
    account_number: Optional[str] = None,
) -> Income:
    """Owner edit. Changing the mode re-validates the whole payment channel."""
    ensure_owner(acting_user, "edit income")

    income = get_income_by_id(db, income_id)
    if not income:
        raise NotFoundError("Income", income_id)
    if amount is not None and amount <= 0:
        raise ValidationError("Amount must be greater than 0")

    channel_changed = any(v is not None for v in (mode, cash_location, bank_name, account_number))
    if channel_changed:
        channel = validate_payment_channel(
            mode if mode is not None else income.mode,
            cash_location if cash_location is not None else income.cash_location,
            bank_name if bank_name is not None else income.bank_name,
            account_number if account_number is not None else income.account_number,
        )

    with unit_of_work(db, "Failed to update income"):
        if amount is not None:
            income.amount = amount
        if date is not None:
            income.date = date
        if description is not None:
            income.description = description
        if channel_changed:
            income.mode, income.cash_location, income.bank_name, income.account_number = channel

    db.refresh(income)
    logger.info(f"Income {income.id} updated by {acting_user.id}")
    return income
