from datetime import date as date_type
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from buildbooks.core.exceptions import NotFoundError, ValidationError
from buildbooks.core.identity import ActingUser, ensure_owner
from buildbooks.logger_config import logger
from buildbooks.models.common import funding_source_for
from buildbooks.models.contractor import Contractor
from buildbooks.models.expense import (
    Expense,
    ExpenseType,
    LaborType,
    PaidBy,
    VendorPaymentStatus,
)
from buildbooks.models.project import Project
from buildbooks.models.vendor import PaymentSourceType, VendorPayment
from buildbooks.services.vendor_service import (
    ById,
    find_vendor,
    resolve_vendor,
    vendor_ref_for_expense,
)
from buildbooks.utils.payment_validation import validate_payment_channel
from buildbooks.utils.transactions import unit_of_work

ZERO = Decimal("0.00")


def seeded_paid_amount(amount: Decimal, status, requested_paid: Optional[Decimal]) -> Decimal:
    """Paid amount a material expense starts with: full pays the face amount, partial is clamped to [0, amount]."""
    status = VendorPaymentStatus(status or VendorPaymentStatus.pending)
    if status == VendorPaymentStatus.full:
        return amount
    if status == VendorPaymentStatus.partial:
        return max(ZERO, min(requested_paid or ZERO, amount))
    return ZERO


def _get_project(db: Session, project_id: str) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project", project_id)
    return project


def _link_vendor(db: Session, expense: Expense, vendor_id: Optional[str], vendor_name: Optional[str]) -> None:
    expense.vendor_id = vendor_id or None
    expense.vendor_name = vendor_name.strip() if vendor_name and vendor_name.strip() else None
    ref = vendor_ref_for_expense(expense)
    if ref is None:
        return
    if isinstance(ref, ById):
        vendor = resolve_vendor(db, ref)
    else:
        vendor = find_vendor(db, ref)
        if not vendor:
            # Unknown name stays a legacy free-text reference
            return
    expense.vendor_id = vendor.id
    expense.vendor_name = vendor.name


def _link_contractor(db: Session, expense: Expense, contractor_id: Optional[str], contractor_name: Optional[str]) -> None:
    if contractor_id:
        contractor = db.query(Contractor).filter(Contractor.id == contractor_id).first()
        if not contractor:
            raise NotFoundError("Contractor", contractor_id)
        expense.contractor_id = contractor.id
        expense.contractor_name = contractor.name
        expense.labor_type = LaborType.contractor
    elif contractor_name and contractor_name.strip():
        expense.contractor_name = contractor_name.strip()


def create_expense(
    db: Session,
    project_id: str,
    type,
    amount: Decimal,
    date: date_type,
    mode,
    acting_user: ActingUser,
    cash_location=None,
    bank_name: Optional[str] = None,
    account_number: Optional[str] = None,
    description: Optional[str] = None,
    paid_by=PaidBy.company,
    vendor_id: Optional[str] = None,
    vendor_name: Optional[str] = None,
    material_name: Optional[str] = None,
    material_quantity: Optional[Decimal] = None,
    material_unit: Optional[str] = None,
    vendor_payment_status=None,
    vendor_paid_amount: Optional[Decimal] = None,
    labor_type=None,
    contractor_id: Optional[str] = None,
    contractor_name: Optional[str] = None,
    team_name: Optional[str] = None,
    labor_name: Optional[str] = None,
    supervisor_name: Optional[str] = None,
    petty_cash_summary: Optional[str] = None,
    week_ending: Optional[date_type] = None,
) -> Expense:
    """
    Create an expense.

    A material expense entered as partially or fully paid seeds that amount
    into the counter of its own funding source. When it is linked to a vendor
    a companion vendor payment is written in the same transaction. No FIFO
    walk runs here.
    """
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than 0")
    try:
        expense_type = ExpenseType(type)
    except ValueError:
        raise ValidationError(f"Invalid expense type: {type}")
    mode, cash_location, bank_name, account_number = validate_payment_channel(
        mode, cash_location, bank_name, account_number
    )
    _get_project(db, project_id)

    with unit_of_work(db, "Failed to create expense"):
        expense = Expense(
            project_id=project_id,
            type=expense_type,
            amount=amount,
            date=date,
            description=description,
            mode=mode,
            paid_by=PaidBy(paid_by or PaidBy.company),
            bank_name=bank_name,
            account_number=account_number,
            cash_location=cash_location,
            entered_by_id=acting_user.id,
        )
        expense.reset_vendor_payment_state()

        if expense_type == ExpenseType.material:
            expense.material_name = material_name
            expense.material_quantity = material_quantity
            expense.material_unit = material_unit
            _link_vendor(db, expense, vendor_id, vendor_name)
        elif expense_type == ExpenseType.labor:
            expense.labor_type = LaborType(labor_type) if labor_type else LaborType.direct
            expense.team_name = team_name
            expense.labor_name = labor_name
            _link_contractor(db, expense, contractor_id, contractor_name)
        elif expense_type == ExpenseType.petty_cash:
            expense.supervisor_name = supervisor_name
            expense.petty_cash_summary = petty_cash_summary
            expense.week_ending = week_ending

        db.add(expense)
        db.flush()

        paid = ZERO
        if expense_type == ExpenseType.material:
            paid = seeded_paid_amount(amount, vendor_payment_status, vendor_paid_amount)
            if paid > 0:
                expense.record_vendor_payment(paid, funding_source_for(mode, cash_location))

        if paid > 0 and expense.vendor_id:
            kind = "Full" if expense.vendor_payment_status == VendorPaymentStatus.full else "Partial"
            db.add(VendorPayment(
                vendor_id=expense.vendor_id,
                project_id=project_id,
                amount=paid,
                applied_amount=paid,
                date=date,
                description=f"{kind} payment for material expense: {description or ''}".strip(),
                mode=mode,
                bank_name=bank_name,
                account_number=account_number,
                cash_location=cash_location,
                source_type=PaymentSourceType.expense,
                source_expense_id=expense.id,
                entered_by_id=acting_user.id,
            ))

    db.refresh(expense)
    logger.info(
        f"Expense {expense.id} created - Project: {project_id}, Type: {expense_type.value}, "
        f"Amount: {amount}, Paid: {expense.paid_amount}"
    )
    return expense


def get_expense_by_id(db: Session, expense_id: str) -> Optional[Expense]:
    return (
        db.query(Expense)
        .options(selectinload(Expense.payment_history))
        .filter(Expense.id == expense_id)
        .first()
    )


def get_all_expenses(
    db: Session,
    project_id: Optional[str] = None,
    type: Optional[ExpenseType] = None,
) -> List[Expense]:
    """Expenses, newest first, optionally filtered by project and type."""
    query = db.query(Expense).options(selectinload(Expense.payment_history))
    if project_id:
        query = query.filter(Expense.project_id == project_id)
    if type:
        query = query.filter(Expense.type == ExpenseType(type))
    return query.order_by(Expense.date.desc(), Expense.created_at.desc()).all()


def update_expense(
    db: Session,
    expense_id: str,
    acting_user: ActingUser,
    amount: Optional[Decimal] = None,
    date: Optional[date_type] = None,
    description: Optional[str] = None,
    paid_by=None,
    material_name: Optional[str] = None,
    material_quantity: Optional[Decimal] = None,
    material_unit: Optional[str] = None,
    team_name: Optional[str] = None,
    labor_name: Optional[str] = None,
    supervisor_name: Optional[str] = None,
    petty_cash_summary: Optional[str] = None,
    week_ending: Optional[date_type] = None,
) -> Expense:
    """
    Owner edit of descriptive fields and the face amount.

    Payment state is left to record_vendor_payment; only the status is
    re-derived when the amount changes.
    """
    ensure_owner(acting_user, "edit expenses")

    expense = get_expense_by_id(db, expense_id)
    if not expense:
        raise NotFoundError("Expense", expense_id)

    with unit_of_work(db, "Failed to update expense"):
        if amount is not None:
            expense.revise_amount(amount)
        if date is not None:
            expense.date = date
        if description is not None:
            expense.description = description
        if paid_by is not None:
            expense.paid_by = PaidBy(paid_by)

        descriptive = {
            ExpenseType.material: {
                "material_name": material_name,
                "material_quantity": material_quantity,
                "material_unit": material_unit,
            },
            ExpenseType.labor: {"team_name": team_name, "labor_name": labor_name},
            ExpenseType.petty_cash: {
                "supervisor_name": supervisor_name,
                "petty_cash_summary": petty_cash_summary,
                "week_ending": week_ending,
            },
        }.get(expense.type, {})
        for field, value in descriptive.items():
            if value is not None:
                setattr(expense, field, value)

    db.refresh(expense)
    logger.info(f"Expense {expense.id} updated by {acting_user.id}")
    return expense
