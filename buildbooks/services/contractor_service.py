from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from buildbooks.core.exceptions import ConflictError, NotFoundError, ValidationError
from buildbooks.core.identity import ActingUser, ensure_owner
from buildbooks.logger_config import logger
from buildbooks.models.contractor import Contractor
from buildbooks.models.expense import Expense, ExpenseType, LaborType
from buildbooks.models.vendor import PartyStatus
from buildbooks.utils.transactions import unit_of_work

CENT = Decimal("0.01")


def contractor_expense_filter(contractor: Contractor):
    """Contractor labor expenses: linked by id, or unlinked with a matching name."""
    legacy = and_(
        Expense.contractor_id.is_(None),
        func.lower(Expense.contractor_name) == contractor.name.lower(),
    )
    if contractor.project_id:
        legacy = and_(legacy, Expense.project_id == contractor.project_id)
    return and_(
        Expense.type == ExpenseType.labor,
        Expense.labor_type == LaborType.contractor,
        or_(Expense.contractor_id == contractor.id, legacy),
    )


def get_contractor_by_id(db: Session, contractor_id: str) -> Optional[Contractor]:
    """Get contractor by ID."""
    return db.query(Contractor).filter(Contractor.id == contractor_id).first()


def get_contractor_expenses(db: Session, contractor: Contractor) -> List[Expense]:
    return (
        db.query(Expense)
        .filter(contractor_expense_filter(contractor))
        .order_by(Expense.date.desc(), Expense.created_at.desc())
        .all()
    )


def get_contractor_balance(db: Session, contractor: Contractor) -> Dict[str, Decimal]:
    paid = (
        db.query(func.coalesce(func.sum(Expense.amount), 0))
        .filter(contractor_expense_filter(contractor))
        .scalar()
    )
    total_paid = Decimal(str(paid)).quantize(CENT)
    agreed = contractor.agreed_amount or Decimal("0.00")
    return {"total_paid": total_paid, "balance": agreed - total_paid}


def get_all_contractors(
    db: Session,
    project_id: Optional[str] = None,
    include_general: bool = False,
) -> List[Contractor]:
    query = db.query(Contractor)
    if project_id:
        if include_general:
            query = query.filter(or_(Contractor.project_id == project_id, Contractor.project_id.is_(None)))
        else:
            query = query.filter(Contractor.project_id == project_id)
    return query.order_by(Contractor.created_at.desc(), Contractor.name.asc()).all()


def _name_taken(db: Session, name: str, project_id: Optional[str], exclude_id: Optional[str] = None) -> bool:
    query = db.query(Contractor).filter(func.lower(Contractor.name) == name.lower())
    if project_id:
        query = query.filter(Contractor.project_id == project_id)
    else:
        query = query.filter(Contractor.project_id.is_(None))
    if exclude_id:
        query = query.filter(Contractor.id != exclude_id)
    return db.query(query.exists()).scalar()


def add_project_contractors(db: Session, project_id: str, names: List[str]) -> List[Contractor]:
    """Create missing project-scoped contractors by name. Caller commits."""
    created = []
    for name in names:
        if not _name_taken(db, name, project_id):
            contractor = Contractor(project_id=project_id, name=name, status=PartyStatus.active)
            db.add(contractor)
            created.append(contractor)
    db.flush()
    return created


def create_contractor(
    db: Session,
    name: str,
    phone: str,
    agreed_amount: Optional[Decimal] = None,
    project_id: Optional[str] = None,
) -> Contractor:
    """Create a contractor; names are unique per project scope, case-insensitively."""
    name = (name or "").strip()
    phone = (phone or "").strip()
    if not name or not phone:
        raise ValidationError("Contractor name and phone are required")
    if agreed_amount is not None and agreed_amount < 0:
        raise ValidationError("Agreed amount cannot be negative")

    with unit_of_work(db, "Failed to create contractor"):
        if _name_taken(db, name, project_id):
            raise ConflictError("A contractor with this name already exists for this project")
        contractor = Contractor(
            project_id=project_id,
            name=name,
            phone=phone,
            agreed_amount=agreed_amount or Decimal("0.00"),
            status=PartyStatus.active,
        )
        db.add(contractor)

    db.refresh(contractor)
    logger.info(f"Contractor {contractor.id} ({contractor.name}) created")
    return contractor


def update_contractor(
    db: Session,
    contractor_id: str,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    agreed_amount: Optional[Decimal] = None,
    status: Optional[PartyStatus] = None,
) -> Contractor:
    contractor = get_contractor_by_id(db, contractor_id)
    if not contractor:
        raise NotFoundError("Contractor", contractor_id)
    if agreed_amount is not None and agreed_amount < 0:
        raise ValidationError("Agreed amount cannot be negative")

    with unit_of_work(db, "Failed to update contractor"):
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Contractor name cannot be empty")
            if _name_taken(db, name, contractor.project_id, exclude_id=contractor.id):
                raise ConflictError("A contractor with this name already exists for this project")
            contractor.name = name
        if phone is not None:
            contractor.phone = phone
        if agreed_amount is not None:
            contractor.agreed_amount = agreed_amount
        if status is not None:
            contractor.status = status

    db.refresh(contractor)
    return contractor


def delete_contractor(db: Session, contractor_id: str, acting_user: ActingUser) -> None:
    """Delete a contractor that has no labor expenses."""
    ensure_owner(acting_user, "delete contractors")

    contractor = get_contractor_by_id(db, contractor_id)
    if not contractor:
        raise NotFoundError("Contractor", contractor_id)

    expense_count = (
        db.query(func.count(Expense.id))
        .filter(contractor_expense_filter(contractor))
        .scalar()
    )
    if expense_count > 0:
        raise ConflictError(
            "Cannot delete contractor with existing labor expenses",
            details={"expenses": expense_count},
        )

    with unit_of_work(db, "Failed to delete contractor"):
        db.delete(contractor)
    logger.info(f"Contractor {contractor_id} deleted by {acting_user.id}")
