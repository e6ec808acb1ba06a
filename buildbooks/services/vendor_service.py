from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Union

from sqlalchemy import and_, exists, func, or_
from sqlalchemy.orm import Session, aliased

from buildbooks.core.exceptions import ConflictError, NotFoundError, ValidationError
from buildbooks.core.identity import ActingUser, ensure_owner
from buildbooks.logger_config import logger
from buildbooks.models.expense import Expense, ExpenseType
from buildbooks.models.vendor import PartyStatus, PaymentSourceType, Vendor, VendorPayment
from buildbooks.utils.transactions import unit_of_work

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT)


# ==================== VENDOR REFERENCES ====================

@dataclass(frozen=True)
class ById:
    vendor_id: str


@dataclass(frozen=True)
class ByLegacyName:
    """Free-text vendor name from records entered before vendors were linked by id."""
    name: str
    project_id: Optional[str] = None


VendorRef = Union[ById, ByLegacyName]


def vendor_ref_for_expense(expense: Expense) -> Optional[VendorRef]:
    if expense.vendor_id:
        return ById(expense.vendor_id)
    if expense.vendor_name and expense.vendor_name.strip():
        return ByLegacyName(expense.vendor_name.strip(), expense.project_id)
    return None


def find_vendor(db: Session, ref: VendorRef) -> Optional[Vendor]:
    """Resolve a reference to its canonical vendor row, or None."""
    if isinstance(ref, ById):
        return db.query(Vendor).filter(Vendor.id == ref.vendor_id).first()

    query = db.query(Vendor).filter(func.lower(Vendor.name) == ref.name.strip().lower())
    if ref.project_id:
        # Project-scoped vendor wins over a general one with the same name
        scoped = query.filter(Vendor.project_id == ref.project_id).first()
        if scoped:
            return scoped
    return query.filter(Vendor.project_id.is_(None)).first()


def resolve_vendor(db: Session, ref: VendorRef) -> Vendor:
    vendor = find_vendor(db, ref)
    if not vendor:
        key = ref.vendor_id if isinstance(ref, ById) else ref.name
        raise NotFoundError("Vendor", key)
    return vendor


def vendor_expense_filter(vendor: Vendor):
    """Material expenses belonging to a vendor: linked by id, or unlinked with a matching name."""
    legacy = and_(
        Expense.vendor_id.is_(None),
        func.lower(Expense.vendor_name) == vendor.name.lower(),
    )
    if vendor.project_id:
        legacy = and_(legacy, Expense.project_id == vendor.project_id)
    else:
        # A project-scoped vendor with the same name owns that project's legacy rows
        scoped = aliased(Vendor)
        legacy = and_(legacy, ~exists().where(and_(
            scoped.project_id == Expense.project_id,
            func.lower(scoped.name) == vendor.name.lower(),
        )))
    return and_(
        Expense.type == ExpenseType.material,
        or_(Expense.vendor_id == vendor.id, legacy),
    )


def get_vendor_expenses(
    db: Session,
    vendor: Vendor,
    project_id: Optional[str] = None,
    oldest_first: bool = True,
) -> List[Expense]:
    query = db.query(Expense).filter(vendor_expense_filter(vendor))
    if project_id:
        query = query.filter(Expense.project_id == project_id)
    if oldest_first:
        return query.order_by(Expense.date.asc(), Expense.created_at.asc(), Expense.id.asc()).all()
    return query.order_by(Expense.date.desc(), Expense.created_at.desc()).all()


# ==================== QUERY OPERATIONS ====================

def get_vendor_by_id(db: Session, vendor_id: str) -> Optional[Vendor]:
    """Get vendor by ID."""
    return db.query(Vendor).filter(Vendor.id == vendor_id).first()


def get_vendor_balance(db: Session, vendor: Vendor) -> Dict[str, Decimal]:
    """
    Purchased vs paid for one vendor.

    Paid = amounts already attributed to material expenses plus any manual
    payment remainder that found no outstanding expense (vendor credit).
    """
    purchased, paid_on_expenses = db.query(
        func.coalesce(func.sum(Expense.amount), 0),
        func.coalesce(func.sum(Expense.vendor_paid_amount), 0),
    ).filter(vendor_expense_filter(vendor)).one()

    credit = db.query(
        func.coalesce(func.sum(VendorPayment.amount - VendorPayment.applied_amount), 0)
    ).filter(
        VendorPayment.vendor_id == vendor.id,
        VendorPayment.source_type == PaymentSourceType.manual,
    ).scalar()

    total_purchased = _money(purchased)
    credit = _money(credit)
    total_paid = _money(paid_on_expenses) + credit
    return {
        "total_purchased": total_purchased,
        "total_paid": total_paid,
        "credit": credit,
        "balance": total_purchased - total_paid,
    }


def get_all_vendors(
    db: Session,
    project_id: Optional[str] = None,
    include_general: bool = False,
) -> List[Vendor]:
    """Vendors ordered by name; optionally one project's vendors plus general ones."""
    query = db.query(Vendor)
    if project_id:
        if include_general:
            query = query.filter(or_(Vendor.project_id == project_id, Vendor.project_id.is_(None)))
        else:
            query = query.filter(Vendor.project_id == project_id)
    return query.order_by(Vendor.name.asc()).all()


def _name_taken(db: Session, name: str, project_id: Optional[str], exclude_id: Optional[str] = None) -> bool:
    query = db.query(Vendor).filter(func.lower(Vendor.name) == name.lower())
    if project_id:
        query = query.filter(Vendor.project_id == project_id)
    else:
        query = query.filter(Vendor.project_id.is_(None))
    if exclude_id:
        query = query.filter(Vendor.id != exclude_id)
    return db.query(query.exists()).scalar()


# ==================== WRITE OPERATIONS ====================

def add_project_vendors(db: Session, project_id: str, names: List[str]) -> List[Vendor]:
    """Create missing project-scoped vendors by name. Caller commits."""
    created = []
    for name in names:
        if not _name_taken(db, name, project_id):
            vendor = Vendor(project_id=project_id, name=name, status=PartyStatus.active)
            db.add(vendor)
            created.append(vendor)
    db.flush()
    return created


def create_vendor(
    db: Session,
    name: str,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    project_id: Optional[str] = None,
) -> Vendor:
    """Create a vendor; names are unique per project scope, case-insensitively."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Vendor name is required")

    with unit_of_work(db, "Failed to create vendor"):
        if _name_taken(db, name, project_id):
            raise ConflictError("A vendor with this name already exists for this project")
        vendor = Vendor(
            project_id=project_id,
            name=name,
            phone=phone.strip() if phone else None,
            address=address,
            status=PartyStatus.active,
        )
        db.add(vendor)

    db.refresh(vendor)
    logger.info(f"Vendor {vendor.id} ({vendor.name}) created")
    return vendor


def update_vendor(
    db: Session,
    vendor_id: str,
    name: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    status: Optional[PartyStatus] = None,
) -> Vendor:
    vendor = get_vendor_by_id(db, vendor_id)
    if not vendor:
        raise NotFoundError("Vendor", vendor_id)

    with unit_of_work(db, "Failed to update vendor"):
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Vendor name cannot be empty")
            if _name_taken(db, name, vendor.project_id, exclude_id=vendor.id):
                raise ConflictError("A vendor with this name already exists for this project")
            vendor.name = name
        if phone is not None:
            vendor.phone = phone
        if address is not None:
            vendor.address = address
        if status is not None:
            vendor.status = status

    db.refresh(vendor)
    return vendor


def delete_vendor(db: Session, vendor_id: str, acting_user: ActingUser) -> None:
    """Delete a vendor that has no material expenses and no payments."""
    ensure_owner(acting_user, "delete vendors")

    vendor = get_vendor_by_id(db, vendor_id)
    if not vendor:
        raise NotFoundError("Vendor", vendor_id)

    expense_count = db.query(func.count(Expense.id)).filter(vendor_expense_filter(vendor)).scalar()
    payment_count = (
        db.query(func.count(VendorPayment.id))
        .filter(VendorPayment.vendor_id == vendor_id)
        .scalar()
    )
    if expense_count > 0 or payment_count > 0:
        raise ConflictError(
            "Cannot delete vendor with existing transactions",
            details={"expenses": expense_count, "payments": payment_count},
        )

    with unit_of_work(db, "Failed to delete vendor"):
        db.delete(vendor)
    logger.info(f"Vendor {vendor_id} deleted by {acting_user.id}")
