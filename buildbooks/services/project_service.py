from datetime import date as date_type
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from buildbooks.core.exceptions import ConflictError, NotFoundError, ValidationError
from buildbooks.core.identity import ActingUser, ensure_owner
from buildbooks.logger_config import logger
from buildbooks.models.contractor import Contractor
from buildbooks.models.expense import Expense
from buildbooks.models.income import Income
from buildbooks.models.loan import Loan
from buildbooks.models.project import Project, ProjectStatus, ProjectType
from buildbooks.models.vendor import Vendor, VendorPayment
from buildbooks.services.contractor_service import add_project_contractors
from buildbooks.services.vendor_service import add_project_vendors
from buildbooks.utils.transactions import unit_of_work


UPDATABLE_FIELDS = {
    "name", "type", "customer_name",
    "investor_customer_percentage", "investor_company_percentage",
    "agreement_total_amount", "agreement_start_date", "agreement_end_date", "agreement_description",
    "supervisor", "status",
}


def normalize_name_list(names: Optional[Iterable]) -> List[str]:
    """Trim, drop blanks and de-duplicate (case-insensitively), keeping first-seen order."""
    seen = set()
    result = []
    for name in names or []:
        name = str(name if name is not None else "").strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            result.append(name)
    return result


def _validate_project_fields(
    agreement_total_amount: Optional[Decimal],
    agreement_start_date: Optional[date_type],
    agreement_end_date: Optional[date_type],
    investor_customer_percentage: Optional[Decimal],
    investor_company_percentage: Optional[Decimal],
) -> None:
    if agreement_total_amount is not None and agreement_total_amount < 0:
        raise ValidationError("Agreement amount cannot be negative")
    if agreement_start_date and agreement_end_date and agreement_end_date < agreement_start_date:
        raise ValidationError("Agreement end date cannot be before its start date")
    for pct in (investor_customer_percentage, investor_company_percentage):
        if pct is not None and not (0 <= pct <= 100):
            raise ValidationError("Investor percentages must be between 0 and 100")


def get_project_by_id(db: Session, project_id: str) -> Optional[Project]:
    return (
        db.query(Project)
        .options(selectinload(Project.vendors), selectinload(Project.contractors))
        .filter(Project.id == project_id)
        .first()
    )


def get_all_projects(db: Session, status: Optional[ProjectStatus] = None) -> List[Project]:
    query = db.query(Project).options(selectinload(Project.vendors), selectinload(Project.contractors))
    if status:
        query = query.filter(Project.status == ProjectStatus(status))
    return query.order_by(Project.created_at.desc(), Project.name.asc()).all()


def create_project(
    db: Session,
    acting_user: ActingUser,
    name: str,
    type,
    agreement_total_amount: Decimal,
    agreement_start_date: date_type,
    agreement_end_date: date_type,
    customer_name: Optional[str] = None,
    investor_customer_percentage: Optional[Decimal] = None,
    investor_company_percentage: Optional[Decimal] = None,
    agreement_description: Optional[str] = None,
    supervisor: Optional[str] = None,
    status=ProjectStatus.active,
    vendors: Optional[List[str]] = None,
    contractors: Optional[List[str]] = None,
) -> Project:
    """Create a project along with its named project-scoped vendors and contractors."""
    ensure_owner(acting_user, "create projects")

    name = (name or "").strip()
    if not name:
        raise ValidationError("Project name is required")
    _validate_project_fields(
        agreement_total_amount, agreement_start_date, agreement_end_date,
        investor_customer_percentage, investor_company_percentage,
    )

    with unit_of_work(db, "Failed to create project"):
        project = Project(
            name=name,
            type=ProjectType(type),
            customer_name=customer_name,
            investor_customer_percentage=investor_customer_percentage,
            investor_company_percentage=investor_company_percentage,
            agreement_total_amount=agreement_total_amount,
            agreement_start_date=agreement_start_date,
            agreement_end_date=agreement_end_date,
            agreement_description=agreement_description,
            supervisor=supervisor,
            status=ProjectStatus(status or ProjectStatus.active),
        )
        db.add(project)
        db.flush()
        add_project_vendors(db, project.id, normalize_name_list(vendors))
        add_project_contractors(db, project.id, normalize_name_list(contractors))

    db.expire(project)
    logger.info(f"Project {project.id} ({name}) created by {acting_user.id}")
    return get_project_by_id(db, project.id)


def update_project(
    db: Session,
    project_id: str,
    acting_user: ActingUser,
    vendors: Optional[List[str]] = None,
    contractors: Optional[List[str]] = None,
    **fields,
) -> Project:
    """
    Owner update. Only the keyword fields passed (not None) are written.

    Names in `vendors` / `contractors` that have no project-scoped row yet are
    created; existing rows are never removed here.
    """
    ensure_owner(acting_user, "update projects")

    project = get_project_by_id(db, project_id)
    if not project:
        raise NotFoundError("Project", project_id)

    changes = {k: v for k, v in fields.items() if v is not None}
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown project fields: {', '.join(sorted(unknown))}")
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        if not changes["name"]:
            raise ValidationError("Project name cannot be empty")
    if "type" in changes:
        changes["type"] = ProjectType(changes["type"])
    if "status" in changes:
        changes["status"] = ProjectStatus(changes["status"])

    _validate_project_fields(
        changes.get("agreement_total_amount"),
        changes.get("agreement_start_date", project.agreement_start_date),
        changes.get("agreement_end_date", project.agreement_end_date),
        changes.get("investor_customer_percentage"),
        changes.get("investor_company_percentage"),
    )

    with unit_of_work(db, "Failed to update project"):
        for field, value in changes.items():
            setattr(project, field, value)
        add_project_vendors(db, project.id, normalize_name_list(vendors))
        add_project_contractors(db, project.id, normalize_name_list(contractors))

    db.expire(project)
    logger.info(f"Project {project.id} updated by {acting_user.id}")
    return get_project_by_id(db, project.id)


def project_reference_counts(db: Session, project_id: str) -> Dict[str, int]:
    def count(column):
        return db.query(func.count()).filter(column == project_id).scalar()

    return {
        "income": count(Income.project_id),
        "expenses": count(Expense.project_id),
        "loans": count(Loan.project_id) + count(Loan.linked_project_id),
        "vendor_payments": count(VendorPayment.project_id),
        "vendors": count(Vendor.project_id),
        "contractors": count(Contractor.project_id),
    }


def delete_project(db: Session, project_id: str, acting_user: ActingUser) -> None:
    """Delete a project that nothing references."""
    ensure_owner(acting_user, "delete projects")

    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise NotFoundError("Project", project_id)

    references = {k: v for k, v in project_reference_counts(db, project_id).items() if v}
    if references:
        raise ConflictError("Cannot delete project with existing records", details=references)

    with unit_of_work(db, "Failed to delete project"):
        db.delete(project)
    logger.info(f"Project {project_id} deleted by {acting_user.id}")
