"""
Financial Summary Service
Owner-facing totals for one project or for all projects

Expense totals use effective amounts (money actually spent): a material
expense counts only what has been paid to its vendor. The by-mode breakdown
is the declared face value. Cash position is recomputed from the records on
every call.
"""

from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from buildbooks.core.exceptions import NotFoundError
from buildbooks.core.identity import ActingUser, ensure_owner
from buildbooks.logger_config import logger
from buildbooks.models.common import PaymentMode
from buildbooks.models.expense import Expense, ExpenseType
from buildbooks.models.income import Income
from buildbooks.models.loan import Loan, LoanStatus
from buildbooks.models.project import Project
from buildbooks.services.cash_position import (
    calculate_cash_position,
    effective_amount,
    total_for_mode,
)

ZERO = Decimal("0.00")


def _income_totals(incomes) -> Dict[str, Any]:
    return {
        "total": sum((i.amount for i in incomes), ZERO),
        "bank": total_for_mode(incomes, PaymentMode.bank),
        "cash": total_for_mode(incomes, PaymentMode.cash),
        "transactions": len(incomes),
    }


def _expense_totals(expenses) -> Dict[str, Any]:
    def effective_for(expense_type):
        return sum((effective_amount(e) for e in expenses if e.type == expense_type), ZERO)

    return {
        "total": sum((effective_amount(e) for e in expenses), ZERO),
        "by_type": {
            "material": effective_for(ExpenseType.material),
            "labor": effective_for(ExpenseType.labor),
            "overhead": effective_for(ExpenseType.factory_overhead),
            "petty_cash": effective_for(ExpenseType.petty_cash),
        },
        "by_mode": {
            "bank": total_for_mode(expenses, PaymentMode.bank),
            "cash": total_for_mode(expenses, PaymentMode.cash),
        },
        "transactions": len(expenses),
    }


def _material_summary(expenses) -> Dict[str, Dict[str, Any]]:
    """Quantity and face cost per material name, in first-seen order."""
    summary = OrderedDict()
    for expense in expenses:
        if expense.type != ExpenseType.material:
            continue
        if not expense.material_name and expense.material_quantity is None:
            continue
        name = expense.material_name or ""
        entry = summary.setdefault(
            name, {"quantity": Decimal("0"), "total_cost": ZERO, "unit": expense.material_unit or ""}
        )
        entry["quantity"] += expense.material_quantity or Decimal("0")
        entry["total_cost"] += expense.amount
    return summary


def _loan_totals(loans) -> Dict[str, Any]:
    given = sum((loan.amount_given for loan in loans), ZERO)
    returned = sum((loan.amount_returned or ZERO for loan in loans), ZERO)
    return {
        "total_given": given,
        "total_returned": returned,
        "outstanding": given - returned,
        "active_count": sum(1 for loan in loans if loan.status == LoanStatus.active),
    }


def get_summary(db: Session, acting_user: ActingUser, project_id: Optional[str] = None) -> Dict[str, Any]:
    ensure_owner(acting_user, "view summary")

    project = None
    if project_id:
        project = db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise NotFoundError("Project", project_id)

    def scoped(model):
        query = db.query(model)
        if project_id:
            query = query.filter(model.project_id == project_id)
        return query.all()

    incomes = scoped(Income)
    expenses = scoped(Expense)
    loans = scoped(Loan)

    income = _income_totals(incomes)
    expense = _expense_totals(expenses)
    position = calculate_cash_position(incomes, expenses)

    logger.info(
        f"Summary computed for {project_id or 'all projects'} - "
        f"{len(incomes)} income, {len(expenses)} expenses, {len(loans)} loans"
    )

    return {
        "project": {"id": project.id, "name": project.name, "type": project.type} if project else None,
        "income": income,
        "expenses": expense,
        "material_summary": _material_summary(expenses),
        "cash_position": position.as_dict(),
        "loans": _loan_totals(loans),
        "profit": income["total"] - expense["total"],
    }
