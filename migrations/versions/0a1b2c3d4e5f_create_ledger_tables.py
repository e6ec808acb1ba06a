"""create ledger tables

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = "0a1b2c3d4e5f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Shared by several tables, so created once up front
ENUMS = {
    "userrole": ("owner", "accountant"),
    "projecttype": ("customer", "company", "investor"),
    "projectstatus": ("active", "completed", "on_hold"),
    "partystatus": ("active", "inactive"),
    "paymentmode": ("bank", "cash"),
    "cashlocation": ("locker1", "locker2"),
    "paymentsourcetype": ("manual", "expense"),
    "expensetype": ("material", "labor", "factory_overhead", "petty_cash"),
    "paidby": ("customer", "company"),
    "labortype": ("direct", "contractor"),
    "vendorpaymentstatus": ("pending", "partial", "full"),
    "loanstatus": ("active", "partial", "returned"),
    "loantype": ("external", "inter_project"),
    "loandirection": ("payable", "receivable"),
}


def enum(name: str):
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def money(name: str, nullable: bool = False, default: bool = False):
    return sa.Column(
        name,
        sa.Numeric(precision=15, scale=2),
        nullable=nullable,
        server_default=sa.text("0") if default else None,
    )


def timestamps(updated: bool = True):
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True)]
    if updated:
        columns.append(sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True))
    return columns


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", enum("userrole"), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("type", enum("projecttype"), nullable=False),
        sa.Column("customer_name", sa.String(length=200), nullable=True),
        sa.Column("investor_customer_percentage", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("investor_company_percentage", sa.Numeric(precision=5, scale=2), nullable=True),
        money("agreement_total_amount"),
        sa.Column("agreement_start_date", sa.Date(), nullable=False),
        sa.Column("agreement_end_date", sa.Date(), nullable=False),
        sa.Column("agreement_description", sa.Text(), nullable=True),
        sa.Column("supervisor", sa.String(length=200), nullable=True),
        sa.Column("status", enum("projectstatus"), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "vendors",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=20), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("status", enum("partystatus"), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendors_project_id"), "vendors", ["project_id"])

    op.create_table(
        "contractors",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=20), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        money("agreed_amount", default=True),
        sa.Column("status", enum("partystatus"), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contractors_project_id"), "contractors", ["project_id"])

    op.create_table(
        "income",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=20), nullable=False),
        money("amount"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("mode", enum("paymentmode"), nullable=False),
        sa.Column("bank_name", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.String(length=50), nullable=True),
        sa.Column("cash_location", enum("cashlocation"), nullable=True),
        sa.Column("entered_by_id", sa.String(length=20), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["entered_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_income_project_id"), "income", ["project_id"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=20), nullable=False),
        sa.Column("type", enum("expensetype"), nullable=False),
        money("amount"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("mode", enum("paymentmode"), nullable=False),
        sa.Column("paid_by", enum("paidby"), nullable=False),
        sa.Column("bank_name", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.String(length=50), nullable=True),
        sa.Column("cash_location", enum("cashlocation"), nullable=True),
        sa.Column("vendor_id", sa.String(length=20), nullable=True),
        sa.Column("vendor_name", sa.String(length=200), nullable=True),
        sa.Column("material_name", sa.String(length=200), nullable=True),
        sa.Column("material_quantity", sa.Numeric(precision=15, scale=3), nullable=True),
        sa.Column("material_unit", sa.String(length=30), nullable=True),
        sa.Column("vendor_payment_status", enum("vendorpaymentstatus"), nullable=False),
        money("vendor_paid_amount", default=True),
        money("paid_from_bank", default=True),
        money("paid_from_locker1", default=True),
        money("paid_from_locker2", default=True),
        sa.Column("labor_type", enum("labortype"), nullable=True),
        sa.Column("contractor_id", sa.String(length=20), nullable=True),
        sa.Column("contractor_name", sa.String(length=200), nullable=True),
        sa.Column("team_name", sa.String(length=200), nullable=True),
        sa.Column("labor_name", sa.String(length=200), nullable=True),
        sa.Column("supervisor_name", sa.String(length=200), nullable=True),
        sa.Column("petty_cash_summary", sa.Text(), nullable=True),
        sa.Column("week_ending", sa.Date(), nullable=True),
        sa.Column("entered_by_id", sa.String(length=20), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.ForeignKeyConstraint(["contractor_id"], ["contractors.id"]),
        sa.ForeignKeyConstraint(["entered_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_expenses_project_id"), "expenses", ["project_id"])
    op.create_index(op.f("ix_expenses_type"), "expenses", ["type"])
    op.create_index(op.f("ix_expenses_vendor_id"), "expenses", ["vendor_id"])
    op.create_index(op.f("ix_expenses_contractor_id"), "expenses", ["contractor_id"])

    op.create_table(
        "vendor_payments",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("vendor_id", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=20), nullable=True),
        money("amount"),
        money("applied_amount", default=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("mode", enum("paymentmode"), nullable=False),
        sa.Column("bank_name", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.String(length=50), nullable=True),
        sa.Column("cash_location", enum("cashlocation"), nullable=True),
        sa.Column("source_type", enum("paymentsourcetype"), nullable=False),
        sa.Column("source_expense_id", sa.String(length=20), nullable=True),
        sa.Column("applied_to_expenses", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("entered_by_id", sa.String(length=20), nullable=True),
        *timestamps(updated=False),
        sa.ForeignKeyConstraint(["vendor_id"], ["vendors.id"]),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["source_expense_id"], ["expenses.id"]),
        sa.ForeignKeyConstraint(["entered_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_vendor_payments_vendor_id"), "vendor_payments", ["vendor_id"])
    op.create_index(op.f("ix_vendor_payments_project_id"), "vendor_payments", ["project_id"])

    op.create_table(
        "expense_payment_history",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("expense_id", sa.String(length=20), nullable=False),
        sa.Column("vendor_payment_id", sa.String(length=20), nullable=True),
        money("amount"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("mode", enum("paymentmode"), nullable=False),
        sa.Column("bank_name", sa.String(length=100), nullable=True),
        sa.Column("account_number", sa.String(length=50), nullable=True),
        sa.Column("cash_location", enum("cashlocation"), nullable=True),
        *timestamps(updated=False),
        sa.ForeignKeyConstraint(["expense_id"], ["expenses.id"]),
        sa.ForeignKeyConstraint(["vendor_payment_id"], ["vendor_payments.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_expense_payment_history_expense_id"), "expense_payment_history", ["expense_id"])
    op.create_index(
        op.f("ix_expense_payment_history_vendor_payment_id"), "expense_payment_history", ["vendor_payment_id"]
    )

    op.create_table(
        "loans",
        sa.Column("id", sa.String(length=20), nullable=False),
        sa.Column("project_id", sa.String(length=20), nullable=False),
        sa.Column("borrower_name", sa.String(length=200), nullable=True),
        money("amount_given"),
        sa.Column("date_given", sa.Date(), nullable=False),
        money("amount_returned", default=True),
        sa.Column("date_returned", sa.Date(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", enum("loanstatus"), nullable=False),
        sa.Column("loan_type", enum("loantype"), nullable=False),
        sa.Column("direction", enum("loandirection"), nullable=True),
        sa.Column("linked_project_id", sa.String(length=20), nullable=True),
        sa.Column("linked_loan_id", sa.String(length=20), nullable=True),
        sa.Column("entered_by_id", sa.String(length=20), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["linked_project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["linked_loan_id"], ["loans.id"]),
        sa.ForeignKeyConstraint(["entered_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_loans_project_id"), "loans", ["project_id"])


def downgrade() -> None:
    op.drop_index(op.f("ix_loans_project_id"), table_name="loans")
    op.drop_table("loans")
    op.drop_index(op.f("ix_expense_payment_history_vendor_payment_id"), table_name="expense_payment_history")
    op.drop_index(op.f("ix_expense_payment_history_expense_id"), table_name="expense_payment_history")
    op.drop_table("expense_payment_history")
    op.drop_index(op.f("ix_vendor_payments_project_id"), table_name="vendor_payments")
    op.drop_index(op.f("ix_vendor_payments_vendor_id"), table_name="vendor_payments")
    op.drop_table("vendor_payments")
    for index in ("contractor_id", "vendor_id", "type", "project_id"):
        op.drop_index(op.f(f"ix_expenses_{index}"), table_name="expenses")
    op.drop_table("expenses")
    op.drop_index(op.f("ix_income_project_id"), table_name="income")
    op.drop_table("income")
    op.drop_index(op.f("ix_contractors_project_id"), table_name="contractors")
    op.drop_table("contractors")
    op.drop_index(op.f("ix_vendors_project_id"), table_name="vendors")
    op.drop_table("vendors")
    op.drop_table("projects")
    op.drop_table("users")

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
