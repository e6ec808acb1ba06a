from datetime import date
from decimal import Decimal

import pytest

from buildbooks.core.exceptions import NotFoundError, PermissionDeniedError
from buildbooks.models.common import CashLocation, PaymentMode
from buildbooks.models.expense import ExpenseType, VendorPaymentStatus
from buildbooks.services.expense_service import create_expense
from buildbooks.services.income_service import create_income
from buildbooks.services.loan_service import create_external_loan
from buildbooks.services.summary_service import get_summary
from buildbooks.services.vendor_payment_service import VendorPaymentService


@pytest.fixture
def ledger(db_session, project, vendor, accountant, owner):
    create_income(
        db_session, project_id=project.id, amount=Decimal("10000.00"), date=date(2024, 1, 5),
        mode=PaymentMode.bank, acting_user=accountant, bank_name="HBL",
    )
    create_income(
        db_session, project_id=project.id, amount=Decimal("2000.00"), date=date(2024, 1, 6),
        mode=PaymentMode.cash, cash_location=CashLocation.locker1, acting_user=accountant,
    )
    create_expense(
        db_session, project_id=project.id, type=ExpenseType.labor, amount=Decimal("3000.00"),
        date=date(2024, 1, 10), mode=PaymentMode.bank, acting_user=accountant,
    )
    cement = create_expense(
        db_session, project_id=project.id, type=ExpenseType.material, amount=Decimal("5000.00"),
        date=date(2024, 1, 12), mode=PaymentMode.cash, cash_location=CashLocation.locker1,
        acting_user=accountant, vendor_id=vendor.id, material_name="Cement",
        material_quantity=Decimal("100"), material_unit="bags",
        vendor_payment_status=VendorPaymentStatus.partial, vendor_paid_amount=Decimal("1500.00"),
    )
    create_external_loan(
        db_session, project_id=project.id, borrower_name="Foreman", amount_given=Decimal("400.00"),
        date_given=date(2024, 1, 15), acting_user=owner, amount_returned=Decimal("100.00"),
    )
    return cement


def test_project_summary(db_session, project, owner, ledger):
    summary = get_summary(db_session, owner, project_id=project.id)

    assert summary["project"]["name"] == project.name
    assert summary["income"] == {
        "total": Decimal("12000.00"),
        "bank": Decimal("10000.00"),
        "cash": Decimal("2000.00"),
        "transactions": 2,
    }

    expenses = summary["expenses"]
    assert expenses["total"] == Decimal("4500.00")
    assert expenses["by_type"]["material"] == Decimal("1500.00")
    assert expenses["by_type"]["labor"] == Decimal("3000.00")
    assert expenses["by_type"]["overhead"] == Decimal("0.00")
    # Face value per mode, unlike the effective totals
    assert expenses["by_mode"] == {"bank": Decimal("3000.00"), "cash": Decimal("5000.00")}
    assert expenses["transactions"] == 2

    assert summary["material_summary"]["Cement"]["quantity"] == Decimal("100")
    assert summary["material_summary"]["Cement"]["total_cost"] == Decimal("5000.00")
    assert summary["material_summary"]["Cement"]["unit"] == "bags"

    assert summary["cash_position"] == {
        "bank": Decimal("7000.00"),
        "locker1": Decimal("500.00"),
        "locker2": Decimal("0.00"),
        "total": Decimal("7500.00"),
    }
    assert summary["loans"] == {
        "total_given": Decimal("400.00"),
        "total_returned": Decimal("100.00"),
        "outstanding": Decimal("300.00"),
        "active_count": 0,
    }
    assert summary["profit"] == Decimal("7500.00")


def test_summary_follows_later_vendor_payment(db_session, project, vendor, owner, accountant, ledger):
    VendorPaymentService(db_session).create_manual_payment(
        vendor_id=vendor.id, amount=Decimal("1000.00"), date=date(2024, 2, 1),
        mode=PaymentMode.bank, acting_user=accountant, bank_name="HBL",
    )

    summary = get_summary(db_session, owner, project_id=project.id)

    assert summary["expenses"]["by_type"]["material"] == Decimal("2500.00")
    assert summary["cash_position"]["bank"] == Decimal("6000.00")
    assert summary["cash_position"]["locker1"] == Decimal("500.00")


def test_overdrawn_locker_is_negative(db_session, other_project, owner, accountant):
    create_expense(
        db_session, project_id=other_project.id, type=ExpenseType.petty_cash, amount=Decimal("750.00"),
        date=date(2024, 1, 3), mode=PaymentMode.cash, cash_location=CashLocation.locker2,
        acting_user=accountant, supervisor_name="Bilal",
    )

    summary = get_summary(db_session, owner, project_id=other_project.id)

    assert summary["cash_position"]["locker2"] == Decimal("-750.00")
    assert summary["cash_position"]["total"] == Decimal("-750.00")
    assert summary["profit"] == Decimal("-750.00")


def test_all_projects_summary(db_session, other_project, owner, accountant, ledger):
    create_income(
        db_session, project_id=other_project.id, amount=Decimal("500.00"), date=date(2024, 1, 5),
        mode=PaymentMode.cash, cash_location=CashLocation.locker2, acting_user=accountant,
    )

    summary = get_summary(db_session, owner)

    assert summary["project"] is None
    assert summary["income"]["total"] == Decimal("12500.00")
    assert summary["cash_position"]["locker2"] == Decimal("500.00")
    assert summary["cash_position"]["total"] == Decimal("8000.00")


def test_summary_is_owner_only(db_session, project, accountant):
    with pytest.raises(PermissionDeniedError):
        get_summary(db_session, accountant, project_id=project.id)


def test_summary_unknown_project(db_session, owner):
    with pytest.raises(NotFoundError):
        get_summary(db_session, owner, project_id="PRJ-MISSING")


# ==================== API ====================

def test_summary_endpoint(client, project, owner_headers, accountant_headers, ledger):
    response = client.get(f"/api/v1/summary?project_id={project.id}", headers=owner_headers)
    assert response.status_code == 200
    data = response.json()
    assert Decimal(str(data["profit"])) == Decimal("7500.00")
    assert Decimal(str(data["cash_position"]["locker1"])) == Decimal("500.00")
    assert data["project"]["id"] == project.id

    forbidden = client.get(f"/api/v1/summary?project_id={project.id}", headers=accountant_headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["error"] == "ERR_PERMISSION"
