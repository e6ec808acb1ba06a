from datetime import date
from decimal import Decimal

import pytest

from buildbooks.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from buildbooks.models import Contractor, Expense, ExpensePaymentHistory, VendorPayment
from buildbooks.models.common import CashLocation, PaymentMode
from buildbooks.models.expense import ExpenseType, LaborType, VendorPaymentStatus
from buildbooks.models.vendor import PaymentSourceType
from buildbooks.services.expense_service import (
    create_expense,
    seeded_paid_amount,
    update_expense,
)


def material(db_session, project, acting_user, amount="1000.00", **kwargs):
    fields = {
        "mode": PaymentMode.cash,
        "cash_location": CashLocation.locker2,
        "material_name": "Steel",
        "material_quantity": Decimal("2.5"),
        "material_unit": "tons",
    }
    fields.update(kwargs)
    return create_expense(
        db_session,
        project_id=project.id,
        type=ExpenseType.material,
        amount=Decimal(amount),
        date=date(2024, 2, 10),
        acting_user=acting_user,
        description="Steel bars",
        **fields,
    )


@pytest.mark.parametrize(
    "status, requested, expected",
    [
        (VendorPaymentStatus.pending, Decimal("50.00"), Decimal("0.00")),
        (VendorPaymentStatus.partial, Decimal("40.00"), Decimal("40.00")),
        (VendorPaymentStatus.partial, Decimal("140.00"), Decimal("100.00")),
        (VendorPaymentStatus.partial, Decimal("-5.00"), Decimal("0.00")),
        (VendorPaymentStatus.full, None, Decimal("100.00")),
        (None, None, Decimal("0.00")),
    ],
)
def test_seeded_paid_amount(status, requested, expected):
    assert seeded_paid_amount(Decimal("100.00"), status, requested) == expected


def test_partial_material_seeds_own_source_and_companion_payment(db_session, project, vendor, accountant):
    expense = material(
        db_session, project, accountant, vendor_id=vendor.id,
        vendor_payment_status=VendorPaymentStatus.partial, vendor_paid_amount=Decimal("400.00"),
    )

    assert expense.vendor_payment_status == VendorPaymentStatus.partial
    assert expense.paid_amount == Decimal("400.00")
    assert expense.paid_from_locker2 == Decimal("400.00")
    assert expense.paid_from_bank == Decimal("0.00")
    assert expense.vendor_name == "Lucky Cement"

    companion = db_session.query(VendorPayment).filter(VendorPayment.source_expense_id == expense.id).one()
    assert companion.source_type == PaymentSourceType.expense
    assert companion.amount == Decimal("400.00")
    assert companion.applied_to_expenses is False
    assert companion.unapplied_amount == Decimal("0.00")
    assert companion.cash_location == CashLocation.locker2
    assert companion.description.startswith("Partial payment for material expense")
    # Seeding is not an allocation step
    assert db_session.query(ExpensePaymentHistory).count() == 0


def test_full_material_is_fully_paid_at_creation(db_session, project, vendor, accountant):
    expense = material(
        db_session, project, accountant, vendor_id=vendor.id,
        vendor_payment_status=VendorPaymentStatus.full, vendor_paid_amount=Decimal("10.00"),
    )

    assert expense.vendor_payment_status == VendorPaymentStatus.full
    assert expense.paid_amount == Decimal("1000.00")
    assert expense.outstanding_amount == Decimal("0.00")


def test_partial_request_above_amount_is_clamped(db_session, project, accountant):
    expense = material(
        db_session, project, accountant, amount="300.00",
        vendor_payment_status=VendorPaymentStatus.partial, vendor_paid_amount=Decimal("900.00"),
    )

    assert expense.paid_amount == Decimal("300.00")
    assert expense.vendor_payment_status == VendorPaymentStatus.full


def test_without_vendor_no_companion_payment(db_session, project, accountant):
    expense = material(
        db_session, project, accountant, vendor_name="Unknown Traders",
        vendor_payment_status=VendorPaymentStatus.full,
    )

    assert expense.vendor_id is None
    assert expense.vendor_name == "Unknown Traders"
    assert db_session.query(VendorPayment).count() == 0


def test_legacy_vendor_name_is_linked_when_known(db_session, project, vendor, accountant):
    expense = material(db_session, project, accountant, vendor_name="  lucky cement ")

    assert expense.vendor_id == vendor.id
    assert expense.vendor_name == "Lucky Cement"
    assert expense.vendor_payment_status == VendorPaymentStatus.pending


def test_unknown_vendor_id(db_session, project, accountant):
    with pytest.raises(NotFoundError):
        material(db_session, project, accountant, vendor_id="VEN-MISSING")
    assert db_session.query(Expense).count() == 0


def test_non_material_ignores_payment_status(db_session, project, accountant):
    expense = create_expense(
        db_session, project_id=project.id, type=ExpenseType.factory_overhead, amount=Decimal("250.00"),
        date=date(2024, 2, 1), mode=PaymentMode.bank, acting_user=accountant,
        vendor_payment_status=VendorPaymentStatus.full,
    )

    assert expense.paid_amount == Decimal("0.00")
    assert expense.vendor_payment_status == VendorPaymentStatus.pending


def test_contractor_labor_links_contractor(db_session, project, accountant):
    contractor = Contractor(project_id=project.id, name="Ali Builders", phone="0300-1234567")
    db_session.add(contractor)
    db_session.commit()

    expense = create_expense(
        db_session, project_id=project.id, type=ExpenseType.labor, amount=Decimal("5000.00"),
        date=date(2024, 2, 1), mode=PaymentMode.bank, acting_user=accountant, contractor_id=contractor.id,
    )

    assert expense.labor_type == LaborType.contractor
    assert expense.contractor_name == "Ali Builders"


@pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1.00")])
def test_amount_must_be_positive(db_session, project, accountant, amount):
    with pytest.raises(ValidationError):
        material(db_session, project, accountant, amount=amount)


def test_unknown_project(db_session, accountant):
    with pytest.raises(NotFoundError):
        create_expense(
            db_session, project_id="PRJ-MISSING", type=ExpenseType.labor, amount=Decimal("10.00"),
            date=date(2024, 1, 1), mode=PaymentMode.bank, acting_user=accountant,
        )


# ==================== UPDATE ====================

def test_update_is_owner_only(db_session, project, accountant):
    expense = material(db_session, project, accountant)
    with pytest.raises(PermissionDeniedError):
        update_expense(db_session, expense.id, accountant, description="changed")


def test_owner_update_rederives_status(db_session, project, vendor, owner, accountant):
    expense = material(
        db_session, project, accountant, vendor_id=vendor.id,
        vendor_payment_status=VendorPaymentStatus.partial, vendor_paid_amount=Decimal("400.00"),
    )

    updated = update_expense(db_session, expense.id, owner, amount=Decimal("400.00"), material_unit="kg")

    assert updated.vendor_payment_status == VendorPaymentStatus.full
    assert updated.material_unit == "kg"
    assert updated.paid_amount == Decimal("400.00")

    with pytest.raises(ValidationError):
        update_expense(db_session, expense.id, owner, amount=Decimal("399.00"))


# ==================== API ====================

def test_create_and_list_expenses_endpoint(client, project, vendor, accountant_headers):
    response = client.post(
        "/api/v1/expenses",
        json={
            "project_id": project.id,
            "type": "material",
            "amount": "1200.00",
            "date": "2024-02-01",
            "mode": "bank",
            "bank_name": "MCB",
            "vendor_id": vendor.id,
            "material_name": "Cement",
            "vendor_payment_status": "partial",
            "vendor_paid_amount": "200.00",
        },
        headers=accountant_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["vendor_payment_status"] == "partial"
    assert Decimal(str(created["effective_amount"])) == Decimal("200.00")
    assert Decimal(str(created["outstanding_amount"])) == Decimal("1000.00")
    assert Decimal(str(created["paid_by_source"]["bank"])) == Decimal("200.00")

    client.post(
        "/api/v1/expenses",
        json={
            "project_id": project.id,
            "type": "labor",
            "amount": "300.00",
            "date": "2024-02-02",
            "mode": "cash",
            "cash_location": "locker1",
        },
        headers=accountant_headers,
    )

    listing = client.get(f"/api/v1/expenses?project_id={project.id}", headers=accountant_headers)
    assert listing.status_code == 200
    data = listing.json()
    assert data["total"] == 2
    assert Decimal(str(data["total_amount"])) == Decimal("1500.00")
    assert Decimal(str(data["total_effective_amount"])) == Decimal("500.00")
    assert data["expenses"][0]["type"] == "labor"

    only_material = client.get("/api/v1/expenses?type=material", headers=accountant_headers)
    assert only_material.json()["total"] == 1


def test_cash_expense_without_location_rejected(client, project, accountant_headers):
    response = client.post(
        "/api/v1/expenses",
        json={"project_id": project.id, "type": "labor", "amount": "10.00", "date": "2024-02-01", "mode": "cash"},
        headers=accountant_headers,
    )
    assert response.status_code == 422


def test_update_expense_endpoint_forbidden_for_accountant(client, db_session, project, accountant, accountant_headers, owner_headers):
    expense = material(db_session, project, accountant)

    forbidden = client.put(f"/api/v1/expenses/{expense.id}", json={"description": "x"}, headers=accountant_headers)
    assert forbidden.status_code == 403

    allowed = client.put(f"/api/v1/expenses/{expense.id}", json={"description": "Rebar"}, headers=owner_headers)
    assert allowed.status_code == 200
    assert allowed.json()["description"] == "Rebar"
