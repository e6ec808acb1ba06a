from datetime import date
from decimal import Decimal

import pytest

from buildbooks.core.exceptions import ConflictError, PermissionDeniedError, ValidationError
from buildbooks.models import Contractor, Expense, Project, Vendor
from buildbooks.models.common import PaymentMode
from buildbooks.models.expense import ExpenseType, LaborType
from buildbooks.models.project import ProjectType
from buildbooks.services.contractor_service import (
    create_contractor,
    delete_contractor,
    get_contractor_balance,
)
from buildbooks.services.expense_service import create_expense
from buildbooks.services.income_service import create_income
from buildbooks.services.project_service import (
    create_project,
    delete_project,
    normalize_name_list,
    update_project,
)
from buildbooks.services.vendor_service import (
    ByLegacyName,
    create_vendor,
    delete_vendor,
    find_vendor,
    get_all_vendors,
    get_vendor_balance,
    get_vendor_expenses,
)


# ==================== PROJECTS ====================

def test_normalize_name_list():
    assert normalize_name_list(["  Lucky Cement", "", None, "lucky cement", "Amreli Steel "]) == [
        "Lucky Cement",
        "Amreli Steel",
    ]


def test_create_project_with_parties(db_session, owner):
    project = create_project(
        db_session, owner, name=" Gulberg Villa ", type=ProjectType.customer,
        agreement_total_amount=Decimal("4500000.00"), agreement_start_date=date(2024, 1, 1),
        agreement_end_date=date(2024, 12, 31), vendors=["Lucky Cement", "lucky cement", " "],
        contractors=["Shafiq Masonry"],
    )

    assert project.name == "Gulberg Villa"
    assert [v.name for v in project.vendors] == ["Lucky Cement"]
    assert [c.name for c in project.contractors] == ["Shafiq Masonry"]

    updated = update_project(db_session, project.id, owner, vendors=["Lucky Cement", "Amreli Steel"], supervisor="Bilal")
    assert updated.supervisor == "Bilal"
    assert sorted(v.name for v in updated.vendors) == ["Amreli Steel", "Lucky Cement"]


def test_project_writes_are_owner_only(db_session, project, accountant):
    with pytest.raises(PermissionDeniedError):
        update_project(db_session, project.id, accountant, name="Renamed")
    with pytest.raises(PermissionDeniedError):
        delete_project(db_session, project.id, accountant)


def test_project_dates_validated(db_session, owner):
    with pytest.raises(ValidationError):
        create_project(
            db_session, owner, name="Backwards", type=ProjectType.company,
            agreement_total_amount=Decimal("10.00"), agreement_start_date=date(2024, 6, 1),
            agreement_end_date=date(2024, 1, 1),
        )
    assert db_session.query(Project).count() == 0


def test_project_with_records_cannot_be_deleted(db_session, project, owner, accountant):
    create_income(
        db_session, project_id=project.id, amount=Decimal("100.00"), date=date(2024, 1, 1),
        mode=PaymentMode.bank, acting_user=accountant,
    )

    with pytest.raises(ConflictError) as exc:
        delete_project(db_session, project.id, owner)
    assert exc.value.details == {"income": 1}


def test_empty_project_is_deleted(db_session, project, owner):
    delete_project(db_session, project.id, owner)
    db_session.expire_all()
    assert db_session.get(Project, project.id) is None


# ==================== VENDORS ====================

def test_vendor_names_unique_per_scope(db_session, project, other_project):
    create_vendor(db_session, "Amreli Steel", project_id=project.id)
    create_vendor(db_session, "Amreli Steel", project_id=other_project.id)
    create_vendor(db_session, "Amreli Steel")

    with pytest.raises(ConflictError):
        create_vendor(db_session, "AMRELI steel", project_id=project.id)


def test_project_vendor_wins_over_general(db_session, project, vendor):
    general = create_vendor(db_session, "Lucky Cement")

    assert find_vendor(db_session, ByLegacyName("lucky cement", project.id)).id == vendor.id
    assert find_vendor(db_session, ByLegacyName("lucky cement")).id == general.id

    listed = get_all_vendors(db_session, project_id=project.id, include_general=True)
    assert {v.id for v in listed} == {vendor.id, general.id}


def test_legacy_rows_go_to_project_vendor_over_general(db_session, project, other_project, vendor):
    general = create_vendor(db_session, "Lucky Cement")
    here = Expense(
        project_id=project.id, type=ExpenseType.material, amount=Decimal("80.00"),
        date=date(2023, 12, 1), mode=PaymentMode.bank, vendor_name="lucky cement",
    )
    there = Expense(
        project_id=other_project.id, type=ExpenseType.material, amount=Decimal("60.00"),
        date=date(2023, 12, 2), mode=PaymentMode.bank, vendor_name="Lucky Cement",
    )
    for row in (here, there):
        row.reset_vendor_payment_state()
        db_session.add(row)
    db_session.commit()

    assert [e.id for e in get_vendor_expenses(db_session, vendor)] == [here.id]
    assert [e.id for e in get_vendor_expenses(db_session, general)] == [there.id]


def test_vendor_balance_and_delete_guard(db_session, project, vendor, owner, accountant):
    create_expense(
        db_session, project_id=project.id, type=ExpenseType.material, amount=Decimal("700.00"),
        date=date(2024, 1, 1), mode=PaymentMode.bank, acting_user=accountant, vendor_id=vendor.id,
        vendor_payment_status="partial", vendor_paid_amount=Decimal("200.00"),
    )

    balance = get_vendor_balance(db_session, vendor)
    assert balance["total_purchased"] == Decimal("700.00")
    assert balance["total_paid"] == Decimal("200.00")
    assert balance["balance"] == Decimal("500.00")

    with pytest.raises(PermissionDeniedError):
        delete_vendor(db_session, vendor.id, accountant)
    with pytest.raises(ConflictError):
        delete_vendor(db_session, vendor.id, owner)


def test_unused_vendor_is_deleted(db_session, project, vendor, owner):
    delete_vendor(db_session, vendor.id, owner)
    db_session.expire_all()
    assert db_session.get(Vendor, vendor.id) is None


# ==================== CONTRACTORS ====================

def test_contractor_requires_phone(db_session, project):
    with pytest.raises(ValidationError):
        create_contractor(db_session, "Shafiq Masonry", phone=" ", project_id=project.id)


def test_contractor_balance_counts_linked_and_legacy_labor(db_session, project, accountant, owner):
    contractor = create_contractor(
        db_session, "Shafiq Masonry", phone="0300-1234567", agreed_amount=Decimal("10000.00"), project_id=project.id,
    )
    create_expense(
        db_session, project_id=project.id, type=ExpenseType.labor, amount=Decimal("2500.00"),
        date=date(2024, 1, 1), mode=PaymentMode.bank, acting_user=accountant, contractor_id=contractor.id,
    )
    create_expense(
        db_session, project_id=project.id, type=ExpenseType.labor, amount=Decimal("1500.00"),
        date=date(2024, 1, 8), mode=PaymentMode.bank, acting_user=accountant,
        labor_type=LaborType.contractor, contractor_name="shafiq masonry",
    )
    create_expense(
        db_session, project_id=project.id, type=ExpenseType.labor, amount=Decimal("900.00"),
        date=date(2024, 1, 9), mode=PaymentMode.bank, acting_user=accountant, labor_name="Daily wage",
    )

    balance = get_contractor_balance(db_session, contractor)
    assert balance == {"total_paid": Decimal("4000.00"), "balance": Decimal("6000.00")}

    with pytest.raises(ConflictError):
        delete_contractor(db_session, contractor.id, owner)
    assert db_session.get(Contractor, contractor.id) is not None


# ==================== API ====================

def test_project_endpoints(client, owner_headers, accountant_headers):
    payload = {
        "name": "DHA Residency",
        "type": "company",
        "agreement_total_amount": "2500000.00",
        "agreement_start_date": "2024-01-01",
        "agreement_end_date": "2024-12-31",
        "vendors": ["Lucky Cement"],
    }

    forbidden = client.post("/api/v1/projects", json=payload, headers=accountant_headers)
    assert forbidden.status_code == 403

    created = client.post("/api/v1/projects", json=payload, headers=owner_headers)
    assert created.status_code == 201
    project = created.json()
    assert [v["name"] for v in project["vendors"]] == ["Lucky Cement"]

    listing = client.get("/api/v1/projects?status=active", headers=accountant_headers)
    assert listing.json()["total"] == 1

    vendor_id = project["vendors"][0]["id"]
    vendor = client.get(f"/api/v1/vendors/{vendor_id}", headers=accountant_headers)
    assert vendor.status_code == 200
    assert Decimal(str(vendor.json()["balance"])) == Decimal("0.00")

    # Project still owns a vendor row
    conflict = client.delete(f"/api/v1/projects/{project['id']}", headers=owner_headers)
    assert conflict.status_code == 409
    assert conflict.json()["details"] == {"vendors": 1}


def test_contractor_endpoints(client, project, owner_headers, accountant_headers):
    created = client.post(
        "/api/v1/contractors",
        json={"name": "Shafiq Masonry", "phone": "0300-1234567", "agreed_amount": "5000.00", "project_id": project.id},
        headers=accountant_headers,
    )
    assert created.status_code == 201
    contractor_id = created.json()["id"]

    duplicate = client.post(
        "/api/v1/contractors",
        json={"name": "shafiq masonry", "phone": "0311-0000000", "project_id": project.id},
        headers=accountant_headers,
    )
    assert duplicate.status_code == 409

    detail = client.get(f"/api/v1/contractors/{contractor_id}", headers=accountant_headers)
    assert Decimal(str(detail.json()["balance"])) == Decimal("5000.00")

    assert client.delete(f"/api/v1/contractors/{contractor_id}", headers=accountant_headers).status_code == 403
    assert client.delete(f"/api/v1/contractors/{contractor_id}", headers=owner_headers).status_code == 200
