from datetime import date
from decimal import Decimal

import pytest

from buildbooks.core.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from buildbooks.models.common import CashLocation, PaymentMode
from buildbooks.services.income_service import create_income, update_income


def test_cash_income_drops_bank_details(db_session, project, accountant):
    income = create_income(
        db_session, project_id=project.id, amount=Decimal("2500.00"), date=date(2024, 1, 1),
        mode="cash", cash_location="locker2", bank_name="HBL", acting_user=accountant,
    )

    assert income.mode == PaymentMode.cash
    assert income.cash_location == CashLocation.locker2
    assert income.bank_name is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {"amount": Decimal("0"), "mode": "bank"},
        {"amount": Decimal("10.00"), "mode": "cash"},
        {"amount": Decimal("10.00"), "mode": "cash", "cash_location": "locker3"},
        {"amount": Decimal("10.00"), "mode": "cheque"},
    ],
)
def test_invalid_income_rejected(db_session, project, accountant, kwargs):
    with pytest.raises(ValidationError):
        create_income(db_session, project_id=project.id, date=date(2024, 1, 1), acting_user=accountant, **kwargs)


def test_income_for_unknown_project(db_session, accountant):
    with pytest.raises(NotFoundError):
        create_income(
            db_session, project_id="PRJ-MISSING", amount=Decimal("10.00"), date=date(2024, 1, 1),
            mode="bank", acting_user=accountant,
        )


def test_owner_can_move_income_to_bank(db_session, project, owner, accountant):
    income = create_income(
        db_session, project_id=project.id, amount=Decimal("900.00"), date=date(2024, 1, 1),
        mode="cash", cash_location="locker1", acting_user=accountant,
    )

    with pytest.raises(PermissionDeniedError):
        update_income(db_session, income.id, accountant, amount=Decimal("950.00"))

    updated = update_income(db_session, income.id, owner, mode="bank", bank_name="MCB")
    assert updated.mode == PaymentMode.bank
    assert updated.cash_location is None
    assert updated.bank_name == "MCB"


def test_income_endpoints(client, project, accountant_headers):
    created = client.post(
        "/api/v1/income",
        json={"project_id": project.id, "amount": "1200.50", "date": "2024-01-02", "mode": "bank", "bank_name": "UBL"},
        headers=accountant_headers,
    )
    assert created.status_code == 201

    too_precise = client.post(
        "/api/v1/income",
        json={"project_id": project.id, "amount": "10.001", "date": "2024-01-02", "mode": "bank"},
        headers=accountant_headers,
    )
    assert too_precise.status_code == 422

    listing = client.get(f"/api/v1/income?project_id={project.id}", headers=accountant_headers).json()
    assert listing["total"] == 1
    assert Decimal(str(listing["total_amount"])) == Decimal("1200.50")


def test_invalid_token_rejected(client):
    response = client.get("/api/v1/income", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["error"] == "ERR_HTTP"
