"""Vendor Payment Routes"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.schemas.vendor_payment import (
    ManualPaymentResponse,
    PaymentAllocation,
    PaymentSimulation,
    PaymentSimulationRequest,
    SimulationAllocation,
    VendorPaymentCreate,
    VendorPaymentListResponse,
    VendorPaymentResponse,
)
from buildbooks.services.vendor_payment_service import VendorPaymentService

router = APIRouter()


@router.post(
    "",
    response_model=ManualPaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Pay a vendor",
    description="""
    Record a lump-sum payment to a vendor - auto-allocated across the vendor's
    outstanding material expenses, oldest first.

    **Example Scenario:**
    - Jan 1: Cement 100 (pending)
    - Feb 1: Steel 200 (pending)
    - Pay: 150

    **Result (FIFO):**
    - Cement: FULL (100 paid)
    - Steel: PARTIAL (50 paid, 150 remaining)

    Any amount left after every expense is paid stays on the payment as vendor credit.
    """,
)
def create_vendor_payment(
    payment_data: VendorPaymentCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        service = VendorPaymentService(db)
        result = service.create_manual_payment(
            vendor_id=payment_data.vendor_id,
            amount=payment_data.amount,
            date=payment_data.date,
            mode=payment_data.mode,
            acting_user=acting_user,
            cash_location=payment_data.cash_location,
            bank_name=payment_data.bank_name,
            account_number=payment_data.account_number,
            description=payment_data.description,
            project_id=payment_data.project_id,
        )
        return ManualPaymentResponse(
            payment=VendorPaymentResponse.model_validate(result["payment"]),
            vendor_name=result["vendor_name"],
            expenses_affected=result["expenses_affected"],
            applied_amount=result["applied_amount"],
            unapplied_amount=result["unapplied_amount"],
            allocations=[PaymentAllocation(**a) for a in result["allocations"]],
        )
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error recording vendor payment")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record vendor payment",
        )


@router.get("", response_model=VendorPaymentListResponse)
def list_vendor_payments(
    vendor_id: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        payments = VendorPaymentService(db).list_payments(vendor_id=vendor_id, project_id=project_id)
        return VendorPaymentListResponse(
            total=len(payments),
            payments=[VendorPaymentResponse.model_validate(p) for p in payments],
        )
    except Exception:
        logger.exception("Error fetching vendor payments")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch vendor payments",
        )


@router.post(
    "/vendors/{vendor_id}/simulate",
    response_model=PaymentSimulation,
    summary="Simulate payment allocation",
    description="Show how a payment would be allocated WITHOUT recording it.",
)
def simulate_vendor_payment(
    vendor_id: str,
    data: PaymentSimulationRequest,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    result = VendorPaymentService(db).simulate_payment(vendor_id, data.amount, project_id=data.project_id)
    result["allocations"] = [SimulationAllocation(**a) for a in result["allocations"]]
    return PaymentSimulation(**result)
