from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError, NotFoundError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.schemas.common import DeleteResponse
from buildbooks.schemas.expense import ExpenseResponse
from buildbooks.schemas.vendor import (
    VendorCreate,
    VendorDetail,
    VendorListResponse,
    VendorResponse,
    VendorUpdate,
    VendorWithBalance,
)
from buildbooks.schemas.vendor_payment import VendorPaymentResponse
from buildbooks.services.vendor_payment_service import VendorPaymentService
from buildbooks.services.vendor_service import (
    create_vendor,
    delete_vendor,
    get_all_vendors,
    get_vendor_balance,
    get_vendor_by_id,
    get_vendor_expenses,
    update_vendor,
)

router = APIRouter()


def _with_balance(db: Session, vendor) -> VendorWithBalance:
    base = VendorResponse.model_validate(vendor).model_dump()
    return VendorWithBalance(**base, **get_vendor_balance(db, vendor))


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
def create_vendor_route(
    data: VendorCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        vendor = create_vendor(
            db,
            name=data.name,
            phone=data.phone,
            address=data.address,
            project_id=data.project_id,
        )
        return VendorResponse.model_validate(vendor)
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error creating vendor")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create vendor",
        )


@router.get("", response_model=VendorListResponse)
def list_vendors(
    project_id: Optional[str] = Query(None),
    include_general: bool = Query(False, description="Also return vendors not tied to any project"),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Vendors with purchased / paid / balance totals."""
    try:
        vendors = get_all_vendors(db, project_id=project_id, include_general=include_general)
        return VendorListResponse(
            total=len(vendors),
            vendors=[_with_balance(db, v) for v in vendors],
        )
    except Exception:
        logger.exception("Error fetching vendors")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch vendors",
        )


@router.get("/{vendor_id}", response_model=VendorDetail)
def get_vendor(
    vendor_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Vendor with balance, material expenses (newest first) and payments."""
    vendor = get_vendor_by_id(db, vendor_id)
    if not vendor:
        raise NotFoundError("Vendor", vendor_id)

    expenses = get_vendor_expenses(db, vendor, oldest_first=False)
    payments = VendorPaymentService(db).list_payments(vendor_id=vendor.id)
    return VendorDetail(
        **_with_balance(db, vendor).model_dump(),
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
        payments=[VendorPaymentResponse.model_validate(p) for p in payments],
    )


@router.put("/{vendor_id}", response_model=VendorResponse)
def update_vendor_route(
    vendor_id: str,
    data: VendorUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        vendor = update_vendor(db, vendor_id, **data.model_dump(exclude_unset=True))
        return VendorResponse.model_validate(vendor)
    except LedgerError:
        raise
    except Exception:
        logger.exception(f"Error updating vendor {vendor_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update vendor",
        )


@router.delete("/{vendor_id}", response_model=DeleteResponse)
def delete_vendor_route(
    vendor_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Delete a vendor (owners only) that has no expenses or payments."""
    delete_vendor(db, vendor_id, acting_user)
    return DeleteResponse(message="Vendor deleted successfully")
