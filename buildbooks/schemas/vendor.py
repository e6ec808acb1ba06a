from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from buildbooks.models.vendor import PartyStatus
from buildbooks.schemas.expense import ExpenseResponse
from buildbooks.schemas.vendor_payment import VendorPaymentResponse


class VendorBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None


class VendorCreate(VendorBase):
    project_id: Optional[str] = Field(None, description="Leave empty for a general vendor")


class VendorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = None
    status: Optional[PartyStatus] = None


class VendorResponse(VendorBase):
    id: str
    project_id: Optional[str] = None
    status: PartyStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VendorBalance(BaseModel):
    total_purchased: Decimal
    total_paid: Decimal
    credit: Decimal
    balance: Decimal


class VendorWithBalance(VendorResponse):
    total_purchased: Decimal
    total_paid: Decimal
    credit: Decimal
    balance: Decimal


class VendorListResponse(BaseModel):
    total: int
    vendors: List[VendorWithBalance]


class VendorDetail(VendorWithBalance):
    expenses: List[ExpenseResponse] = []
    payments: List[VendorPaymentResponse] = []
