"""Vendor Payment Schemas"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from buildbooks.models.common import CashLocation, PaymentMode
from buildbooks.models.expense import VendorPaymentStatus
from buildbooks.models.vendor import PaymentSourceType
from buildbooks.schemas.common import AmountField, PaymentChannel

DateType = date


class VendorPaymentCreate(AmountField, PaymentChannel):
    """Manual lump-sum payment to a vendor, allocated oldest expense first"""
    vendor_id: str = Field(..., min_length=1)
    date: DateType
    project_id: Optional[str] = Field(None, description="Only allocate against this project's expenses")
    description: Optional[str] = Field(None, max_length=500)

    class Config:
        json_schema_extra = {
            "example": {
                "vendor_id": "VEN-7K2M9QX1",
                "amount": 150000.00,
                "date": "2024-03-01",
                "mode": "bank",
                "bank_name": "HBL",
                "account_number": "0012-3456789",
                "description": "Payment for Jan-Feb cement",
            }
        }


class PaymentSimulationRequest(AmountField):
    project_id: Optional[str] = None


class VendorPaymentResponse(BaseModel):
    id: str
    vendor_id: str
    project_id: Optional[str] = None
    amount: Decimal
    applied_amount: Decimal
    unapplied_amount: Decimal
    date: DateType
    description: Optional[str] = None
    mode: PaymentMode
    cash_location: Optional[CashLocation] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    source_type: PaymentSourceType
    source_expense_id: Optional[str] = None
    applied_to_expenses: bool
    entered_by_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentAllocation(BaseModel):
    """Payment allocation detail"""
    expense_id: str
    expense_date: DateType
    applied_amount: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal
    status: VendorPaymentStatus


class ManualPaymentResponse(BaseModel):
    payment: VendorPaymentResponse
    vendor_name: str
    expenses_affected: int
    applied_amount: Decimal
    unapplied_amount: Decimal
    allocations: List[PaymentAllocation]


class SimulationAllocation(BaseModel):
    """Simulated allocation"""
    expense_id: str
    expense_date: DateType
    current_outstanding: Decimal
    will_pay: Decimal
    remaining: Decimal
    status: VendorPaymentStatus


class PaymentSimulation(BaseModel):
    """Payment simulation result"""
    vendor_id: str
    vendor_name: str
    payment_amount: Decimal
    expenses_affected: int
    applied_amount: Decimal
    unapplied_amount: Decimal
    allocations: List[SimulationAllocation]


class VendorPaymentListResponse(BaseModel):
    total: int
    payments: List[VendorPaymentResponse]
