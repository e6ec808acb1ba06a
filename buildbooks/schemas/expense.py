from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from buildbooks.models.common import CashLocation, FundingSource, PaymentMode
from buildbooks.models.expense import (
    Expense,
    ExpenseType,
    LaborType,
    PaidBy,
    VendorPaymentStatus,
)
from buildbooks.schemas.common import AmountField, PaymentChannel
from buildbooks.services.cash_position import effective_amount

# Alias to avoid field name 'date' shadowing type 'date' in annotations (Pydantic v2)
DateType = date


class ExpenseCreate(AmountField, PaymentChannel):
    project_id: str = Field(..., min_length=1)
    type: ExpenseType
    date: DateType
    description: Optional[str] = None
    paid_by: PaidBy = PaidBy.company

    # material
    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = Field(None, max_length=200, description="Free-text vendor when no vendor_id is known")
    material_name: Optional[str] = Field(None, max_length=200)
    material_quantity: Optional[Decimal] = Field(None, ge=0)
    material_unit: Optional[str] = Field(None, max_length=30)
    vendor_payment_status: VendorPaymentStatus = VendorPaymentStatus.pending
    vendor_paid_amount: Optional[Decimal] = Field(None, ge=0, description="Used when vendor_payment_status is partial")

    # labor
    labor_type: Optional[LaborType] = None
    contractor_id: Optional[str] = None
    contractor_name: Optional[str] = Field(None, max_length=200)
    team_name: Optional[str] = Field(None, max_length=200)
    labor_name: Optional[str] = Field(None, max_length=200)

    # petty cash
    supervisor_name: Optional[str] = Field(None, max_length=200)
    petty_cash_summary: Optional[str] = None
    week_ending: Optional[DateType] = None

    class Config:
        json_schema_extra = {
            "example": {
                "project_id": "PRJ-AB12CD34",
                "type": "material",
                "amount": 120000.00,
                "date": "2024-02-01",
                "mode": "cash",
                "cash_location": "locker1",
                "vendor_id": "VEN-7K2M9QX1",
                "material_name": "Cement",
                "material_quantity": 100,
                "material_unit": "bags",
                "vendor_payment_status": "partial",
                "vendor_paid_amount": 50000.00,
            }
        }


class ExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    date: Optional[DateType] = None
    description: Optional[str] = None
    paid_by: Optional[PaidBy] = None
    material_name: Optional[str] = Field(None, max_length=200)
    material_quantity: Optional[Decimal] = Field(None, ge=0)
    material_unit: Optional[str] = Field(None, max_length=30)
    team_name: Optional[str] = Field(None, max_length=200)
    labor_name: Optional[str] = Field(None, max_length=200)
    supervisor_name: Optional[str] = Field(None, max_length=200)
    petty_cash_summary: Optional[str] = None
    week_ending: Optional[DateType] = None


class PaymentHistoryEntry(BaseModel):
    id: str
    vendor_payment_id: Optional[str] = None
    amount: Decimal
    date: DateType
    mode: PaymentMode
    cash_location: Optional[CashLocation] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None

    class Config:
        from_attributes = True


class PaidBySource(BaseModel):
    bank: Decimal
    locker1: Decimal
    locker2: Decimal


class ExpenseResponse(BaseModel):
    id: str
    project_id: str
    type: ExpenseType
    amount: Decimal
    date: DateType
    description: Optional[str] = None
    mode: PaymentMode
    paid_by: PaidBy
    cash_location: Optional[CashLocation] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None

    vendor_id: Optional[str] = None
    vendor_name: Optional[str] = None
    material_name: Optional[str] = None
    material_quantity: Optional[Decimal] = None
    material_unit: Optional[str] = None
    vendor_payment_status: VendorPaymentStatus
    vendor_paid_amount: Decimal

    labor_type: Optional[LaborType] = None
    contractor_id: Optional[str] = None
    contractor_name: Optional[str] = None
    team_name: Optional[str] = None
    labor_name: Optional[str] = None

    supervisor_name: Optional[str] = None
    petty_cash_summary: Optional[str] = None
    week_ending: Optional[DateType] = None

    effective_amount: Decimal
    outstanding_amount: Decimal
    paid_by_source: PaidBySource
    payment_history: List[PaymentHistoryEntry] = []
    entered_by_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @model_validator(mode="before")
    @classmethod
    def add_derived_amounts(cls, data):
        if not isinstance(data, Expense):
            return data
        values = {column.name: getattr(data, column.name) for column in Expense.__table__.columns}
        values["effective_amount"] = effective_amount(data)
        values["outstanding_amount"] = data.outstanding_amount if data.is_material else Decimal("0.00")
        values["paid_by_source"] = {source.value: data.paid_by_source(source) for source in FundingSource}
        values["payment_history"] = [PaymentHistoryEntry.model_validate(h) for h in data.payment_history]
        return values


class ExpenseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    total_effective_amount: Decimal
    expenses: List[ExpenseResponse]
