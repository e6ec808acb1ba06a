from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from buildbooks.models.common import CashLocation, PaymentMode
from buildbooks.schemas.common import AmountField, PaymentChannel

DateType = date


class IncomeCreate(AmountField, PaymentChannel):
    project_id: str = Field(..., min_length=1)
    date: DateType
    description: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "project_id": "PRJ-AB12CD34",
                "amount": 250000.00,
                "date": "2024-03-01",
                "mode": "cash",
                "cash_location": "locker1",
                "description": "Second installment",
            }
        }


class IncomeUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, gt=0)
    date: Optional[DateType] = None
    description: Optional[str] = None
    mode: Optional[PaymentMode] = None
    cash_location: Optional[CashLocation] = None
    bank_name: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, max_length=50)


class IncomeResponse(BaseModel):
    id: str
    project_id: str
    amount: Decimal
    date: DateType
    description: Optional[str] = None
    mode: PaymentMode
    cash_location: Optional[CashLocation] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    entered_by_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class IncomeListResponse(BaseModel):
    total: int
    total_amount: Decimal
    income: List[IncomeResponse]
