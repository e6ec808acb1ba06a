from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from buildbooks.models.vendor import PartyStatus
from buildbooks.schemas.expense import ExpenseResponse


class ContractorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=30)
    agreed_amount: Decimal = Field(Decimal("0.00"), ge=0)
    project_id: Optional[str] = None


class ContractorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=30)
    agreed_amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[PartyStatus] = None


class ContractorResponse(BaseModel):
    id: str
    project_id: Optional[str] = None
    name: str
    phone: Optional[str] = None
    agreed_amount: Decimal
    status: PartyStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContractorWithBalance(ContractorResponse):
    total_paid: Decimal
    balance: Decimal


class ContractorDetail(ContractorWithBalance):
    expenses: List[ExpenseResponse] = []


class ContractorListResponse(BaseModel):
    total: int
    contractors: List[ContractorWithBalance]
