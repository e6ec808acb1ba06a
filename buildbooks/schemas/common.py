from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from buildbooks.models.common import CashLocation, PaymentMode


def max_two_decimals(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v.as_tuple().exponent < -2:
        raise ValueError('Max 2 decimal places')
    return v


class PaymentChannel(BaseModel):
    """Where money moved: the bank, or one of the cash lockers."""
    mode: PaymentMode
    cash_location: Optional[CashLocation] = None
    bank_name: Optional[str] = Field(None, max_length=100)
    account_number: Optional[str] = Field(None, max_length=50)

    @model_validator(mode="after")
    def check_cash_location(self):
        if self.mode == PaymentMode.cash and self.cash_location is None:
            raise ValueError('cash_location is required when mode is cash')
        return self


class NamedRef(BaseModel):
    id: str
    name: str

    class Config:
        from_attributes = True


class DeleteResponse(BaseModel):
    message: str


class AmountField(BaseModel):
    amount: Decimal = Field(..., gt=0)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v):
        return max_two_decimals(v)
