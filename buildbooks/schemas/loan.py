from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from buildbooks.models.loan import LoanDirection, LoanStatus, LoanType

DateType = date


class LoanCreate(BaseModel):
    project_id: str = Field(..., min_length=1, description="Lending project")
    loan_type: LoanType = LoanType.external
    amount_given: Decimal = Field(..., gt=0)
    date_given: DateType
    description: Optional[str] = None

    # external
    borrower_name: Optional[str] = Field(None, max_length=200)
    amount_returned: Optional[Decimal] = Field(None, ge=0)
    date_returned: Optional[DateType] = None

    # inter-project
    linked_project_id: Optional[str] = Field(None, description="Borrowing project")

    @model_validator(mode="after")
    def check_counterparty(self):
        if self.loan_type == LoanType.inter_project and not self.linked_project_id:
            raise ValueError('linked_project_id is required for an inter-project loan')
        if self.loan_type == LoanType.external and not (self.borrower_name or "").strip():
            raise ValueError('borrower_name is required for an external loan')
        return self


class LoanReturn(BaseModel):
    amount_returned: Optional[Decimal] = Field(None, ge=0, description="Cumulative amount returned so far")
    date_returned: Optional[DateType] = None


class LoanResponse(BaseModel):
    id: str
    project_id: str
    borrower_name: Optional[str] = None
    amount_given: Decimal
    date_given: DateType
    amount_returned: Decimal
    date_returned: Optional[DateType] = None
    description: Optional[str] = None
    status: LoanStatus
    loan_type: LoanType
    direction: Optional[LoanDirection] = None
    linked_project_id: Optional[str] = None
    linked_loan_id: Optional[str] = None
    entered_by_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoanListResponse(BaseModel):
    total: int
    loans: List[LoanResponse]
