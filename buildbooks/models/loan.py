import enum
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildbooks.core.database import Base
from buildbooks.models.common import generate_custom_id


class LoanStatus(str, enum.Enum):
    active = "active"
    partial = "partial"
    returned = "returned"


class LoanType(str, enum.Enum):
    external = "external"
    inter_project = "inter_project"


class LoanDirection(str, enum.Enum):
    payable = "payable"        # lender side
    receivable = "receivable"  # borrower side


def derive_loan_status(amount_returned: Decimal, amount_given: Decimal) -> LoanStatus:
    if amount_returned >= amount_given:
        return LoanStatus.returned
    if amount_returned > 0:
        return LoanStatus.partial
    return LoanStatus.active


class Loan(Base):
    """
    Loan given out of a project.

    Inter-project loans are stored as a linked pair: a payable row on the
    lender project and a receivable row on the borrower project, each pointing
    at the other through linked_loan_id. Returns are written to both rows.
    """
    __tablename__ = "loans"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("LOAN"))
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=False, index=True)
    borrower_name = Column(String(200), nullable=True)

    amount_given = Column(Numeric(15, 2), nullable=False)
    date_given = Column(Date, nullable=False)
    amount_returned = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    date_returned = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(Enum(LoanStatus), nullable=False, default=LoanStatus.active)

    loan_type = Column(Enum(LoanType), nullable=False, default=LoanType.external)
    direction = Column(Enum(LoanDirection), nullable=True)
    linked_project_id = Column(String(20), ForeignKey("projects.id"), nullable=True)
    linked_loan_id = Column(String(20), ForeignKey("loans.id"), nullable=True)

    entered_by_id = Column(String(20), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", foreign_keys=[project_id])
    linked_project = relationship("Project", foreign_keys=[linked_project_id])
    entered_by = relationship("User")

    def apply_return(self, amount_returned: Decimal, date_returned=None) -> LoanStatus:
        self.amount_returned = amount_returned
        if date_returned is not None:
            self.date_returned = date_returned
        self.status = derive_loan_status(amount_returned, self.amount_given)
        return self.status
