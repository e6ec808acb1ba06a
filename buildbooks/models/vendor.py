import enum
from decimal import Decimal
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildbooks.core.database import Base
from buildbooks.models.common import CashLocation, PaymentMode, generate_custom_id


class PartyStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class PaymentSourceType(str, enum.Enum):
    manual = "manual"    # entered as a lump payment, allocated FIFO
    expense = "expense"  # companion row written when an expense is created already (partly) paid


class Vendor(Base):
    """Material supplier. project_id NULL means a general vendor usable by any project."""
    __tablename__ = "vendors"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("VEN"))
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    status = Column(Enum(PartyStatus), nullable=False, default=PartyStatus.active)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="vendors")
    payments = relationship("VendorPayment", back_populates="vendor")


class VendorPayment(Base):
    __tablename__ = "vendor_payments"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("VPAY"))
    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=False, index=True)
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=True, index=True)

    amount = Column(Numeric(15, 2), nullable=False)
    # Portion of amount attributed to material expenses; the rest is vendor credit
    applied_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)

    mode = Column(Enum(PaymentMode), nullable=False)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(String(50), nullable=True)
    cash_location = Column(Enum(CashLocation), nullable=True)

    source_type = Column(Enum(PaymentSourceType), nullable=False, default=PaymentSourceType.manual)
    source_expense_id = Column(String(20), ForeignKey("expenses.id"), nullable=True)
    applied_to_expenses = Column(Boolean, nullable=False, default=False)

    entered_by_id = Column(String(20), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    vendor = relationship("Vendor", back_populates="payments")
    project = relationship("Project")
    entered_by = relationship("User")

    @property
    def unapplied_amount(self) -> Decimal:
        return (self.amount or Decimal("0")) - (self.applied_amount or Decimal("0"))
