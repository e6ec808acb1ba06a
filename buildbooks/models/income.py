from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildbooks.core.database import Base
from buildbooks.models.common import CashLocation, PaymentMode, generate_custom_id


class Income(Base):
    """Money received into a project, landing in the bank or one of the cash lockers."""
    __tablename__ = "income"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("INC"))
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)

    mode = Column(Enum(PaymentMode), nullable=False)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(String(50), nullable=True)
    cash_location = Column(Enum(CashLocation), nullable=True)

    entered_by_id = Column(String(20), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project")
    entered_by = relationship("User")
