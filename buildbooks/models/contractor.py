from decimal import Decimal
from sqlalchemy import Column, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildbooks.core.database import Base
from buildbooks.models.common import generate_custom_id
from buildbooks.models.vendor import PartyStatus


class Contractor(Base):
    """Labor contractor paid through labor expenses against an agreed amount."""
    __tablename__ = "contractors"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("CON"))
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=True)
    agreed_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    status = Column(Enum(PartyStatus), nullable=False, default=PartyStatus.active)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="contractors")
