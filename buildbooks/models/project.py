import enum
from sqlalchemy import Column, Date, DateTime, Enum, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildbooks.core.database import Base
from buildbooks.models.common import generate_custom_id


class ProjectType(str, enum.Enum):
    customer = "customer"
    company = "company"
    investor = "investor"


class ProjectStatus(str, enum.Enum):
    active = "active"
    completed = "completed"
    on_hold = "on_hold"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("PRJ"))
    name = Column(String(200), nullable=False)
    type = Column(Enum(ProjectType), nullable=False)
    customer_name = Column(String(200), nullable=True)

    # Only meaningful for investor projects
    investor_customer_percentage = Column(Numeric(5, 2), nullable=True)
    investor_company_percentage = Column(Numeric(5, 2), nullable=True)

    agreement_total_amount = Column(Numeric(15, 2), nullable=False)
    agreement_start_date = Column(Date, nullable=False)
    agreement_end_date = Column(Date, nullable=False)
    agreement_description = Column(Text, nullable=True)

    supervisor = Column(String(200), nullable=True)
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.active)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    vendors = relationship("Vendor", back_populates="project")
    contractors = relationship("Contractor", back_populates="project")

    def __repr__(self):
        return f"<Project(id='{self.id}', name='{self.name}')>"
