from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from buildbooks.models.project import ProjectStatus, ProjectType
from buildbooks.schemas.common import NamedRef

# Alias to avoid field names shadowing the type in annotations (Pydantic v2)
DateType = date


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: ProjectType
    customer_name: Optional[str] = Field(None, max_length=200)
    investor_customer_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    investor_company_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    agreement_total_amount: Decimal = Field(..., ge=0)
    agreement_start_date: DateType
    agreement_end_date: DateType
    agreement_description: Optional[str] = None
    supervisor: Optional[str] = Field(None, max_length=200)
    status: ProjectStatus = ProjectStatus.active


class ProjectCreate(ProjectBase):
    vendors: List[str] = Field(default_factory=list, description="Vendor names to create for this project")
    contractors: List[str] = Field(default_factory=list, description="Contractor names to create for this project")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Gulberg Villa",
                "type": "customer",
                "customer_name": "Ahmed Raza",
                "agreement_total_amount": 4500000.00,
                "agreement_start_date": "2024-01-01",
                "agreement_end_date": "2024-12-31",
                "supervisor": "Bilal",
                "vendors": ["Lucky Cement", "Amreli Steel"],
                "contractors": ["Shafiq Masonry"],
            }
        }


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[ProjectType] = None
    customer_name: Optional[str] = Field(None, max_length=200)
    investor_customer_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    investor_company_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    agreement_total_amount: Optional[Decimal] = Field(None, ge=0)
    agreement_start_date: Optional[DateType] = None
    agreement_end_date: Optional[DateType] = None
    agreement_description: Optional[str] = None
    supervisor: Optional[str] = Field(None, max_length=200)
    status: Optional[ProjectStatus] = None
    vendors: List[str] = Field(default_factory=list)
    contractors: List[str] = Field(default_factory=list)


class ProjectResponse(ProjectBase):
    id: str
    vendors: List[NamedRef] = []
    contractors: List[NamedRef] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    total: int
    projects: List[ProjectResponse]
