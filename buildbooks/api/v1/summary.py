from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.identity import ActingUser
from buildbooks.schemas.summary import SummaryResponse
from buildbooks.services.summary_service import get_summary

router = APIRouter()


@router.get("", response_model=SummaryResponse)
def get_financial_summary(
    project_id: Optional[str] = Query(None, description="Omit for all projects"),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Income, effective expenses, cash position, loans and profit (owners only)."""
    return SummaryResponse(**get_summary(db, acting_user, project_id=project_id))
