from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError, NotFoundError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.schemas.common import DeleteResponse
from buildbooks.schemas.contractor import (
    ContractorCreate,
    ContractorDetail,
    ContractorListResponse,
    ContractorResponse,
    ContractorUpdate,
    ContractorWithBalance,
)
from buildbooks.schemas.expense import ExpenseResponse
from buildbooks.services.contractor_service import (
    create_contractor,
    delete_contractor,
    get_all_contractors,
    get_contractor_balance,
    get_contractor_by_id,
    get_contractor_expenses,
    update_contractor,
)

router = APIRouter()


def _with_balance(db: Session, contractor) -> ContractorWithBalance:
    base = ContractorResponse.model_validate(contractor).model_dump()
    return ContractorWithBalance(**base, **get_contractor_balance(db, contractor))


@router.post("", response_model=ContractorResponse, status_code=status.HTTP_201_CREATED)
def create_contractor_route(
    data: ContractorCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        contractor = create_contractor(
            db,
            name=data.name,
            phone=data.phone,
            agreed_amount=data.agreed_amount,
            project_id=data.project_id,
        )
        return ContractorResponse.model_validate(contractor)
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error creating contractor")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create contractor",
        )


@router.get("", response_model=ContractorListResponse)
def list_contractors(
    project_id: Optional[str] = Query(None),
    include_general: bool = Query(False),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        contractors = get_all_contractors(db, project_id=project_id, include_general=include_general)
        return ContractorListResponse(
            total=len(contractors),
            contractors=[_with_balance(db, c) for c in contractors],
        )
    except Exception:
        logger.exception("Error fetching contractors")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch contractors",
        )


@router.get("/{contractor_id}", response_model=ContractorDetail)
def get_contractor(
    contractor_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    contractor = get_contractor_by_id(db, contractor_id)
    if not contractor:
        raise NotFoundError("Contractor", contractor_id)
    expenses = get_contractor_expenses(db, contractor)
    return ContractorDetail(
        **_with_balance(db, contractor).model_dump(),
        expenses=[ExpenseResponse.model_validate(e) for e in expenses],
    )


@router.put("/{contractor_id}", response_model=ContractorResponse)
def update_contractor_route(
    contractor_id: str,
    data: ContractorUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        contractor = update_contractor(db, contractor_id, **data.model_dump(exclude_unset=True))
        return ContractorResponse.model_validate(contractor)
    except LedgerError:
        raise
    except Exception:
        logger.exception(f"Error updating contractor {contractor_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update contractor",
        )


@router.delete("/{contractor_id}", response_model=DeleteResponse)
def delete_contractor_route(
    contractor_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    delete_contractor(db, contractor_id, acting_user)
    return DeleteResponse(message="Contractor deleted successfully")
