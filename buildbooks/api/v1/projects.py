from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from buildbooks.core.dependencies import get_acting_user, get_db
from buildbooks.core.exceptions import LedgerError, NotFoundError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.models.project import ProjectStatus
from buildbooks.schemas.common import DeleteResponse
from buildbooks.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from buildbooks.services.project_service import (
    create_project,
    delete_project,
    get_all_projects,
    get_project_by_id,
    update_project,
)

router = APIRouter()


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project_route(
    data: ProjectCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Create a project (owners only) and its named vendors and contractors."""
    try:
        project = create_project(db, acting_user=acting_user, **data.model_dump())
        return ProjectResponse.model_validate(project)
    except LedgerError:
        raise
    except Exception:
        logger.exception("Error creating project")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create project",
        )


@router.get("", response_model=ProjectListResponse)
def list_projects(
    project_status: Optional[ProjectStatus] = Query(None, alias="status"),
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    try:
        projects = get_all_projects(db, status=project_status)
        return ProjectListResponse(
            total=len(projects),
            projects=[ProjectResponse.model_validate(p) for p in projects],
        )
    except Exception:
        logger.exception("Error fetching projects")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch projects",
        )


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    project = get_project_by_id(db, project_id)
    if not project:
        raise NotFoundError("Project", project_id)
    return ProjectResponse.model_validate(project)


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project_route(
    project_id: str,
    data: ProjectUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Update a project (owners only). Only fields that are sent are changed."""
    try:
        project = update_project(
            db,
            project_id,
            acting_user=acting_user,
            **data.model_dump(exclude_unset=True),
        )
        return ProjectResponse.model_validate(project)
    except LedgerError:
        raise
    except Exception:
        logger.exception(f"Error updating project {project_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update project",
        )


@router.delete("/{project_id}", response_model=DeleteResponse)
def delete_project_route(
    project_id: str,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db),
):
    """Delete a project (owners only) that has no records attached."""
    delete_project(db, project_id, acting_user)
    return DeleteResponse(message="Project deleted successfully")
