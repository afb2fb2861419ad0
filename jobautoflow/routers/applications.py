import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobautoflow.core.errors import NotFoundError
from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_user
from jobautoflow.models.user import User
from jobautoflow.repos.application_repo import get_for_user, list_for_user, update
from jobautoflow.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStats,
    ApplicationStatus,
    ApplicationUpdate,
    AutoApplyResponse,
)
from jobautoflow.services.application_service import create_application, get_application_stats
from jobautoflow.services.auto_apply_service import run_auto_apply

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/applications", tags=["applications"])


@router.get("", response_model=ApplicationListResponse)
def list_applications(
    status: ApplicationStatus | None = None,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    items, total = list_for_user(db, user.id, status=status, limit=limit, offset=offset)
    return ApplicationListResponse(
        items=[ApplicationResponse.model_validate(a) for a in items],
        total=total,
    )


@router.get("/stats", response_model=ApplicationStats)
def application_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_application_stats(db, user.id)


@router.post("/auto-apply", response_model=AutoApplyResponse)
def auto_apply(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Apply to the caller's best cached matches. 400 when auto-apply is off,
    429 when today's quota is used up.
    """
    result = run_auto_apply(db, user.id)
    return result.to_dict()


@router.post("", response_model=ApplicationResponse, status_code=201)
def apply_to_job(
    data: ApplicationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    application = create_application(
        db,
        user.id,
        data.job_id,
        cover_letter=data.cover_letter,
        resume_version=data.resume_version,
        notes=data.notes,
    )
    return application


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    application = get_for_user(db, application_id, user.id)
    if not application:
        raise NotFoundError("Application not found")
    return application


@router.put("/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: str,
    data: ApplicationUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    application = get_for_user(db, application_id, user.id)
    if not application:
        raise NotFoundError("Application not found")
    application = update(db, application, data.model_dump(exclude_unset=True))
    logger.info("Application updated: user=%s application=%s status=%s", user.id, application_id, application.status)
    return application


@router.delete("/{application_id}", response_model=ApplicationResponse)
def withdraw_application(
    application_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Withdraw an application. The row is kept with status "withdrawn"."""
    application = get_for_user(db, application_id, user.id)
    if not application:
        raise NotFoundError("Application not found")
    application = update(db, application, {"status": "withdrawn"})
    logger.info("Application withdrawn: user=%s application=%s", user.id, application_id)
    return application
