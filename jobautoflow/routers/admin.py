import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobautoflow.core.errors import NotFoundError
from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_admin
from jobautoflow.models.user import User
from jobautoflow.repos.admin_repo import get_stats
from jobautoflow.repos.application_repo import count_for_user
from jobautoflow.repos.job_repo import create as create_job, get_stats as get_job_stats, update as update_job
from jobautoflow.repos.preferences_repo import get_by_user as get_preferences
from jobautoflow.repos.profile_repo import get_by_user as get_profile
from jobautoflow.repos.user_repo import (
    delete_user,
    get_all_users_paginated,
    get_by_id,
    update as update_user,
)
from jobautoflow.schemas.admin import (
    AdminUserDetail,
    AdminUserListResponse,
    AdminUserResponse,
    AdminUserUpdate,
)
from jobautoflow.schemas.job import JobCreate, JobResponse, JobUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats")
def get_admin_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Return dashboard stats for users, applications and jobs. Admin only."""
    try:
        return get_stats(db)
    except Exception as e:
        logger.exception("Admin stats failed for admin=%s: %s", user.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load admin stats") from e


@router.get("/users", response_model=AdminUserListResponse)
def list_users(
    search: str | None = None,
    is_active: bool | None = None,
    is_admin: bool | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """List users with optional email/name search and flag filters. Admin only."""
    users, total = get_all_users_paginated(
        db,
        search=search,
        is_active=is_active,
        is_admin=is_admin,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return AdminUserListResponse(
        items=[AdminUserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/users/{user_id}", response_model=AdminUserDetail)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    target = get_by_id(db, user_id)
    if not target:
        raise NotFoundError("User not found")
    prefs = get_preferences(db, user_id)
    return AdminUserDetail(
        **AdminUserResponse.model_validate(target).model_dump(),
        has_profile=get_profile(db, user_id) is not None,
        auto_apply_enabled=bool(prefs and prefs.auto_apply_enabled),
        application_count=count_for_user(db, user_id),
    )


@router.patch("/users/{user_id}", response_model=AdminUserResponse)
def update_user_admin(
    user_id: str,
    body: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """Update name, active or admin flags. Admin only. Cannot demote or deactivate self."""
    if user_id == current_user.id and (body.is_admin is False or body.is_active is False):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot remove your own admin status or deactivate yourself",
        )
    updated = update_user(db, user_id, **body.model_dump(exclude_unset=True))
    if not updated:
        raise NotFoundError("User not found")
    logger.info("User %s updated by admin %s: %s", user_id, current_user.email, body.model_dump(exclude_unset=True))
    return updated


@router.delete("/users/{user_id}")
def delete_user_admin(
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    """Delete a user and everything they own. Admin only. Cannot delete self."""
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")
    if not delete_user(db, user_id):
        raise NotFoundError("User not found")
    logger.info("User %s deleted by admin %s", user_id, current_user.email)
    return {"message": "User deleted"}


@router.post("/jobs", response_model=JobResponse, status_code=201)
def ingest_job(
    data: JobCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Add a job posting by hand. Admin only."""
    try:
        job = create_job(db, data.model_dump())
    except IntegrityError as e:
        db.rollback()
        logger.info("Admin %s tried to ingest duplicate job source=%s external_id=%s", user.email, data.source, data.external_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Job with this source and external_id already exists",
        ) from e
    logger.info("Job ingested by admin %s: %s", user.email, job.id)
    return JobResponse.from_job(job)


@router.patch("/jobs/{job_id}", response_model=JobResponse)
def patch_job(
    job_id: str,
    data: JobUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Update status or fields of a job. Admin only."""
    job = update_job(db, job_id, data.model_dump(exclude_unset=True))
    if not job:
        raise NotFoundError("Job not found")
    logger.info("Job %s updated by admin %s", job_id, user.email)
    return JobResponse.from_job(job)


@router.get("/jobs/stats")
def job_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_admin),
):
    """Return job dashboard stats. Admin only."""
    try:
        return get_job_stats(db)
    except Exception as e:
        logger.exception("Job stats failed for admin=%s: %s", user.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load job stats") from e
