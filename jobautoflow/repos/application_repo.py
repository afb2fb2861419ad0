import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from jobautoflow.core.errors import DuplicateApplication
from jobautoflow.core.security import generate_id
from jobautoflow.models.application import APPLICATION_STATUSES, Application
from jobautoflow.repos.job_repo import increment_application_count

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("status", "cover_letter", "resume_version", "notes")


def create(
    db: Session,
    user_id: str,
    job_id: str,
    *,
    match_score: int | None = None,
    match_reasons: list[str] | None = None,
    is_auto_applied: bool = False,
    cover_letter: str | None = None,
    resume_version: str | None = None,
    notes: str | None = None,
) -> Application:
    """
    Insert a pending application and bump the job's application counter in one commit.
    The (user_id, job_id) unique constraint is the duplicate guard: a collision
    is rolled back and raised as DuplicateApplication.
    """
    application = Application(
        id=generate_id(),
        user_id=user_id,
        job_id=job_id,
        status="pending",
        match_score=match_score,
        match_reasons=list(match_reasons or []),
        is_auto_applied=is_auto_applied,
        cover_letter=cover_letter,
        resume_version=resume_version,
        notes=notes,
        created_at=datetime.now(timezone.utc),
    )
    db.add(application)
    increment_application_count(db, job_id)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Duplicate application rejected: user=%s job=%s", user_id, job_id)
        raise DuplicateApplication() from e
    db.refresh(application)
    return application


def get_existing(db: Session, user_id: str, job_id: str) -> Application | None:
    return (
        db.query(Application)
        .filter(Application.user_id == user_id, Application.job_id == job_id)
        .first()
    )


def get_for_user(db: Session, application_id: str, user_id: str) -> Application | None:
    return (
        db.query(Application)
        .options(joinedload(Application.job))
        .filter(Application.id == application_id, Application.user_id == user_id)
        .first()
    )


def get_applied_job_ids(db: Session, user_id: str, job_ids: list[str]) -> set[str]:
    if not job_ids:
        return set()
    rows = (
        db.query(Application.job_id)
        .filter(Application.user_id == user_id, Application.job_id.in_(job_ids))
        .all()
    )
    return {row[0] for row in rows}


def count_auto_applied_since(db: Session, user_id: str, since: datetime) -> int:
    return (
        db.query(Application)
        .filter(
            Application.user_id == user_id,
            Application.is_auto_applied == True,  # noqa: E712
            Application.created_at >= since,
        )
        .count()
    )


def list_for_user(
    db: Session,
    user_id: str,
    status: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Application], int]:
    q = db.query(Application).filter(Application.user_id == user_id)
    if status:
        q = q.filter(Application.status == status)
    total = q.count()
    items = (
        q.options(joinedload(Application.job))
        .order_by(Application.created_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def update(db: Session, application: Application, data: dict) -> Application:
    for key, value in data.items():
        if key in UPDATABLE_FIELDS:
            setattr(application, key, value)
    if data.get("status") == "applied" and application.applied_at is None:
        application.applied_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(application)
    return application


def count_by_status(db: Session, user_id: str, since: datetime | None = None) -> dict[str, int]:
    q = db.query(Application.status, func.count(Application.id)).filter(Application.user_id == user_id)
    if since is not None:
        q = q.filter(Application.created_at >= since)
    counts = dict(q.group_by(Application.status).all())
    if since is not None:
        return counts
    return {status: counts.get(status, 0) for status in APPLICATION_STATUSES}


def count_for_user(db: Session, user_id: str, since: datetime | None = None) -> int:
    q = db.query(Application).filter(Application.user_id == user_id)
    if since is not None:
        q = q.filter(Application.created_at >= since)
    return q.count()
