import json
import logging
from datetime import datetime, timezone, timedelta

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.orm import Session

from jobautoflow.core.security import generate_id
from jobautoflow.models.job import Job
from jobautoflow.models.match_cache import JobMatchCache

logger = logging.getLogger(__name__)

POSTED_WITHIN_DAYS = {"24h": 1, "7d": 7, "30d": 30}
UPDATABLE_FIELDS = (
    "title",
    "company",
    "company_logo_url",
    "description",
    "skills_required",
    "salary_min",
    "salary_max",
    "salary_currency",
    "experience_level",
    "location",
    "location_type",
    "job_type",
    "status",
    "application_url",
    "posted_at",
)


def get_by_id(db: Session, job_id: str) -> Job | None:
    return db.query(Job).filter(Job.id == job_id).first()


def search(
    db: Session,
    *,
    query: str | None = None,
    location: str | None = None,
    remote: bool = False,
    job_types: list[str] | None = None,
    experience_levels: list[str] | None = None,
    skills: list[str] | None = None,
    salary_min: int | None = None,
    salary_max: int | None = None,
    posted_within: str | None = None,
    sort_by: str = "relevance",
    sort_order: str = "desc",
    limit: int = 20,
    offset: int = 0,
    hidden_for_user: str | None = None,
) -> tuple[list[Job], int]:
    """Search active jobs. Returns (items, total). Jobs hidden by hidden_for_user are left out."""
    q = db.query(Job).filter(Job.status == "active")
    if hidden_for_user:
        hidden = select(JobMatchCache.job_id).where(
            JobMatchCache.user_id == hidden_for_user,
            JobMatchCache.is_hidden == True,  # noqa: E712
        )
        q = q.filter(~Job.id.in_(hidden))
    if query and query.strip():
        term = f"%{query.strip()}%"
        q = q.filter(
            or_(
                Job.title.ilike(term),
                Job.description.ilike(term),
                Job.company.ilike(term),
            )
        )
    if location and location.strip():
        q = q.filter(Job.location.ilike(f"%{location.strip()}%"))
    if remote:
        q = q.filter(Job.location_type.in_(["remote", "hybrid"]))
    if job_types:
        q = q.filter(Job.job_type.in_(job_types))
    if experience_levels:
        q = q.filter(Job.experience_level.in_(experience_levels))
    skill_terms = [s.strip() for s in (skills or []) if s and s.strip()]
    if skill_terms:
        # Any-of match on whole list elements of the JSON skills array, case-insensitive.
        skills_text = cast(Job.skills_required, String)
        q = q.filter(or_(*[skills_text.ilike(f"%{json.dumps(s)}%") for s in skill_terms]))
    # Band overlap: job's max reaches the caller's min, job's min within the caller's max.
    if salary_min is not None:
        q = q.filter(Job.salary_max >= salary_min)
    if salary_max is not None:
        q = q.filter(Job.salary_min <= salary_max)
    days = POSTED_WITHIN_DAYS.get(posted_within or "all")
    if days:
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        q = q.filter(Job.posted_at >= cutoff)

    if sort_by == "date":
        column = Job.posted_at
    elif sort_by == "salary":
        column = Job.salary_max
    else:
        column = Job.posted_at
        sort_order = "desc"
    q = q.order_by(column.asc() if sort_order == "asc" else column.desc())

    total = q.count()
    items = q.offset(offset).limit(limit).all()
    return items, total


def get_active_for_matching(db: Session, limit: int = 200) -> list[Job]:
    """Most recent active jobs, the candidate set for a match refresh."""
    return (
        db.query(Job)
        .filter(Job.status == "active")
        .order_by(Job.posted_at.desc(), Job.created_at.desc())
        .limit(limit)
        .all()
    )


def get_by_ids(db: Session, job_ids: list[str]) -> list[Job]:
    if not job_ids:
        return []
    return db.query(Job).filter(Job.id.in_(job_ids)).all()


def create(db: Session, data: dict) -> Job:
    job = Job(id=generate_id(), view_count=0, application_count=0, **data)
    if job.skills_required is None:
        job.skills_required = []
    if not job.status:
        job.status = "active"
    db.add(job)
    db.commit()
    db.refresh(job)
    logger.info("Job created: id=%s title=%r company=%r", job.id, job.title, job.company)
    return job


def update(db: Session, job_id: str, data: dict) -> Job | None:
    job = get_by_id(db, job_id)
    if not job:
        return None
    for key, value in data.items():
        if key in UPDATABLE_FIELDS:
            setattr(job, key, value)
    db.commit()
    db.refresh(job)
    return job


def increment_view_count(db: Session, job_id: str) -> None:
    db.query(Job).filter(Job.id == job_id).update(
        {Job.view_count: Job.view_count + 1},
        synchronize_session=False,
    )
    db.commit()


def increment_application_count(db: Session, job_id: str) -> None:
    """Queue the counter bump in the current transaction; the caller commits."""
    db.query(Job).filter(Job.id == job_id).update(
        {Job.application_count: Job.application_count + 1},
        synchronize_session=False,
    )


def get_stats(db: Session) -> dict:
    week_ago = datetime.now(timezone.utc) - timedelta(days=7)
    total = db.query(Job).count()
    active = db.query(Job).filter(Job.status == "active").count()
    new_this_week = db.query(Job).filter(Job.created_at >= week_ago).count()
    top_companies = (
        db.query(Job.company, func.count(Job.id).label("count"))
        .group_by(Job.company)
        .order_by(func.count(Job.id).desc())
        .limit(10)
        .all()
    )
    return {
        "total": total,
        "active": active,
        "new_this_week": new_this_week,
        "top_companies": [{"company": company, "count": count} for company, count in top_companies],
    }
