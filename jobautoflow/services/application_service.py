import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from jobautoflow.core.errors import DuplicateApplication, NotFoundError
from jobautoflow.models.application import Application
from jobautoflow.repos.application_repo import (
    count_by_status,
    count_for_user,
    create as create_application_row,
    get_existing,
)
from jobautoflow.repos.job_repo import get_by_id as get_job
from jobautoflow.repos.match_cache_repo import count_matched
from jobautoflow.repos.notification_repo import create as create_notification
from jobautoflow.repos.profile_repo import get_by_user as get_profile
from jobautoflow.services.match_refresh_service import store_match_result
from jobautoflow.services.match_scorer import AIScorer, calculate_match_score

logger = logging.getLogger(__name__)


def create_application(
    db: Session,
    user_id: str,
    job_id: str,
    *,
    cover_letter: str | None = None,
    resume_version: str | None = None,
    notes: str | None = None,
    ai_scorer: AIScorer | None = None,
) -> Application:
    """
    Apply to one job directly. Scores the pair first when the user has a
    profile and snapshots that score on the application.
    """
    job = get_job(db, job_id)
    if not job:
        raise NotFoundError("Job not found")
    if get_existing(db, user_id, job_id):
        raise DuplicateApplication()

    match_score = None
    match_reasons: list[str] = []
    profile = get_profile(db, user_id)
    if profile:
        result = calculate_match_score(profile, job, ai_scorer=ai_scorer)
        match_score = result.score
        match_reasons = result.reasons
        store_match_result(db, user_id, job_id, result)

    title, company = job.title, job.company
    application = create_application_row(
        db,
        user_id,
        job_id,
        match_score=match_score,
        match_reasons=match_reasons,
        cover_letter=cover_letter,
        resume_version=resume_version,
        notes=notes,
    )
    create_notification(
        db,
        user_id=user_id,
        type="application",
        title="Application Submitted",
        message=f"Your application for {title} at {company} has been submitted.",
        data={"application_id": application.id, "job_id": job_id},
    )
    logger.info("Application created: user=%s job=%s application=%s score=%s", user_id, job_id, application.id, match_score)
    return application


def get_application_stats(db: Session, user_id: str) -> dict:
    by_status = count_by_status(db, user_id)
    week_ago = datetime.now(timezone.utc) - timedelta(days=7)
    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "this_week": count_by_status(db, user_id, since=week_ago),
    }


RESPONDED_STATUSES = ("viewed", "shortlisted", "interview", "offer", "rejected")


def get_user_dashboard_stats(db: Session, user_id: str) -> dict:
    """
    Dashboard numbers for one user: application volume, matched jobs,
    interview progress and the share of applications that got any response.
    """
    now = datetime.now(timezone.utc)
    by_status = count_by_status(db, user_id)
    total = sum(by_status.values())
    responded = sum(by_status.get(s, 0) for s in RESPONDED_STATUSES)
    response_rate = (responded * 100 + total // 2) // total if total else 0
    return {
        "applications": {
            "total": total,
            "this_week": count_for_user(db, user_id, since=now - timedelta(days=7)),
            "this_month": count_for_user(db, user_id, since=now - timedelta(days=30)),
            "by_status": by_status,
        },
        "jobs": {"matched": count_matched(db, user_id)},
        "interviews": {
            "scheduled": by_status.get("interview", 0) + by_status.get("offer", 0),
            "completed": by_status.get("offer", 0),
        },
        "response_rate": response_rate,
    }
