"""
Auto-apply: turn the user's best cached matches into pending applications,
bounded by a per-UTC-day quota.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from jobautoflow.core.errors import AutoApplyDisabled, DuplicateApplication, RateLimitExceeded
from jobautoflow.models.match_cache import JobMatchCache
from jobautoflow.repos.application_repo import (
    count_auto_applied_since,
    create as create_application,
    get_applied_job_ids,
)
from jobautoflow.repos.match_cache_repo import get_auto_apply_candidates
from jobautoflow.repos.notification_repo import create as create_notification
from jobautoflow.repos.preferences_repo import get_by_user as get_preferences

logger = logging.getLogger(__name__)


@dataclass
class AutoApplyResult:
    applications_created: int = 0
    jobs: list[dict] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "applications_created": self.applications_created,
            "jobs": self.jobs,
            "skipped": self.skipped,
            "warnings": self.warnings,
        }


def start_of_utc_day(now: datetime | None = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _reasons_for(entry: JobMatchCache) -> list[str]:
    if entry.match_reasons:
        return list(entry.match_reasons)
    # Rows scored before reasons were stored only carry the detail breakdown.
    return list((entry.match_details or {}).keys())


def run_auto_apply(db: Session, user_id: str, now: datetime | None = None) -> AutoApplyResult:
    """
    Create auto-applied applications for the highest-scoring cached matches.

    Raises AutoApplyDisabled when preferences are missing or auto-apply is off,
    RateLimitExceeded when today's auto-applied count has reached the cap.
    A candidate that collides with a concurrently created application is
    skipped and reported; the rest of the batch still goes through.
    """
    preferences = get_preferences(db, user_id)
    if not preferences or not preferences.auto_apply_enabled:
        raise AutoApplyDisabled()

    since = start_of_utc_day(now)
    today_count = count_auto_applied_since(db, user_id, since)
    max_per_day = preferences.auto_apply_max_per_day
    if today_count >= max_per_day:
        logger.info("Auto-apply cap reached: user=%s today=%d max=%d", user_id, today_count, max_per_day)
        raise RateLimitExceeded()

    remaining = max_per_day - today_count
    candidates = get_auto_apply_candidates(
        db,
        user_id,
        threshold=preferences.auto_apply_threshold,
        limit=remaining,
    )
    applied = get_applied_job_ids(db, user_id, [c.job_id for c in candidates])
    to_apply = [c for c in candidates if c.job_id not in applied]

    # Read everything needed from the cache rows up front; a rollback below expires them.
    planned = [
        {
            "job_id": c.job_id,
            "title": c.job.title if c.job else None,
            "company": c.job.company if c.job else None,
            "match_score": c.match_score,
            "reasons": _reasons_for(c),
        }
        for c in to_apply
    ]

    result = AutoApplyResult()
    for item in planned:
        try:
            create_application(
                db,
                user_id,
                item["job_id"],
                match_score=item["match_score"],
                match_reasons=item["reasons"],
                is_auto_applied=True,
            )
        except DuplicateApplication:
            logger.warning("Auto-apply skipped job=%s for user=%s: already applied", item["job_id"], user_id)
            result.skipped.append(item["job_id"])
            result.warnings.append(f"Skipped job {item['job_id']}: an application already exists")
            continue
        result.applications_created += 1
        result.jobs.append(
            {
                "id": item["job_id"],
                "title": item["title"],
                "company": item["company"],
                "match_score": item["match_score"],
            }
        )

    if result.applications_created:
        create_notification(
            db,
            user_id=user_id,
            type="auto_apply",
            title="Auto-apply completed",
            message=f"Auto-applied to {result.applications_created} jobs.",
            data={"job_ids": [j["id"] for j in result.jobs]},
        )

    logger.info(
        "Auto-apply completed: user=%s created=%d skipped=%d remaining_quota=%d",
        user_id, result.applications_created, len(result.skipped), remaining - result.applications_created,
    )
    return result
