import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from jobautoflow.core.security import generate_id
from jobautoflow.models.match_cache import JobMatchCache

logger = logging.getLogger(__name__)


def get_entry(db: Session, user_id: str, job_id: str) -> JobMatchCache | None:
    return (
        db.query(JobMatchCache)
        .filter(JobMatchCache.user_id == user_id, JobMatchCache.job_id == job_id)
        .first()
    )


def get_entries_for_jobs(db: Session, user_id: str, job_ids: list[str]) -> dict[str, JobMatchCache]:
    if not job_ids:
        return {}
    rows = (
        db.query(JobMatchCache)
        .filter(JobMatchCache.user_id == user_id, JobMatchCache.job_id.in_(job_ids))
        .all()
    )
    return {row.job_id: row for row in rows}


def _get_or_create(db: Session, user_id: str, job_id: str) -> JobMatchCache:
    """
    Fetch the (user, job) entry or insert an unscored placeholder.
    A concurrent insert of the same pair loses on the unique constraint;
    we then re-read the winner's row.
    """
    entry = get_entry(db, user_id, job_id)
    if entry is not None:
        return entry
    entry = JobMatchCache(
        id=generate_id(),
        user_id=user_id,
        job_id=job_id,
        match_score=None,
        is_favorite=False,
        is_hidden=False,
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("Match cache entry for user=%s job=%s created concurrently; reusing", user_id, job_id)
        entry = get_entry(db, user_id, job_id)
        if entry is None:
            raise
    return entry


def upsert_score(
    db: Session,
    user_id: str,
    job_id: str,
    score: int,
    reasons: list[str],
    details: dict,
    source: str | None = None,
) -> JobMatchCache:
    """Idempotent create-or-update of the computed match. Favorite/hidden flags are kept."""
    entry = _get_or_create(db, user_id, job_id)
    entry.match_score = int(score)
    entry.match_reasons = list(reasons)
    entry.match_details = dict(details)
    entry.match_source = source
    entry.calculated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(entry)
    return entry


def toggle_favorite(db: Session, user_id: str, job_id: str) -> JobMatchCache:
    entry = get_entry(db, user_id, job_id)
    if entry is None:
        entry = _get_or_create(db, user_id, job_id)
        entry.is_favorite = True
    else:
        entry.is_favorite = not entry.is_favorite
    db.commit()
    db.refresh(entry)
    return entry


def hide(db: Session, user_id: str, job_id: str) -> JobMatchCache:
    entry = _get_or_create(db, user_id, job_id)
    entry.is_hidden = True
    db.commit()
    db.refresh(entry)
    return entry


def get_matches_for_user(
    db: Session,
    user_id: str,
    min_score: int = 50,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[JobMatchCache], int]:
    """Scored, visible entries at or above min_score, best first. Returns (items, total)."""
    q = db.query(JobMatchCache).filter(
        JobMatchCache.user_id == user_id,
        JobMatchCache.match_score.isnot(None),
        JobMatchCache.match_score >= min_score,
        JobMatchCache.is_hidden == False,  # noqa: E712
    )
    total = q.count()
    items = (
        q.options(joinedload(JobMatchCache.job))
        .order_by(JobMatchCache.match_score.desc(), JobMatchCache.calculated_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_favorites_for_user(db: Session, user_id: str, limit: int = 100) -> list[JobMatchCache]:
    return (
        db.query(JobMatchCache)
        .options(joinedload(JobMatchCache.job))
        .filter(JobMatchCache.user_id == user_id, JobMatchCache.is_favorite == True)  # noqa: E712
        .order_by(JobMatchCache.calculated_at.desc())
        .limit(limit)
        .all()
    )


def count_matched(db: Session, user_id: str) -> int:
    """Scored entries the user has not hidden."""
    return (
        db.query(JobMatchCache)
        .filter(
            JobMatchCache.user_id == user_id,
            JobMatchCache.match_score.isnot(None),
            JobMatchCache.is_hidden == False,  # noqa: E712
        )
        .count()
    )


def get_auto_apply_candidates(
    db: Session,
    user_id: str,
    threshold: float,
    limit: int,
) -> list[JobMatchCache]:
    if limit <= 0:
        return []
    return (
        db.query(JobMatchCache)
        .options(joinedload(JobMatchCache.job))
        .filter(
            JobMatchCache.user_id == user_id,
            JobMatchCache.match_score.isnot(None),
            JobMatchCache.match_score >= threshold,
            JobMatchCache.is_hidden == False,  # noqa: E712
        )
        .order_by(JobMatchCache.match_score.desc())
        .limit(limit)
        .all()
    )
