import logging

from sqlalchemy.orm import Session

from jobautoflow.config import settings
from jobautoflow.database import SessionLocal
from jobautoflow.repos.job_repo import get_active_for_matching, get_by_ids
from jobautoflow.repos.match_cache_repo import upsert_score
from jobautoflow.repos.profile_repo import get_by_user as get_profile
from jobautoflow.services.match_scorer import AIScorer, MatchResult, batch_calculate_match_scores

logger = logging.getLogger(__name__)


def store_match_result(db: Session, user_id: str, job_id: str, result: MatchResult):
    return upsert_score(
        db,
        user_id=user_id,
        job_id=job_id,
        score=result.score,
        reasons=result.reasons,
        details=result.details.to_dict(),
        source=result.source,
    )


def _log_score_distribution(scores: list[int], user_id: str) -> None:
    if not scores:
        return
    avg = sum(scores) / len(scores)
    b_0_50 = sum(1 for s in scores if s < 50)
    b_50_75 = sum(1 for s in scores if 50 <= s < 75)
    b_75_100 = sum(1 for s in scores if s >= 75)
    logger.info(
        "User %s score distribution: min=%d max=%d avg=%.1f | buckets: 0-49=%d 50-74=%d 75-100=%d",
        user_id, min(scores), max(scores), avg, b_0_50, b_50_75, b_75_100,
    )


def refresh_matches_for_user(
    db: Session,
    user_id: str,
    job_ids: list[str] | None = None,
    ai_scorer: AIScorer | None = None,
) -> dict:
    """
    Recompute the match cache for one user against recent active jobs
    (or the given job ids). Returns counts.
    """
    profile = get_profile(db, user_id)
    if not profile:
        return {"user_id": user_id, "jobs": 0, "scored": 0, "reason": "missing_profile"}

    if job_ids:
        jobs = [j for j in get_by_ids(db, job_ids) if j.status == "active"]
    else:
        jobs = get_active_for_matching(db, limit=settings.match_refresh_job_limit)
    if not jobs:
        logger.debug("Match refresh user=%s: no active jobs", user_id)
        return {"user_id": user_id, "jobs": 0, "scored": 0}

    results = batch_calculate_match_scores(profile, jobs, ai_scorer=ai_scorer)
    ai_count = 0
    for job_id, result in results.items():
        store_match_result(db, user_id, job_id, result)
        if result.source == "ai":
            ai_count += 1

    _log_score_distribution([r.score for r in results.values()], user_id)
    logger.info(
        "Match refresh user=%s: jobs=%d scored=%d ai=%d fallback=%d",
        user_id, len(jobs), len(results), ai_count, len(results) - ai_count,
    )
    return {
        "user_id": user_id,
        "jobs": len(jobs),
        "scored": len(results),
        "ai_scored": ai_count,
        "fallback_scored": len(results) - ai_count,
    }


def refresh_matches_in_background(user_id: str) -> None:
    """Background-task entry point; runs with its own DB session."""
    db = SessionLocal()
    try:
        refresh_matches_for_user(db, user_id)
    except Exception as e:
        logger.exception("Background match refresh failed for user=%s: %s", user_id, e)
    finally:
        db.close()
