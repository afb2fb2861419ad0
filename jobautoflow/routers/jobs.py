import logging
from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from jobautoflow.core.errors import NotFoundError
from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_user
from jobautoflow.models.match_cache import JobMatchCache
from jobautoflow.models.user import User
from jobautoflow.repos.job_repo import get_by_id, increment_view_count, search
from jobautoflow.repos.match_cache_repo import (
    get_entries_for_jobs,
    get_entry,
    get_favorites_for_user,
    get_matches_for_user,
    hide,
    toggle_favorite,
)
from jobautoflow.schemas.job import (
    JobListResponse,
    JobResponse,
    MatchListResponse,
    MatchRefreshRequest,
    MatchResponse,
)
from jobautoflow.services.match_refresh_service import refresh_matches_for_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/jobs", tags=["jobs"])


def _entry_to_match(entry: JobMatchCache) -> MatchResponse:
    return MatchResponse(
        job=JobResponse.from_job(entry.job, entry),
        match_score=entry.match_score,
        match_reasons=entry.match_reasons or [],
        match_details=entry.match_details or {},
        match_source=entry.match_source,
        is_favorite=entry.is_favorite,
        calculated_at=entry.calculated_at,
    )


@router.get("", response_model=JobListResponse)
def search_jobs(
    query: str | None = None,
    location: str | None = None,
    remote: bool = False,
    job_type: list[str] | None = Query(default=None),
    experience_level: list[str] | None = Query(default=None),
    skills: list[str] | None = Query(default=None),
    salary_min: int | None = Query(default=None, ge=0),
    salary_max: int | None = Query(default=None, ge=0),
    posted_within: Literal["24h", "7d", "30d", "all"] = "all",
    sort_by: Literal["relevance", "date", "salary"] = "relevance",
    sort_order: Literal["asc", "desc"] = "desc",
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Search active jobs, annotated with the caller's cached match (if any)."""
    jobs, total = search(
        db,
        query=query,
        location=location,
        remote=remote,
        job_types=job_type,
        experience_levels=experience_level,
        skills=skills,
        salary_min=salary_min,
        salary_max=salary_max,
        posted_within=posted_within,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
        hidden_for_user=user.id,
    )
    entries = get_entries_for_jobs(db, user.id, [j.id for j in jobs])
    logger.debug("GET /jobs user=%s total=%d returned=%d", user.id, total, len(jobs))
    return JobListResponse(
        items=[JobResponse.from_job(j, entries.get(j.id)) for j in jobs],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/matches", response_model=MatchListResponse)
def get_matches(
    min_score: float = Query(default=50, ge=0, le=100),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Cached matches at or above min_score, best first. Unscored and hidden entries are excluded."""
    entries, total = get_matches_for_user(db, user.id, min_score=min_score, limit=limit, offset=offset)
    return MatchListResponse(items=[_entry_to_match(e) for e in entries if e.job], total=total)


@router.get("/favorites", response_model=list[JobResponse])
def get_favorites(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    entries = get_favorites_for_user(db, user.id)
    return [JobResponse.from_job(e.job, e) for e in entries if e.job]


@router.post("/matches/refresh")
def refresh_matches(
    body: MatchRefreshRequest | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Recompute the caller's match cache now."""
    job_ids = body.job_ids if body else None
    result = refresh_matches_for_user(db, user.id, job_ids=job_ids)
    logger.info("Match refresh requested by user=%s: %s", user.id, result)
    return result


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = get_by_id(db, job_id)
    if not job:
        raise NotFoundError("Job not found")
    increment_view_count(db, job_id)
    db.refresh(job)
    return JobResponse.from_job(job, get_entry(db, user.id, job_id))


@router.post("/{job_id}/favorite", response_model=JobResponse)
def favorite_job(
    job_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Toggle favorite. A job never scored for this user stays unscored (match_score null)."""
    job = get_by_id(db, job_id)
    if not job:
        raise NotFoundError("Job not found")
    entry = toggle_favorite(db, user.id, job_id)
    logger.info("Favorite toggled: user=%s job=%s favorite=%s", user.id, job_id, entry.is_favorite)
    return JobResponse.from_job(job, entry)


@router.post("/{job_id}/hide", response_model=JobResponse)
def hide_job(
    job_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = get_by_id(db, job_id)
    if not job:
        raise NotFoundError("Job not found")
    entry = hide(db, user.id, job_id)
    logger.info("Job hidden: user=%s job=%s", user.id, job_id)
    return JobResponse.from_job(job, entry)
