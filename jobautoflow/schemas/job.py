from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

JobType = Literal["full_time", "part_time", "contract", "freelance", "internship"]
ExperienceLevel = Literal["entry", "mid", "senior", "executive"]
LocationType = Literal["onsite", "remote", "hybrid"]
JobStatus = Literal["active", "expired", "filled", "closed"]


class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    company_logo_url: str | None = None
    description: str | None = None
    skills_required: list[str] = []
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str | None = None
    experience_level: str | None = None
    location: str | None = None
    location_type: str | None = None
    job_type: str | None = None
    status: str | None = None
    application_url: str | None = None
    posted_at: datetime | None = None
    view_count: int = 0
    application_count: int = 0
    # Caller's cache entry, if any. match_score is null until scored.
    match_score: int | None = None
    match_reasons: list[str] = []
    is_scored: bool = False
    is_favorite: bool = False
    is_hidden: bool = False

    @classmethod
    def from_job(cls, job, entry=None) -> "JobResponse":
        """Build from a Job row, merging the caller's cache entry when there is one."""
        return cls(
            id=job.id,
            title=job.title,
            company=job.company,
            company_logo_url=job.company_logo_url,
            description=job.description,
            skills_required=job.skills_required or [],
            salary_min=job.salary_min,
            salary_max=job.salary_max,
            salary_currency=job.salary_currency,
            experience_level=job.experience_level,
            location=job.location,
            location_type=job.location_type,
            job_type=job.job_type,
            status=job.status,
            application_url=job.application_url,
            posted_at=job.posted_at,
            view_count=job.view_count or 0,
            application_count=job.application_count or 0,
            match_score=entry.match_score if entry else None,
            match_reasons=(entry.match_reasons or []) if entry else [],
            is_scored=entry.is_scored if entry else False,
            is_favorite=entry.is_favorite if entry else False,
            is_hidden=entry.is_hidden if entry else False,
        )


class JobListResponse(BaseModel):
    items: list[JobResponse]
    total: int
    limit: int
    offset: int


class MatchResponse(BaseModel):
    job: JobResponse
    match_score: int | None
    match_reasons: list[str] = []
    match_details: dict[str, int] = {}
    match_source: str | None = None
    is_favorite: bool = False
    calculated_at: datetime | None = None


class MatchListResponse(BaseModel):
    items: list[MatchResponse]
    total: int


class MatchRefreshRequest(BaseModel):
    job_ids: list[str] | None = Field(default=None, max_length=500)


class JobCreate(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    company: str = Field(min_length=1, max_length=300)
    description: str = Field(default="", max_length=50000)
    source: str | None = None
    external_id: str | None = None
    company_logo_url: str | None = None
    skills_required: list[str] = []
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    salary_currency: str = "USD"
    experience_level: ExperienceLevel | None = None
    location: str | None = None
    location_type: LocationType | None = None
    job_type: JobType | None = None
    status: JobStatus = "active"
    application_url: str | None = None
    posted_at: datetime | None = None


class JobUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    company: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = Field(default=None, max_length=50000)
    company_logo_url: str | None = None
    skills_required: list[str] | None = None
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    salary_currency: str | None = None
    experience_level: ExperienceLevel | None = None
    location: str | None = None
    location_type: LocationType | None = None
    job_type: JobType | None = None
    status: JobStatus | None = None
    application_url: str | None = None
    posted_at: datetime | None = None
