from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ApplicationStatus = Literal[
    "pending",
    "applied",
    "viewed",
    "shortlisted",
    "interview",
    "offer",
    "rejected",
    "withdrawn",
]


class ApplicationCreate(BaseModel):
    job_id: str
    cover_letter: str | None = Field(default=None, max_length=20000)
    resume_version: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=5000)


class ApplicationUpdate(BaseModel):
    status: ApplicationStatus | None = None
    cover_letter: str | None = Field(default=None, max_length=20000)
    resume_version: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=5000)


class ApplicationJob(BaseModel):
    id: str
    title: str
    company: str
    location: str | None = None
    location_type: str | None = None

    class Config:
        from_attributes = True


class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    status: str
    match_score: int | None = None
    match_reasons: list[str] = []
    cover_letter: str | None = None
    resume_version: str | None = None
    notes: str | None = None
    is_auto_applied: bool = False
    applied_at: datetime | None = None
    created_at: datetime | None = None
    job: ApplicationJob | None = None

    class Config:
        from_attributes = True


class ApplicationListResponse(BaseModel):
    items: list[ApplicationResponse]
    total: int


class ApplicationStats(BaseModel):
    total: int
    by_status: dict[str, int]
    this_week: dict[str, int]


class AutoApplyJob(BaseModel):
    id: str
    title: str | None = None
    company: str | None = None
    match_score: int | None = None


class AutoApplyResponse(BaseModel):
    applications_created: int
    jobs: list[AutoApplyJob] = []
    skipped: list[str] = []
    warnings: list[str] = []
