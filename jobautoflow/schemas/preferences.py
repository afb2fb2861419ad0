from typing import Literal

from pydantic import BaseModel, Field, field_validator

JobType = Literal["full_time", "part_time", "contract", "freelance", "internship"]
ExperienceLevel = Literal["entry", "mid", "senior", "executive"]
RemotePreference = Literal["onsite", "remote", "hybrid", "any"]


class PreferencesUpdate(BaseModel):
    job_types: list[JobType] | None = None
    locations: list[str] | None = None
    remote_preference: RemotePreference | None = None
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    salary_currency: str | None = Field(default=None, max_length=3)
    company_sizes: list[str] | None = None
    industries: list[str] | None = None
    experience_levels: list[ExperienceLevel] | None = None
    companies_to_avoid: list[str] | None = None
    companies_preferred: list[str] | None = None
    auto_apply_enabled: bool | None = None
    auto_apply_threshold: float | None = Field(default=None, ge=0, le=100)
    auto_apply_max_per_day: int | None = Field(default=None, ge=1, le=100)
    timezone: str | None = None

    @field_validator("auto_apply_enabled", "auto_apply_threshold", "auto_apply_max_per_day", mode="before")
    @classmethod
    def auto_apply_not_null(cls, v):
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v


class PreferencesResponse(BaseModel):
    user_id: str
    job_types: list[str] = []
    locations: list[str] = []
    remote_preference: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str | None = None
    company_sizes: list[str] = []
    industries: list[str] = []
    experience_levels: list[str] = []
    companies_to_avoid: list[str] = []
    companies_preferred: list[str] = []
    auto_apply_enabled: bool = False
    auto_apply_threshold: float = 50.0
    auto_apply_max_per_day: int = 10
    timezone: str | None = None

    class Config:
        from_attributes = True
