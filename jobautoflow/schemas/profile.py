from pydantic import BaseModel, Field, field_validator


class ProfileUpdate(BaseModel):
    headline: str | None = Field(default=None, max_length=200)
    summary: str | None = Field(default=None, max_length=5000)
    skills: list[str] | None = None
    experience_years: int | None = Field(default=None, ge=0, le=70)
    preferred_roles: list[str] | None = None
    industries: list[str] | None = None
    location: str | None = Field(default=None, max_length=200)
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    salary_currency: str | None = Field(default=None, max_length=3)
    linkedin_url: str | None = None
    portfolio_url: str | None = None
    github_url: str | None = None

    @field_validator("skills", "preferred_roles", "industries")
    @classmethod
    def strip_blank_entries(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [item.strip() for item in v if item and item.strip()]


class ProfileResponse(BaseModel):
    user_id: str
    headline: str | None = None
    summary: str | None = None
    skills: list[str] = []
    experience_years: int | None = None
    preferred_roles: list[str] = []
    industries: list[str] = []
    location: str | None = None
    salary_min: int | None = None
    salary_max: int | None = None
    salary_currency: str | None = None
    linkedin_url: str | None = None
    portfolio_url: str | None = None
    github_url: str | None = None

    class Config:
        from_attributes = True
