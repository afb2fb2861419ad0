from sqlalchemy import Column, String, Text, Integer, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobautoflow.database import Base, JSONType

EXPERIENCE_LEVELS = ("entry", "mid", "senior", "executive")
LOCATION_TYPES = ("onsite", "remote", "hybrid")
JOB_TYPES = ("full_time", "part_time", "contract", "freelance", "internship")
JOB_STATUSES = ("active", "expired", "filled", "closed")


class Job(Base):
    """Posting ingested from an external portal. Read-only for matching."""

    __tablename__ = "jobs"
    __table_args__ = (UniqueConstraint("source", "external_id", name="uq_jobs_source_external_id"),)

    id = Column(String, primary_key=True, index=True)
    source = Column(String)
    external_id = Column(String)
    title = Column(String, nullable=False)
    company = Column(String, nullable=False, index=True)
    company_logo_url = Column(String)
    description = Column(Text, nullable=False, default="")
    skills_required = Column(JSONType, default=list)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(String, default="USD")
    experience_level = Column(String)  # entry | mid | senior | executive
    location = Column(String)
    location_type = Column(String)  # onsite | remote | hybrid
    job_type = Column(String)  # full_time | part_time | contract | freelance | internship
    status = Column(String, default="active", index=True)  # active | expired | filled | closed
    application_url = Column(String)
    posted_at = Column(DateTime(timezone=True))
    view_count = Column(Integer, default=0, nullable=False)
    application_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan", passive_deletes=True)
    user_matches = relationship("JobMatchCache", back_populates="job", cascade="all, delete-orphan", passive_deletes=True)
