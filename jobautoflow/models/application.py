from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobautoflow.database import Base, JSONType

APPLICATION_STATUSES = (
    "pending",
    "applied",
    "viewed",
    "shortlisted",
    "interview",
    "offer",
    "rejected",
    "withdrawn",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("user_id", "job_id", name="uq_applications_user_job"),)

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(String, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, default="pending", nullable=False)
    match_score = Column(Integer)  # snapshot at creation, not re-synced with the cache
    match_reasons = Column(JSONType, default=list)
    cover_letter = Column(Text)
    resume_version = Column(String)
    notes = Column(Text)
    is_auto_applied = Column(Boolean, default=False, nullable=False)
    applied_at = Column(DateTime(timezone=True))
    # Set in Python (UTC) so the daily auto-apply count compares like with like.
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="applications")
    job = relationship("Job", back_populates="applications")
