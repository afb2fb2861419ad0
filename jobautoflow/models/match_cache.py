from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from jobautoflow.database import Base, JSONType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobMatchCache(Base):
    """
    Last computed match for a (user, job) pair plus the user's flags.
    match_score is NULL until a scoring pass runs (unscored placeholder
    created by favorite/hide), never a fake 0.
    """

    __tablename__ = "job_match_cache"
    __table_args__ = (UniqueConstraint("user_id", "job_id", name="uq_match_cache_user_job"),)

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id = Column(String, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    match_score = Column(Integer, nullable=True)
    match_reasons = Column(JSONType)
    match_details = Column(JSONType)
    match_source = Column(String)  # ai | fallback
    is_favorite = Column(Boolean, default=False, nullable=False)
    is_hidden = Column(Boolean, default=False, nullable=False)
    calculated_at = Column(DateTime(timezone=True), default=_utcnow)

    user = relationship("User", back_populates="job_matches")
    job = relationship("Job", back_populates="user_matches")

    @property
    def is_scored(self) -> bool:
        return self.match_score is not None
