from sqlalchemy import Column, String, Integer, Float, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobautoflow.database import Base, JSONType

DEFAULT_AUTO_APPLY_THRESHOLD = 50.0
DEFAULT_AUTO_APPLY_MAX_PER_DAY = 10


class UserPreferences(Base):
    """Per-user search filters and auto-apply settings."""

    __tablename__ = "user_preferences"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    job_types = Column(JSONType, default=list)
    locations = Column(JSONType, default=list)
    remote_preference = Column(String)  # onsite | remote | hybrid | any
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(String, default="USD")
    company_sizes = Column(JSONType, default=list)
    industries = Column(JSONType, default=list)
    experience_levels = Column(JSONType, default=list)
    companies_to_avoid = Column(JSONType, default=list)
    companies_preferred = Column(JSONType, default=list)
    auto_apply_enabled = Column(Boolean, default=False, nullable=False)
    auto_apply_threshold = Column(Float, default=DEFAULT_AUTO_APPLY_THRESHOLD, nullable=False)
    auto_apply_max_per_day = Column(Integer, default=DEFAULT_AUTO_APPLY_MAX_PER_DAY, nullable=False)
    timezone = Column(String, default="UTC")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="preferences")
