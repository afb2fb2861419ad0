from sqlalchemy import Column, String, Text, Integer, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from jobautoflow.database import Base, JSONType


class UserProfile(Base):
    """Candidate attributes the match scorer reads. One per user."""

    __tablename__ = "user_profiles"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    headline = Column(String)
    summary = Column(Text)
    skills = Column(JSONType, default=list)
    experience_years = Column(Integer)
    preferred_roles = Column(JSONType, default=list)
    industries = Column(JSONType, default=list)
    location = Column(String)
    salary_min = Column(Integer)
    salary_max = Column(Integer)
    salary_currency = Column(String, default="USD")
    linkedin_url = Column(String)
    portfolio_url = Column(String)
    github_url = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="profile")
