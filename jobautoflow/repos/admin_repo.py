"""Admin dashboard stats across users, applications and jobs."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from jobautoflow.models.application import Application
from jobautoflow.models.job import Job
from jobautoflow.models.user import User


def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def get_stats(db: Session) -> dict:
    """Return admin dashboard stats."""
    now = datetime.now(timezone.utc)
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)
    return {
        "users": {
            "total": _count(db, User.id),
            "active": _count(db, User.id, User.is_active == True),  # noqa: E712
            "admins": _count(db, User.id, User.is_admin == True),  # noqa: E712
            "new_this_week": _count(db, User.id, User.created_at >= week_ago),
            "new_this_month": _count(db, User.id, User.created_at >= month_ago),
        },
        "applications": {
            "total": _count(db, Application.id),
            "auto_applied": _count(db, Application.id, Application.is_auto_applied == True),  # noqa: E712
            "this_week": _count(db, Application.id, Application.created_at >= week_ago),
            "this_month": _count(db, Application.id, Application.created_at >= month_ago),
        },
        "jobs": {
            "total": _count(db, Job.id),
            "active": _count(db, Job.id, Job.status == "active"),
            "new_this_week": _count(db, Job.id, Job.created_at >= week_ago),
        },
    }
