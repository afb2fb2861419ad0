from sqlalchemy.orm import Session

from jobautoflow.models.preferences import (
    DEFAULT_AUTO_APPLY_MAX_PER_DAY,
    DEFAULT_AUTO_APPLY_THRESHOLD,
    UserPreferences,
)

LIST_FIELDS = (
    "job_types",
    "locations",
    "company_sizes",
    "industries",
    "experience_levels",
    "companies_to_avoid",
    "companies_preferred",
)

REQUIRED_FIELDS = ("auto_apply_enabled", "auto_apply_threshold", "auto_apply_max_per_day")


def get_by_user(db: Session, user_id: str) -> UserPreferences | None:
    return db.query(UserPreferences).filter(UserPreferences.user_id == user_id).first()


def _new_defaults(user_id: str) -> UserPreferences:
    prefs = UserPreferences(
        user_id=user_id,
        auto_apply_enabled=False,
        auto_apply_threshold=DEFAULT_AUTO_APPLY_THRESHOLD,
        auto_apply_max_per_day=DEFAULT_AUTO_APPLY_MAX_PER_DAY,
    )
    for field in LIST_FIELDS:
        setattr(prefs, field, [])
    return prefs


def get_or_create_default(db: Session, user_id: str) -> UserPreferences:
    prefs = get_by_user(db, user_id)
    if prefs is not None:
        return prefs
    prefs = _new_defaults(user_id)
    db.add(prefs)
    db.commit()
    db.refresh(prefs)
    return prefs


def upsert(db: Session, user_id: str, data: dict) -> UserPreferences:
    prefs = get_by_user(db, user_id)
    if prefs is None:
        prefs = _new_defaults(user_id)
        db.add(prefs)
    for key, value in data.items():
        if key in LIST_FIELDS and value is None:
            value = []
        elif key in REQUIRED_FIELDS and value is None:
            continue
        setattr(prefs, key, value)
    db.commit()
    db.refresh(prefs)
    return prefs


def toggle_auto_apply(db: Session, user_id: str) -> UserPreferences | None:
    prefs = get_by_user(db, user_id)
    if prefs is None:
        return None
    prefs.auto_apply_enabled = not prefs.auto_apply_enabled
    db.commit()
    db.refresh(prefs)
    return prefs
