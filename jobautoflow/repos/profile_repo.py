from sqlalchemy.orm import Session

from jobautoflow.models.profile import UserProfile

LIST_FIELDS = ("skills", "preferred_roles", "industries")


def get_by_user(db: Session, user_id: str) -> UserProfile | None:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def upsert(db: Session, user_id: str, data: dict) -> UserProfile:
    """Create the profile on first save, otherwise update only the given fields."""
    profile = get_by_user(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id)
        for field in LIST_FIELDS:
            setattr(profile, field, [])
        db.add(profile)
    for key, value in data.items():
        if key in LIST_FIELDS and value is None:
            value = []
        setattr(profile, key, value)
    db.commit()
    db.refresh(profile)
    return profile
