from sqlalchemy import or_
from sqlalchemy.orm import Session

from jobautoflow.models.user import User
from jobautoflow.core.security import hash_password, generate_id


def get_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def get_by_id(db: Session, user_id: str) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def create(
    db: Session,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
) -> User:
    user = User(
        id=generate_id(),
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: str) -> bool:
    """Delete user and everything hanging off it (profile, preferences, matches, applications)."""
    user = get_by_id(db, user_id)
    if not user:
        return False
    db.delete(user)
    db.commit()
    return True


def update(
    db: Session,
    user_id: str,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    password_hash: str | None = None,
    is_admin: bool | None = None,
    is_active: bool | None = None,
) -> User | None:
    user = get_by_id(db, user_id)
    if not user:
        return None
    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    if password_hash is not None:
        user.password_hash = password_hash
    if is_admin is not None:
        user.is_admin = is_admin
    if is_active is not None:
        user.is_active = is_active
    db.commit()
    db.refresh(user)
    return user


def get_all_users_paginated(
    db: Session,
    search: str | None = None,
    is_active: bool | None = None,
    is_admin: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[User], int]:
    """List users, newest first, with optional email/name search. Returns (items, total)."""
    q = db.query(User)
    if search and search.strip():
        term = f"%{search.strip()}%"
        q = q.filter(or_(User.email.ilike(term), User.first_name.ilike(term), User.last_name.ilike(term)))
    if is_active is not None:
        q = q.filter(User.is_active == is_active)
    if is_admin is not None:
        q = q.filter(User.is_admin == is_admin)
    total = q.count()
    items = q.order_by(User.created_at.desc()).offset(offset).limit(limit).all()
    return items, total
