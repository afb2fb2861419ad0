import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_user
from jobautoflow.schemas.auth import UserRegister, UserLogin, Token, UserResponse, PasswordChange, UserStats
from jobautoflow.core.security import verify_password, create_access_token, hash_password
from jobautoflow.repos.user_repo import get_by_email, create as create_user, delete_user, update as update_user
from jobautoflow.services.application_service import get_user_dashboard_stats
from jobautoflow.repos.profile_repo import get_by_user as get_profile
from jobautoflow.models.user import User

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _user_to_response(user: User, has_profile: bool) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        has_profile=has_profile,
        is_admin=getattr(user, "is_admin", False),
    )


@router.post("/register", response_model=Token)
def register(data: UserRegister, db: Session = Depends(get_db)):
    try:
        if get_by_email(db, data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )
        user = create_user(db, data.email, data.password, data.first_name, data.last_name)
        logger.info("User registered: %s", user.email)
        token = create_access_token(user.id)
        return Token(access_token=token, user=_user_to_response(user, has_profile=False))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Register failed for email=%s: %s", data.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Registration failed") from e


@router.post("/login", response_model=Token)
def login(data: UserLogin, db: Session = Depends(get_db)):
    try:
        user = get_by_email(db, data.email)
        if not user or not verify_password(data.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is disabled",
            )
        logger.info("User logged in: %s", user.email)
        has_profile = get_profile(db, user.id) is not None
        token = create_access_token(user.id)
        return Token(access_token=token, user=_user_to_response(user, has_profile))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Login failed for email=%s: %s", data.email, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed") from e


@router.get("/me", response_model=UserResponse)
def get_me(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    has_profile = get_profile(db, user.id) is not None
    return _user_to_response(user, has_profile)


@router.put("/me/password")
def change_password(
    data: PasswordChange,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(data.current_password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )
    update_user(db, user.id, password_hash=hash_password(data.new_password))
    logger.info("Password changed: %s", user.email)
    return {"message": "Password changed"}


@router.get("/me/stats", response_model=UserStats)
def get_my_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Dashboard numbers for the signed-in user."""
    return get_user_dashboard_stats(db, user.id)


@router.delete("/account")
def delete_account(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        logger.info("Account deleted: %s", user.email)
        delete_user(db, user.id)
        return {"message": "Account deleted"}
    except Exception as e:
        logger.exception("Account delete failed for user=%s: %s", user.id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete account") from e
