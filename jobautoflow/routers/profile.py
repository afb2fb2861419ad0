import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from jobautoflow.config import settings
from jobautoflow.core.errors import NotFoundError
from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_user
from jobautoflow.models.user import User
from jobautoflow.repos.profile_repo import get_by_user, upsert
from jobautoflow.schemas.profile import ProfileResponse, ProfileUpdate
from jobautoflow.services.match_refresh_service import refresh_matches_in_background

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    profile = get_by_user(db, user.id)
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


@router.put("", response_model=ProfileResponse)
def update_profile(
    data: ProfileUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create or update the caller's profile. Cached matches are recomputed in the background."""
    profile = upsert(db, user.id, data.model_dump(exclude_unset=True))
    logger.info("Profile saved for user=%s", user.id)
    if settings.match_refresh_on_profile_update:
        background_tasks.add_task(refresh_matches_in_background, user.id)
    return profile
