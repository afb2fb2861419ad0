import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from jobautoflow.database import get_db
from jobautoflow.dependencies import get_current_user
from jobautoflow.models.user import User
from jobautoflow.repos.preferences_repo import get_or_create_default, toggle_auto_apply, upsert
from jobautoflow.schemas.preferences import PreferencesResponse, PreferencesUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=PreferencesResponse)
def get_preferences(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_or_create_default(db, user.id)


@router.put("", response_model=PreferencesResponse)
def update_preferences(
    data: PreferencesUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prefs = upsert(db, user.id, data.model_dump(exclude_unset=True))
    logger.info(
        "Preferences saved for user=%s auto_apply=%s threshold=%s max_per_day=%s",
        user.id, prefs.auto_apply_enabled, prefs.auto_apply_threshold, prefs.auto_apply_max_per_day,
    )
    return prefs


@router.post("/auto-apply/toggle", response_model=PreferencesResponse)
def toggle_auto_apply_setting(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Flip auto-apply on or off. Creates default preferences first if none exist."""
    get_or_create_default(db, user.id)
    prefs = toggle_auto_apply(db, user.id)
    logger.info("Auto-apply toggled for user=%s: enabled=%s", user.id, prefs.auto_apply_enabled)
    return prefs
