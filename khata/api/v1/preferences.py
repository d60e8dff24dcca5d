"""/v1/preferences - per-user preferences"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from khata.api.v1.schemas import UserPreferences
from khata.api.dependencies import get_current_user_id, get_preferences
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import PreferencesRepository

router = APIRouter()


@router.get("/preferences", response_model=UserPreferences)
def read_preferences(
    _: str = Depends(get_current_user_id),
    preferences: UserPreferences = Depends(get_preferences),
):
    """Stored preferences, falling back to service defaults"""
    return preferences


@router.put("/preferences", response_model=UserPreferences)
def replace_preferences(
    body: UserPreferences,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    saved = PreferencesRepository(db).save_preferences(user_id, body.model_dump(mode="json"))
    db.commit()
    return UserPreferences(**saved)
