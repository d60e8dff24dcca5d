"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from khata.api.v1.schemas import UserPreferences
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import AccessRepository, PreferencesRepository
from khata.infrastructure.realtime.feed import ChangeFeed, change_feed

ADMIN_ROLE = "admin"


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_change_feed() -> ChangeFeed:
    """Provide the process-wide change feed"""
    return change_feed


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity, set by the upstream auth gateway"""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-ID header")
    return x_user_id


def require_admin(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> str:
    """Capability check, evaluated once per request"""
    if not AccessRepository(db).has_role(user_id, ADMIN_ROLE):
        raise HTTPException(status_code=403, detail="Admin role required")
    return user_id


def get_preferences(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> UserPreferences:
    """Caller's stored preferences, or defaults for anonymous/new users"""
    if not x_user_id:
        return UserPreferences()
    stored = PreferencesRepository(db).get_preferences(x_user_id)
    return UserPreferences(**stored) if stored else UserPreferences()


def parse_uuid(value: str, entity: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {entity} ID format")
