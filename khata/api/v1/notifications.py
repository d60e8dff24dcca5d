"""/v1/notifications - notification feed"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from khata.api.v1.schemas import (
    NotificationCreate,
    NotificationResponse,
    NotificationListResponse,
    NotificationCategory,
)
from khata.api.v1.converters import notification_response
from khata.api.dependencies import get_request_id, get_change_feed, parse_uuid
from khata.infrastructure.database.session import get_db
from khata.infrastructure.database.repositories import NotificationRepository
from khata.infrastructure.realtime.feed import ChangeFeed
from khata.domain.models import ChangeEvent

router = APIRouter()


def _load_notification(db: Session, notification_id: str):
    db_notification = NotificationRepository(db).get_notification(parse_uuid(notification_id, "notification"))
    if not db_notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return db_notification


@router.get("/notifications", response_model=NotificationListResponse)
def list_notifications(
    category: Optional[NotificationCategory] = Query(None),
    unread_only: bool = Query(False),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    repo = NotificationRepository(db)
    notifications = repo.list_notifications(category=category, unread_only=unread_only, search=search)
    unread_count = len(repo.list_notifications(unread_only=True))
    return NotificationListResponse(
        notifications=[notification_response(n) for n in notifications],
        unread_count=unread_count,
    )


@router.post("/notifications", response_model=NotificationResponse, status_code=201)
def create_notification(
    body: NotificationCreate,
    request: Request,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    try:
        db_notification = NotificationRepository(db).create_notification(**body.model_dump())
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to create notification: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = notification_response(db_notification)
    feed.publish(ChangeEvent(table="notifications", kind="insert", record=response.model_dump(mode="json")))
    return response


@router.patch("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    db_notification = _load_notification(db, notification_id)
    NotificationRepository(db).mark_read(db_notification)
    db.commit()

    response = notification_response(db_notification)
    feed.publish(ChangeEvent(table="notifications", kind="update", record=response.model_dump(mode="json")))
    return response


@router.post("/notifications/read-all")
def mark_all_notifications_read(db: Session = Depends(get_db)):
    updated = NotificationRepository(db).mark_all_read()
    db.commit()
    return {"updated": updated}


@router.delete("/notifications/{notification_id}", status_code=204)
def delete_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    db_notification = _load_notification(db, notification_id)
    record_id = str(db_notification.id)
    NotificationRepository(db).delete_notification(db_notification)
    db.commit()

    feed.publish(ChangeEvent(table="notifications", kind="delete", record={"id": record_id}))
    return Response(status_code=204)
