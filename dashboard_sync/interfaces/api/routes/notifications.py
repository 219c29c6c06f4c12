"""Endpoints exposing the notification store to the local UI."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dashboard_sync.application.use_cases import SyncSession
from dashboard_sync.domain.entities import Notification
from dashboard_sync.interfaces.api.dependencies import get_sync_session
from dashboard_sync.interfaces.api.schemas import (
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationRead,
    UnreadCountRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id,
        title=notification.title,
        message=notification.message,
        severity=notification.severity,
        recipients=sorted(notification.recipients),
        viewer_id=notification.viewer_id,
        read=notification.read,
        action_type=notification.action_type,
        meta=notification.meta,
        created_at=notification.created_at,
    )


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = Query(False, description="Return only unread notifications"),
    session: SyncSession = Depends(get_sync_session),
) -> list[NotificationRead]:
    """Return the notifications visible to the signed-in viewer, newest first."""

    if unread_only:
        notifications = session.store.list_unread_for(session.viewer)
    else:
        notifications = session.store.visible_to(session.viewer)
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread-count", response_model=UnreadCountRead)
def read_unread_count(session: SyncSession = Depends(get_sync_session)) -> UnreadCountRead:
    return UnreadCountRead(unread=session.store.unread_count(session.viewer))


@router.post("/read", response_model=NotificationMarkReadResponse)
def mark_notifications_read(
    payload: NotificationMarkReadRequest,
    session: SyncSession = Depends(get_sync_session),
) -> NotificationMarkReadResponse:
    """Mark the listed notifications as read; unknown ids are ignored."""

    updated = session.store.mark_many_read(payload.unique_ids(), viewer=session.viewer)
    return NotificationMarkReadResponse(updated=updated)


@router.post("/read-all", response_model=NotificationMarkReadResponse)
def mark_all_notifications_read(
    session: SyncSession = Depends(get_sync_session),
) -> NotificationMarkReadResponse:
    updated = session.store.mark_all_read(session.viewer)
    return NotificationMarkReadResponse(updated=updated)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(
    notification_id: str,
    session: SyncSession = Depends(get_sync_session),
) -> None:
    notification = session.store.get(notification_id)
    if notification is None or not notification.is_visible_to(session.viewer):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    session.store.remove(notification_id)


__all__ = ["router"]
