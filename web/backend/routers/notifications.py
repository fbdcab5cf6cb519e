"""Notifications router: list, show and dismiss user-facing messages."""

from fastapi import APIRouter, Depends, HTTPException, Response

from ytm_proxy.context import AppContext

from ..deps import get_context
from ..schemas import NotificationModel, NotificationRequest

router = APIRouter(prefix="/notifications")


@router.get("", response_model=list[NotificationModel])
async def list_notifications(context: AppContext = Depends(get_context)):
    return [
        NotificationModel(**notification._asdict())
        for notification in context.notifications.get_all()
    ]


@router.post("", response_model=NotificationModel, status_code=201)
async def show_notification(
    request: NotificationRequest, context: AppContext = Depends(get_context)
):
    notification_id = context.notifications.show(
        request.severity, request.title, request.message, request.duration_ms
    )
    return NotificationModel(**context.notifications.get(notification_id)._asdict())


@router.delete("/{notification_id}", status_code=204)
async def remove_notification(notification_id: str, context: AppContext = Depends(get_context)):
    if context.notifications.get(notification_id) is None:
        raise HTTPException(404, "Notification not found")
    context.notifications.remove(notification_id)
    return Response(status_code=204)


@router.delete("", status_code=204)
async def clear_notifications(context: AppContext = Depends(get_context)):
    context.notifications.clear()
    return Response(status_code=204)
