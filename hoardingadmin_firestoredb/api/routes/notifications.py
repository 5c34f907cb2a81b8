from fastapi import APIRouter, Depends, Query

from ...context import AdminContext
from ...schemas.notification import NotificationInput
from ...utils.config import NOTIFICATION_RETENTION_DAYS
from ..dependencies import get_context, respond

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(unread: bool = Query(False), context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.get_notifications(unread_only=unread))


@router.get("/unread-count")
async def unread_count(context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.get_unread_count())


@router.post("", status_code=201)
async def add_notification(notification: NotificationInput, context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.add_notification(notification))


@router.post("/read-all")
async def mark_all_read(context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.mark_all_as_read())


@router.post("/purge")
async def purge(days: int = Query(NOTIFICATION_RETENTION_DAYS, ge=1), context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.purge_older_than(days))


@router.post("/{notification_id}/read")
async def mark_read(notification_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.mark_as_read(notification_id))


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.delete_notification(notification_id))


@router.delete("")
async def clear_all(context: AdminContext = Depends(get_context)):
    return respond(await context.notifications.clear_all())
