from fastapi import APIRouter, Depends, Query

from ...context import AdminContext
from ..dependencies import PageParams, get_context, respond, respond_page

router = APIRouter(prefix="/messages", tags=["Contact messages"])


@router.get("")
async def list_messages(unread: bool = Query(False), params: PageParams = Depends(), context: AdminContext = Depends(get_context)):
    response = await context.messages.get_unread_messages() if unread else await context.messages.get_all_messages()
    return respond_page(response, params)


@router.post("/{message_id}/read")
async def mark_read(message_id: str, read: bool = Query(True), context: AdminContext = Depends(get_context)):
    return respond(await context.messages.mark_as_read(message_id, read))


@router.delete("/{message_id}")
async def delete_message(message_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.messages.delete_message(message_id))
