from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...context import AdminContext
from ...schemas.user import UserInput, UserUpdate
from ..dependencies import PageParams, get_context, require_admin, respond, respond_page

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("")
async def list_users(search: Optional[str] = Query(None), params: PageParams = Depends(), context: AdminContext = Depends(get_context)):
    response = await context.users.search_users(search) if search else await context.users.get_all_users()
    return respond_page(response, params)


@router.get("/{user_id}")
async def get_user(user_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.users.get_user(user_id))


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_user(user: UserInput, context: AdminContext = Depends(get_context)):
    return respond(await context.users.create_user(user))


@router.put("/{user_id}", dependencies=[Depends(require_admin)])
async def update_user(user_id: str, user: UserUpdate, context: AdminContext = Depends(get_context)):
    return respond(await context.users.update_user(user_id, user))


@router.delete("/{user_id}", dependencies=[Depends(require_admin)])
async def delete_user(user_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.users.delete_user(user_id))


@router.post("/{user_id}/toggle-active", dependencies=[Depends(require_admin)])
async def toggle_user_active(user_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.users.toggle_user_active(user_id))
