from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...context import AdminContext
from ...schemas.media import MediaInput
from ..dependencies import PageParams, get_context, respond, respond_page

router = APIRouter(prefix="/media", tags=["Media"])


@router.get("")
async def list_media(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    params: PageParams = Depends(),
    context: AdminContext = Depends(get_context),
):
    if search:
        response = await context.media.search_media(search)
    else:
        response = await context.media.get_media_by_category(category or "all")
    return respond_page(response, params)


@router.get("/{media_id}")
async def get_media(media_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.media.get_media(media_id))


@router.post("", status_code=201)
async def create_media(media: MediaInput, context: AdminContext = Depends(get_context)):
    return respond(await context.media.create_media(media))


@router.put("/{media_id}")
async def update_media(media_id: str, media: MediaInput, context: AdminContext = Depends(get_context)):
    return respond(await context.media.update_media(media_id, media))


@router.delete("/{media_id}")
async def delete_media(media_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.media.delete_media(media_id))


@router.post("/images")
async def upload_media_image(request: Request, filename: str = Query("image"), context: AdminContext = Depends(get_context)):
    content = await request.body()
    return respond(await context.media.upload_image(content, filename, request.headers.get("content-type")))
