from fastapi import APIRouter, Depends, Query, Request

from ...context import AdminContext
from ...schemas.hero import HeroUpdate
from ..dependencies import get_context, respond

router = APIRouter(prefix="/hero", tags=["Hero"])


@router.get("")
async def get_hero(context: AdminContext = Depends(get_context)):
    return respond(await context.hero.get_hero())


@router.put("")
async def update_hero(update: HeroUpdate, context: AdminContext = Depends(get_context)):
    return respond(await context.hero.update_hero(update))


@router.post("/initialize")
async def initialize_hero(context: AdminContext = Depends(get_context)):
    return respond(await context.hero.initialize_hero())


@router.post("/videos")
async def add_video(request: Request, filename: str = Query("video"), context: AdminContext = Depends(get_context)):
    """Raw video bytes in the body, type in the Content-Type header."""
    content = await request.body()
    return respond(await context.hero.add_video(content, filename, request.headers.get("content-type")))


@router.delete("/videos")
async def remove_video(url: str = Query(...), context: AdminContext = Depends(get_context)):
    return respond(await context.hero.remove_video(url))
