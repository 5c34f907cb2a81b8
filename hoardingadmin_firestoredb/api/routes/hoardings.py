from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...context import AdminContext
from ...schemas.hoarding import CategoryInput, HoardingInput
from ...utils.booking_filters import HoardingFilterCriteria, filter_hoardings
from ..dependencies import PageParams, get_context, respond, respond_page

router = APIRouter(tags=["Hoardings"])


def hoarding_filters(
    search: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    availability: str = Query("all"),
    category: Optional[str] = Query(None),
    min_rating: float = Query(0, alias="minRating"),
    trending: bool = Query(False),
) -> HoardingFilterCriteria:
    return HoardingFilterCriteria(
        search=search,
        min_price=min_price,
        max_price=max_price,
        availability=availability,
        category=category,
        min_rating=min_rating,
        trending=trending,
    )


# Categories


@router.get("/categories")
async def list_categories(active_only: bool = Query(False, alias="activeOnly"), context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.get_categories(active_only=active_only))


@router.put("/categories")
async def save_category(category: CategoryInput, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.save_category(category))


@router.delete("/categories/{category_name}")
async def delete_category(category_name: str, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.delete_category(category_name))


# Hoardings


@router.get("/hoardings")
async def list_hoardings(
    criteria: HoardingFilterCriteria = Depends(hoarding_filters),
    params: PageParams = Depends(),
    context: AdminContext = Depends(get_context),
):
    response = respond(await context.hoardings.get_all_hoardings())
    return respond_page(response.model_copy(update={"data": filter_hoardings(response.data, criteria)}), params)


@router.get("/hoardings/{hoarding_id}")
async def get_hoarding(hoarding_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.find_hoarding(hoarding_id))


@router.get("/categories/{category_name}/hoardings")
async def list_category_hoardings(category_name: str, params: PageParams = Depends(), context: AdminContext = Depends(get_context)):
    return respond_page(await context.hoardings.get_hoardings_by_category(category_name), params)


@router.post("/hoardings", status_code=201)
async def create_hoarding(hoarding: HoardingInput, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.create_hoarding(hoarding))


@router.put("/categories/{category_name}/hoardings/{hoarding_id}")
async def update_hoarding(category_name: str, hoarding_id: str, hoarding: HoardingInput, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.update_hoarding(category_name, hoarding_id, hoarding))


@router.delete("/categories/{category_name}/hoardings/{hoarding_id}")
async def delete_hoarding(category_name: str, hoarding_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.delete_hoarding(category_name, hoarding_id))


@router.post("/categories/{category_name}/hoardings/{hoarding_id}/toggle-availability")
async def toggle_availability(category_name: str, hoarding_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.hoardings.toggle_availability(category_name, hoarding_id))


@router.post("/hoardings/images")
async def upload_hoarding_image(request: Request, filename: str = Query("image"), context: AdminContext = Depends(get_context)):
    """Raw image bytes in the body, type in the Content-Type header."""
    content = await request.body()
    return respond(await context.hoardings.upload_image(content, filename, request.headers.get("content-type")))
