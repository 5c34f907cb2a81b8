from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ...auth.session import AuthSession, PasswordChange
from ...context import AdminContext
from ..dependencies import get_context, get_current_session, respond

router = APIRouter(prefix="/settings", tags=["Settings"])


class PasswordForm(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_password: str
    new_password: str
    confirm_password: str


class ProfileForm(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    display_name: str
    id_token: str


@router.post("/password")
async def change_password(form: PasswordForm, session: AuthSession = Depends(get_current_session), context: AdminContext = Depends(get_context)):
    change = PasswordChange(email=session.email or "", **form.model_dump())
    return respond(await context.auth.change_password(change))


@router.post("/profile")
async def update_profile(form: ProfileForm, context: AdminContext = Depends(get_context)):
    return respond(await context.auth.update_display_name(form.id_token, form.display_name))


@router.get("/status-policy")
async def status_policy(context: AdminContext = Depends(get_context)):
    return {"policy": context.bookings.policy.value}
