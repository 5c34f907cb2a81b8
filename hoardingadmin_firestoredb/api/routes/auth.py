from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...auth.session import AuthSession
from ...context import AdminContext
from ..dependencies import get_context, get_current_session, respond

router = APIRouter(tags=["Auth"])


class LoginSchema(BaseModel):
    email: str
    password: str


class SignupSchema(LoginSchema):
    name: str


@router.post("/login")
async def login(data: LoginSchema, context: AdminContext = Depends(get_context)):
    return respond(await context.auth.login(data.email, data.password))


@router.post("/signup")
async def signup(data: SignupSchema, context: AdminContext = Depends(get_context)):
    return respond(await context.auth.signup(data.email, data.password, data.name))


@router.get("/me")
async def me(session: AuthSession = Depends(get_current_session)):
    return session
