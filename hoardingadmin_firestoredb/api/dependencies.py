from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..auth.session import AuthSession
from ..context import AdminContext
from ..utils.config import DEFAULT_PAGE_SIZE
from ..utils.error_codes import ErrorCodes
from ..utils.pagination import paginate
from ..utils.standard_response import StandardResponse

bearer_scheme = HTTPBearer(auto_error=False)


def get_context(request: Request) -> AdminContext:
    return request.app.state.context


async def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AdminContext = Depends(get_context),
) -> AuthSession:
    """Staff session of the bearer ID token; 401 without a valid token, 403 for other roles."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=ErrorCodes.UNAUTHORIZED, detail="Missing authentication token")
    response = await context.auth.verify_token(credentials.credentials)
    return response.raise_for_status().data


def require_admin(session: AuthSession = Depends(get_current_session)) -> AuthSession:
    if not session.is_admin:
        raise HTTPException(status_code=ErrorCodes.FORBIDDEN, detail="Admin access only")
    return session


class PageParams:
    def __init__(self, page: int = Query(1, ge=1), per_page: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100)):
        self.page = page
        self.per_page = per_page


def respond(response: StandardResponse) -> StandardResponse:
    return response.raise_for_status()


def respond_page(response: StandardResponse, params: PageParams) -> StandardResponse:
    """Replace a list payload with one page of it."""
    response.raise_for_status()
    return response.model_copy(update={"data": paginate(response.data, params.page, params.per_page)})
