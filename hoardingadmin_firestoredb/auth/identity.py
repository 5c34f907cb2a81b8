import asyncio
from functools import partial
from typing import Any, Dict, Optional

import requests
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from ..utils.config import FIREBASE_WEB_API_KEY, GOOGLE_CLOUD_PROJECT_ID
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts"
REQUEST_TIMEOUT_SECONDS = 30

# Identity Toolkit error codes mapped to what the admin screens show
AUTH_ERROR_MESSAGES = {
    "EMAIL_EXISTS": "This email is already registered",
    "WEAK_PASSWORD": "Password should be at least 6 characters",
    "INVALID_EMAIL": "Invalid email address",
    "EMAIL_NOT_FOUND": "Invalid email or password",
    "INVALID_PASSWORD": "Invalid email or password",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password",
    "USER_DISABLED": "This account has been disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later",
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": "Please sign in again before changing your password",
    "TOKEN_EXPIRED": "Please sign in again before changing your password",
    "INVALID_ID_TOKEN": "Your session has expired. Please sign in again",
}

_ERROR_STATUS = {
    "EMAIL_EXISTS": ErrorCodes.CONFLICT,
    "WEAK_PASSWORD": ErrorCodes.BAD_REQUEST,
    "INVALID_EMAIL": ErrorCodes.BAD_REQUEST,
    "TOO_MANY_ATTEMPTS_TRY_LATER": ErrorCodes.SERVICE_UNAVAILABLE,
}


class IdentityToolkitError(Exception):
    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or AUTH_ERROR_MESSAGES.get(code, code)
        self.status_code = _ERROR_STATUS.get(code, ErrorCodes.UNAUTHORIZED)
        super().__init__(self.message)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "IdentityToolkitError":
        raw = (payload.get("error") or {}).get("message") or "UNKNOWN_ERROR"
        # e.g. "WEAK_PASSWORD : Password should be at least 6 characters"
        code = raw.split(":", 1)[0].strip()
        return cls(code)


class IdentityToolkitClient:
    """Email and password accounts through the Firebase Authentication REST API."""

    def __init__(self, api_key: str = FIREBASE_WEB_API_KEY, project_id: str = GOOGLE_CLOUD_PROJECT_ID, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.project_id = project_id
        self.session = session or requests.Session()

    def _post_sync(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.post(
            f"{IDENTITY_TOOLKIT_URL}:{action}", params={"key": self.api_key}, json=payload, timeout=REQUEST_TIMEOUT_SECONDS
        )
        data = response.json() if response.content else {}
        if not response.ok:
            error = IdentityToolkitError.from_payload(data)
            logger.warning(f"⚠️ Identity Toolkit {action} failed: {error.code}")
            raise error
        return data

    async def _post(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise IdentityToolkitError("CONFIGURATION_NOT_FOUND", "Authentication is not configured")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self._post_sync, action, payload))

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        return await self._post("signInWithPassword", {"email": email, "password": password, "returnSecureToken": True})

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Dict[str, Any]:
        account = await self._post("signUp", {"email": email, "password": password, "returnSecureToken": True})
        if display_name:
            await self.update_profile(account["idToken"], display_name)
        return account

    async def update_password(self, id_token: str, new_password: str) -> Dict[str, Any]:
        return await self._post("update", {"idToken": id_token, "password": new_password, "returnSecureToken": True})

    async def update_profile(self, id_token: str, display_name: str) -> Dict[str, Any]:
        return await self._post("update", {"idToken": id_token, "displayName": display_name, "returnSecureToken": False})

    async def verify_id_token(self, token: str) -> Dict[str, Any]:
        """Verify a Firebase ID token and return its claims (uid under "user_id")."""
        loop = asyncio.get_running_loop()
        claims = await loop.run_in_executor(
            None, partial(google_id_token.verify_firebase_token, token, google_requests.Request(), audience=self.project_id or None)
        )
        if not claims:
            raise IdentityToolkitError("INVALID_ID_TOKEN")
        return claims
