from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..firestore.users import FirestoreUsersDB
from ..schemas.user import User, UserRole
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from .identity import IdentityToolkitClient, IdentityToolkitError

MIN_PASSWORD_LENGTH = 6
STAFF_ROLES = (UserRole.ADMIN.value, UserRole.USER.value)


class AuthSession(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    uid: str
    email: Optional[str] = None
    role: str
    id_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    profile: Optional[User] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class PasswordChange(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str
    current_password: str
    new_password: str
    confirm_password: str


class AdminAuth:
    """
    Admin panel sign-in. Accounts live in Firebase Authentication, roles in users/{uid}.
    Only profiles with role admin or user may enter.
    """

    def __init__(self, identity: Optional[IdentityToolkitClient] = None, users_db: Optional[FirestoreUsersDB] = None):
        self.identity = identity or IdentityToolkitClient()
        self.users_db = users_db or FirestoreUsersDB.shared()

    def _auth_failure(self, error: IdentityToolkitError, operation: str) -> StandardResponse:
        logger.warning(f"⚠️ {operation} rejected: {error.code}")
        return StandardResponse.failure(error.status_code, error.message)

    async def _session_for(self, uid: str, account: dict) -> StandardResponse:
        profile = await self.users_db.get_user_document(uid)
        if profile is None:
            return StandardResponse.forbidden("Access denied. User profile not found.")

        user = User.model_validate(profile)
        if user.role not in STAFF_ROLES:
            return StandardResponse.forbidden("Access denied. Admin or Staff privileges required.")

        session = AuthSession(
            uid=uid,
            email=account.get("email") or user.email,
            role=user.role,
            id_token=account.get("idToken"),
            refresh_token=account.get("refreshToken"),
            expires_in=int(account["expiresIn"]) if account.get("expiresIn") else None,
            profile=user,
        )
        return StandardResponse.success(data=session, message="Signed in successfully")

    async def login(self, email: str, password: str) -> StandardResponse:
        try:
            if not email or not password:
                return StandardResponse.bad_request("Email and password are required")

            account = await self.identity.sign_in_with_password(email, password)
            response = await self._session_for(account["localId"], account)
            if response.status:
                logger.info(f"🔐 {email} signed in as {response.data.role}")
            return response
        except IdentityToolkitError as e:
            return self._auth_failure(e, f"Login for {email}")
        except Exception as e:
            logger.error(f"❌ Error signing in {email}: {str(e)}")
            return StandardResponse.failure(ErrorCodes.get_http_status_code(e), str(e))

    async def signup(self, email: str, password: str, name: str) -> StandardResponse:
        """Create an account and an admin profile for it."""
        try:
            if not name or not name.strip():
                return StandardResponse.bad_request("Name is required")
            if not password or len(password) < MIN_PASSWORD_LENGTH:
                return StandardResponse.bad_request("Password should be at least 6 characters")

            account = await self.identity.sign_up(email, password, display_name=name)
            uid = account["localId"]
            created = await self.users_db.create_profile(uid, {"name": name, "email": email, "role": UserRole.ADMIN.value})
            if not created.status:
                return created

            logger.info(f"✅ Admin account created for {email}")
            return await self._session_for(uid, account)
        except IdentityToolkitError as e:
            return self._auth_failure(e, f"Signup for {email}")
        except Exception as e:
            logger.error(f"❌ Error signing up {email}: {str(e)}")
            return StandardResponse.failure(ErrorCodes.get_http_status_code(e), str(e))

    async def change_password(self, change: PasswordChange) -> StandardResponse:
        try:
            if change.new_password != change.confirm_password:
                return StandardResponse.bad_request("Passwords do not match")
            if len(change.new_password) < MIN_PASSWORD_LENGTH:
                return StandardResponse.bad_request("Password must be at least 6 characters")

            # a fresh sign-in proves the current password and yields a recent token
            account = await self.identity.sign_in_with_password(change.email, change.current_password)
            await self.identity.update_password(account["idToken"], change.new_password)

            logger.info(f"🔑 Password updated for {change.email}")
            return StandardResponse.success(data={"uid": account["localId"]}, message="Password updated successfully")
        except IdentityToolkitError as e:
            return self._auth_failure(e, f"Password change for {change.email}")
        except Exception as e:
            logger.error(f"❌ Error changing password for {change.email}: {str(e)}")
            return StandardResponse.failure(ErrorCodes.get_http_status_code(e), str(e))

    async def update_display_name(self, id_token: str, display_name: str) -> StandardResponse:
        try:
            if not display_name or not display_name.strip():
                return StandardResponse.bad_request("Display name is required")
            await self.identity.update_profile(id_token, display_name.strip())
            return StandardResponse.success(data={"displayName": display_name.strip()}, message="Profile updated successfully")
        except IdentityToolkitError as e:
            return self._auth_failure(e, "Profile update")

    async def verify_token(self, token: str) -> StandardResponse:
        """Resolve a bearer ID token to a staff session; the token itself is not echoed back."""
        try:
            if not token:
                return StandardResponse.unauthorized("Missing authentication token")
            claims = await self.identity.verify_id_token(token)
            uid = claims.get("user_id") or claims.get("sub")
            return await self._session_for(uid, {"email": claims.get("email")})
        except IdentityToolkitError as e:
            return self._auth_failure(e, "Token verification")
        except Exception as e:
            logger.warning(f"⚠️ Invalid authentication token: {str(e)}")
            return StandardResponse.unauthorized("Invalid authentication token")
