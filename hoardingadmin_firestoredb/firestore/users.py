from typing import Any, Callable, Dict, List, Optional

from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.keys import FireStoreKeys
from ..schemas.user import User, UserInput, UserRole, UserUpdate
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_it import time_it
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription

USERS_COLLECTION = DatabaseCollectionNames.USERS_COLLECTION_NAME.value


def sort_newest_first(items: List[Any]) -> List[Any]:
    """Order documents by createdAt descending; documents without it go last."""
    with_time = [item for item in items if getattr(item, "created_at", None) is not None]
    without_time = [item for item in items if getattr(item, "created_at", None) is None]
    return sorted(with_time, key=lambda item: item.created_at, reverse=True) + without_time


class FirestoreUsersDB:
    _shared = None

    def __init__(self, client=None, sync_client=None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.users_collection = self.client.collection(USERS_COLLECTION)

    @classmethod
    def shared(cls):
        if cls._shared is None:
            cls._shared = cls()
        return cls._shared

    async def _handle_firestore_error(self, operation: str, error: Exception) -> StandardResponse:
        """Handle Firestore errors consistently."""
        logger.error(f"❌ Firestore Error ({operation}): {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    def _validate_user_input(self, user: UserInput) -> Optional[StandardResponse]:
        if not user:
            return StandardResponse.bad_request("User data is required")
        if not user.name or not user.name.strip():
            return StandardResponse.bad_request("Name is required")
        if not user.email or not user.email.strip():
            return StandardResponse.bad_request("Email is required")
        return None

    @time_it
    async def get_all_users(self) -> StandardResponse:
        try:
            users = [User.from_snapshot(doc) async for doc in self.users_collection.stream()]
            return StandardResponse.success(data=sort_newest_first(users), message="Users fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error("get_all_users", e)

    async def get_user(self, user_id: str) -> StandardResponse:
        try:
            if not user_id:
                return StandardResponse.bad_request("User ID is required")

            doc = await self.users_collection.document(user_id).get()
            if not doc.exists:
                return StandardResponse.not_found("User not found")

            return StandardResponse.success(data=User.from_snapshot(doc), message="User retrieved successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"get_user '{user_id}'", e)

    async def get_user_document(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Raw profile document, or None. Store errors propagate to the caller."""
        if not user_id:
            return None
        doc = await self.users_collection.document(user_id).get()
        if not doc.exists:
            return None
        return {**(doc.to_dict() or {}), "id": doc.id}

    async def create_user(self, user: UserInput) -> StandardResponse:
        try:
            if validation_error := self._validate_user_input(user):
                return validation_error

            now = TimeManager.get_utc_now()
            data = user.model_dump(by_alias=True, mode="json")
            data[FireStoreKeys.createdAt] = now
            data[FireStoreKeys.updatedAt] = now

            doc_ref = self.users_collection.document()
            await doc_ref.set(data)

            logger.info(f"✅ User created: {doc_ref.id}")
            return StandardResponse.success(data=User.from_document(doc_ref.id, data), message="User created successfully", code=ErrorCodes.CREATED)
        except Exception as e:
            return await self._handle_firestore_error("create_user", e)

    async def create_profile(self, user_id: str, data: Dict[str, Any]) -> StandardResponse:
        """Write the profile of an account created with the auth provider under its uid."""
        try:
            if not user_id:
                return StandardResponse.bad_request("User ID is required")

            now = TimeManager.get_utc_now()
            profile = {**data, FireStoreKeys.createdAt: now, FireStoreKeys.updatedAt: now}
            await self.users_collection.document(user_id).set(profile)
            return StandardResponse.success(data=User.from_document(user_id, profile), message="Profile created successfully", code=ErrorCodes.CREATED)
        except Exception as e:
            return await self._handle_firestore_error(f"create_profile '{user_id}'", e)

    async def update_user(self, user_id: str, user: UserUpdate) -> StandardResponse:
        try:
            if not user_id:
                return StandardResponse.bad_request("User ID is required")

            update_data = user.model_dump(by_alias=True, mode="json", exclude_unset=True, exclude_none=True)
            if not update_data:
                return StandardResponse.bad_request("No fields provided for update")
            if "name" in update_data and not str(update_data["name"]).strip():
                return StandardResponse.bad_request("Name is required")
            if "email" in update_data and not str(update_data["email"]).strip():
                return StandardResponse.bad_request("Email is required")

            doc_ref = self.users_collection.document(user_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("User not found")

            update_data[FireStoreKeys.updatedAt] = TimeManager.get_utc_now()
            await doc_ref.update(update_data)

            return StandardResponse.success(data=User.from_document(user_id, {**doc.to_dict(), **update_data}), message="User updated successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"update_user '{user_id}'", e)

    async def delete_user(self, user_id: str) -> StandardResponse:
        try:
            if not user_id:
                return StandardResponse.bad_request("User ID is required")

            doc_ref = self.users_collection.document(user_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("User not found")

            await doc_ref.delete()
            logger.info(f"🗑️ User deleted: {user_id}")
            return StandardResponse.success(data={"id": user_id}, message="User deleted successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"delete_user '{user_id}'", e)

    async def toggle_user_active(self, user_id: str) -> StandardResponse:
        try:
            response = await self.get_user(user_id)
            if not response.status:
                return response

            active = not response.data.active
            await self.users_collection.document(user_id).update({FireStoreKeys.active: active, FireStoreKeys.updatedAt: TimeManager.get_utc_now()})

            return StandardResponse.success(data=response.data.model_copy(update={"active": active}), message="User status updated")
        except Exception as e:
            return await self._handle_firestore_error(f"toggle_user_active '{user_id}'", e)

    async def get_customers(self) -> StandardResponse:
        """Every user whose role is not admin."""
        response = await self.get_all_users()
        if not response.status:
            return response
        customers = [user for user in response.data if user.role != UserRole.ADMIN.value]
        return StandardResponse.success(data=customers, message="Customers fetched successfully")

    async def search_users(self, term: str) -> StandardResponse:
        response = await self.get_all_users()
        if not response.status or not term:
            return response

        needle = term.strip().lower()
        matches = [
            user
            for user in response.data
            if any(needle in (value or "").lower() for value in (user.name, user.display_name, user.email, user.phone, user.id))
        ]
        return StandardResponse.success(data=matches, message="Users fetched successfully")

    def subscribe(self, callback: Callable[[List[User]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        sync_client = self._sync_client or FirestoreClient.shared_sync()
        return SnapshotSubscription(
            sync_client.collection(USERS_COLLECTION),
            lambda items: callback(sort_newest_first([User.model_validate(item) for item in items])),
            on_error=on_error,
            name=USERS_COLLECTION,
        )
