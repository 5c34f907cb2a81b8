from typing import Any, Callable, List, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.contact_message import ContactMessage
from ..schemas.keys import FireStoreKeys
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription
from .users import sort_newest_first

CONTACT_MESSAGES_COLLECTION = DatabaseCollectionNames.CONTACT_MESSAGES_COLLECTION_NAME.value


class FirestoreContactMessagesDB:
    _instance = None

    def __init__(self, client=None, sync_client=None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.messages_collection = self.client.collection(CONTACT_MESSAGES_COLLECTION)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    async def _handle_firestore_error(self, operation: str, error: Exception) -> StandardResponse:
        logger.error(f"❌ Firestore Error ({operation}): {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    async def get_all_messages(self) -> StandardResponse:
        try:
            messages = [ContactMessage.from_snapshot(doc) async for doc in self.messages_collection.stream()]
            return StandardResponse.success(data=sort_newest_first(messages), message="Messages fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error("get_all_messages", e)

    async def get_unread_messages(self) -> StandardResponse:
        try:
            query = self.messages_collection.where(filter=FieldFilter(FireStoreKeys.read, "==", False))
            messages = [ContactMessage.from_snapshot(doc) async for doc in query.stream()]
            return StandardResponse.success(data=sort_newest_first(messages), message="Messages fetched successfully")
        except Exception as e:
            return await self._handle_firestore_error("get_unread_messages", e)

    async def mark_as_read(self, message_id: str, read: bool = True) -> StandardResponse:
        try:
            if not message_id:
                return StandardResponse.bad_request("Message ID is required")

            doc_ref = self.messages_collection.document(message_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Message not found")

            await doc_ref.update({FireStoreKeys.read: read})
            return StandardResponse.success(data=ContactMessage.from_snapshot(doc).model_copy(update={"read": read}), message="Message updated")
        except Exception as e:
            return await self._handle_firestore_error(f"mark_as_read '{message_id}'", e)

    async def delete_message(self, message_id: str) -> StandardResponse:
        try:
            if not message_id:
                return StandardResponse.bad_request("Message ID is required")

            doc_ref = self.messages_collection.document(message_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Message not found")

            await doc_ref.delete()
            logger.info(f"🗑️ Deleted contact message {message_id}")
            return StandardResponse.success(data={"id": message_id}, message="Message deleted successfully")
        except Exception as e:
            return await self._handle_firestore_error(f"delete_message '{message_id}'", e)

    def subscribe(self, callback: Callable[[List[ContactMessage]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        sync_client = self._sync_client or FirestoreClient.shared_sync()
        return SnapshotSubscription(
            sync_client.collection(CONTACT_MESSAGES_COLLECTION),
            lambda items: callback(sort_newest_first([ContactMessage.model_validate(item) for item in items])),
            on_error=on_error,
            name=CONTACT_MESSAGES_COLLECTION,
        )
