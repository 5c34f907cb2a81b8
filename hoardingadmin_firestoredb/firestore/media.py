from typing import Any, Callable, List, Optional

from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.keys import FireStoreKeys
from ..schemas.media import MediaInput, MediaItem
from ..utils.cdn_uploader import CloudinaryUploader
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription
from .users import sort_newest_first

MEDIA_COLLECTION = DatabaseCollectionNames.MEDIA_COLLECTION_NAME.value
MEDIA_FOLDER = "media"
ALL_CATEGORIES = "all"


class FirestoreMediaDB:
    _instance = None

    def __init__(self, client=None, sync_client=None, uploader: Optional[CloudinaryUploader] = None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.uploader = uploader or CloudinaryUploader()
        self.media_collection = self.client.collection(MEDIA_COLLECTION)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    async def get_all_media(self) -> StandardResponse:
        try:
            items = [MediaItem.from_snapshot(doc) async for doc in self.media_collection.stream()]
            return StandardResponse.success(data=sort_newest_first(items), message="Media fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching media")

    async def get_media(self, media_id: str) -> StandardResponse:
        try:
            if not media_id:
                return StandardResponse.bad_request("Media ID is required")
            doc = await self.media_collection.document(media_id).get()
            if not doc.exists:
                return StandardResponse.not_found("Media not found")
            return StandardResponse.success(data=MediaItem.from_snapshot(doc), message="Media retrieved successfully")
        except Exception as e:
            return self._handle_error(e, f"fetching media '{media_id}'")

    async def create_media(self, media: MediaInput) -> StandardResponse:
        try:
            if not media.title.strip():
                return StandardResponse.bad_request("Title is required")

            now = TimeManager.get_utc_now()
            data = media.model_dump(by_alias=True, exclude_none=True)
            data.update({FireStoreKeys.createdAt: now, FireStoreKeys.updatedAt: now})

            doc_ref = self.media_collection.document()
            await doc_ref.set(data)
            logger.info(f"✅ Media item created: {doc_ref.id}")
            return StandardResponse.success(data=MediaItem.from_document(doc_ref.id, data), message="Media added successfully", code=ErrorCodes.CREATED)
        except Exception as e:
            return self._handle_error(e, "creating media")

    async def update_media(self, media_id: str, media: MediaInput) -> StandardResponse:
        """Update a media item. A replaced image is removed from the CDN."""
        try:
            if not media_id:
                return StandardResponse.bad_request("Media ID is required")
            if not media.title.strip():
                return StandardResponse.bad_request("Title is required")

            doc_ref = self.media_collection.document(media_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Media not found")

            existing = MediaItem.from_snapshot(doc)
            data = media.model_dump(by_alias=True, exclude_none=True)
            data[FireStoreKeys.updatedAt] = TimeManager.get_utc_now()
            await doc_ref.update(data)

            if existing.image_url and media.image_url and existing.image_url != media.image_url:
                await self.uploader.destroy_by_url(existing.image_url)

            updated = MediaItem.from_document(media_id, {**(doc.to_dict() or {}), **data})
            return StandardResponse.success(data=updated, message="Media updated successfully")
        except Exception as e:
            return self._handle_error(e, f"updating media '{media_id}'")

    async def delete_media(self, media_id: str) -> StandardResponse:
        try:
            if not media_id:
                return StandardResponse.bad_request("Media ID is required")

            doc_ref = self.media_collection.document(media_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Media not found")

            existing = MediaItem.from_snapshot(doc)
            if existing.image_url:
                await self.uploader.destroy_by_url(existing.image_url)
            await doc_ref.delete()

            logger.info(f"🗑️ Deleted media item {media_id}")
            return StandardResponse.success(data={"id": media_id}, message="Media deleted successfully")
        except Exception as e:
            return self._handle_error(e, f"deleting media '{media_id}'")

    async def get_media_by_category(self, category: str) -> StandardResponse:
        response = await self.get_all_media()
        if not response.status or not category or category == ALL_CATEGORIES:
            return response
        return StandardResponse.success(data=[item for item in response.data if item.category == category], message=response.message)

    async def search_media(self, term: str) -> StandardResponse:
        response = await self.get_all_media()
        if not response.status or not term:
            return response

        needle = term.lower()
        matches = [
            item
            for item in response.data
            if any(needle in (value or "").lower() for value in (item.title, item.description, item.category))
        ]
        return StandardResponse.success(data=matches, message=response.message)

    async def upload_image(self, content: bytes, filename: str, content_type: Optional[str] = None) -> StandardResponse:
        if content_type and not content_type.startswith("image/"):
            return StandardResponse.bad_request("Please select an image file")
        return await self.uploader.upload(content, filename, content_type, folder=MEDIA_FOLDER)

    def subscribe(self, callback: Callable[[List[MediaItem]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        sync_client = self._sync_client or FirestoreClient.shared_sync()
        return SnapshotSubscription(
            sync_client.collection(MEDIA_COLLECTION),
            lambda items: callback(sort_newest_first([MediaItem.model_validate(item) for item in items])),
            on_error=on_error,
            name=MEDIA_COLLECTION,
        )
