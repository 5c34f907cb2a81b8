from typing import Any, Callable, Optional

from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.hero import DEFAULT_HERO, MAIN_HERO_DOCUMENT_ID, HeroContent, HeroUpdate
from ..schemas.keys import FireStoreKeys
from ..utils.cdn_uploader import CloudinaryUploader
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription

HERO_SECTION_COLLECTION = DatabaseCollectionNames.HERO_SECTION_COLLECTION_NAME.value
HERO_VIDEOS_FOLDER = "hero_videos"


class FirestoreHeroDB:
    """The landing page banner, a single document at hero_section/mainHero."""

    _instance = None

    def __init__(self, client=None, sync_client=None, uploader: Optional[CloudinaryUploader] = None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.uploader = uploader or CloudinaryUploader()
        self.hero_document = self.client.collection(HERO_SECTION_COLLECTION).document(MAIN_HERO_DOCUMENT_ID)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    async def get_hero(self) -> StandardResponse:
        """Stored hero content, or the defaults when the document does not exist yet."""
        try:
            doc = await self.hero_document.get()
            if not doc.exists:
                return StandardResponse.success(data=HeroContent(id=MAIN_HERO_DOCUMENT_ID), message="Default hero content")
            return StandardResponse.success(data=HeroContent.from_snapshot(doc), message="Hero content fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching hero content")

    async def update_hero(self, update: HeroUpdate) -> StandardResponse:
        try:
            data = update.model_dump(by_alias=True, exclude_none=True)
            if not data:
                return StandardResponse.bad_request("No fields provided for update")
            if "title" in data and not data["title"].strip():
                return StandardResponse.bad_request("Title is required")

            data[FireStoreKeys.updatedAt] = TimeManager.get_utc_now()
            await self.hero_document.set(data, merge=True)
            return await self.get_hero()
        except Exception as e:
            return self._handle_error(e, "updating hero content")

    async def initialize_hero(self) -> StandardResponse:
        try:
            doc = await self.hero_document.get()
            if doc.exists:
                return StandardResponse.success(data=HeroContent.from_snapshot(doc), message="Hero content already initialized")

            data = {**DEFAULT_HERO, "videos": list(DEFAULT_HERO["videos"]), FireStoreKeys.updatedAt: TimeManager.get_utc_now()}
            await self.hero_document.set(data)
            return StandardResponse.success(data=HeroContent.from_document(MAIN_HERO_DOCUMENT_ID, data), message="Hero content initialized", code=ErrorCodes.CREATED)
        except Exception as e:
            return self._handle_error(e, "initializing hero content")

    async def add_video(self, content: bytes, filename: str, content_type: Optional[str] = None) -> StandardResponse:
        """Upload a video to the CDN and append its URL to the banner's playlist."""
        if not (content_type or "").startswith("video/"):
            return StandardResponse.bad_request("Please select a video file")

        uploaded = await self.uploader.upload(content, filename, content_type, folder=HERO_VIDEOS_FOLDER)
        if not uploaded.status:
            return uploaded

        current = await self.get_hero()
        if not current.status:
            return current
        videos = [*current.data.videos, uploaded.data["url"]]
        return await self.update_hero(HeroUpdate(videos=videos))

    async def remove_video(self, video_url: str) -> StandardResponse:
        current = await self.get_hero()
        if not current.status:
            return current
        if video_url not in current.data.videos:
            return StandardResponse.not_found("Video not found")

        videos = [video for video in current.data.videos if video != video_url]
        response = await self.update_hero(HeroUpdate(videos=videos))
        if response.status:
            # bundled videos such as /adi.mp4 are not CDN assets and are left alone
            await self.uploader.destroy_by_url(video_url)
        return response

    def subscribe(self, callback: Callable[[HeroContent], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        sync_client = self._sync_client or FirestoreClient.shared_sync()

        def on_items(items):
            callback(HeroContent.model_validate(items[0]) if items else HeroContent(id=MAIN_HERO_DOCUMENT_ID))

        return SnapshotSubscription(
            sync_client.collection(HERO_SECTION_COLLECTION).document(MAIN_HERO_DOCUMENT_ID),
            on_items,
            on_error=on_error,
            name=f"{HERO_SECTION_COLLECTION}/{MAIN_HERO_DOCUMENT_ID}",
        )
