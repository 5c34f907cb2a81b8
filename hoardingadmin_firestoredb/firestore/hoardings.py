import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

from async_lru import alru_cache

from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.hoarding import Category, CategoryInput, Hoarding, HoardingInput
from ..schemas.keys import FireStoreKeys
from ..utils.cdn_uploader import CloudinaryUploader
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_it import time_it
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription
from .users import sort_newest_first

CATEGORIES_COLLECTION = DatabaseCollectionNames.CATEGORIES_COLLECTION_NAME.value
HOARDINGS_SUBCOLLECTION = DatabaseCollectionNames.HOARDINGS_SUBCOLLECTION_NAME.value


def category_of(snapshot) -> Optional[str]:
    """Category name from a categories/{name}/hoardings/{id} snapshot; None for the legacy flat collection."""
    parent_doc = snapshot.reference.parent.parent
    return parent_doc.id if parent_doc is not None else None


def sort_categories(categories: List[Category]) -> List[Category]:
    # categories without an order go after the ordered ones
    return sorted(categories, key=lambda category: (category.order is None, category.order or 0))


# indexing: collection group "hoardings" on createdAt
class FirestoreHoardingsDB:
    """
    Hoarding inventory, partitioned as categories/{categoryName}/hoardings/{hoardingId}.

    The category document id is the category name. Listing everything goes through a
    collection group query; a hoarding id alone is resolved by probing each category.
    """

    _instance = None

    def __init__(self, client=None, sync_client=None, uploader: Optional[CloudinaryUploader] = None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.uploader = uploader or CloudinaryUploader()
        self.categories_collection = self.client.collection(CATEGORIES_COLLECTION)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    def _hoardings_of(self, category_name: str):
        return self.categories_collection.document(category_name).collection(HOARDINGS_SUBCOLLECTION)

    def _validate_hoarding(self, hoarding: HoardingInput) -> Optional[StandardResponse]:
        if not hoarding:
            return StandardResponse.bad_request("Hoarding data is required")
        if not hoarding.title or not hoarding.title.strip():
            return StandardResponse.bad_request("Title is required")
        if not hoarding.location or not hoarding.location.strip():
            return StandardResponse.bad_request("Location is required")
        if not hoarding.size or not hoarding.size.strip():
            return StandardResponse.bad_request("Size is required")
        try:
            price = float(hoarding.price)
        except (TypeError, ValueError):
            return StandardResponse.bad_request("Please enter a valid price")
        if price < 0:
            return StandardResponse.bad_request("Please enter a valid price")
        if not hoarding.category or not hoarding.category.strip():
            return StandardResponse.bad_request("Category is required")
        return None

    def _hoarding_payload(self, hoarding: HoardingInput) -> Dict[str, Any]:
        data = hoarding.model_dump(by_alias=True, mode="json")
        data["price"] = float(hoarding.price)
        # empty form values are not written
        return {key: value for key, value in data.items() if value is not None and value != ""}

    # Categories

    @alru_cache(maxsize=1)
    async def _load_categories(self) -> List[Category]:
        categories = [Category.from_snapshot(doc) async for doc in self.categories_collection.stream()]
        return sort_categories(categories)

    def _invalidate_categories(self):
        self._load_categories.cache_clear()

    async def get_categories(self, active_only: bool = False) -> StandardResponse:
        try:
            categories = await self._load_categories()
            if active_only:
                categories = [category for category in categories if category.active]
            return StandardResponse.success(data=list(categories), message="Categories fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching categories")

    async def save_category(self, category: CategoryInput) -> StandardResponse:
        try:
            if not category or not category.name or not category.name.strip():
                return StandardResponse.bad_request("Category name is required")

            name = category.name.strip()
            doc_ref = self.categories_collection.document(name)
            doc = await doc_ref.get()

            data = category.model_dump(by_alias=True)
            data["name"] = name
            if not doc.exists:
                data[FireStoreKeys.createdAt] = TimeManager.get_utc_now()
            await doc_ref.set(data, merge=True)
            self._invalidate_categories()

            merged = {**(doc.to_dict() or {}), **data} if doc.exists else data
            return StandardResponse.success(data=Category.from_document(name, merged), message="Category saved successfully")
        except Exception as e:
            return self._handle_error(e, "saving category")

    async def delete_category(self, category_name: str) -> StandardResponse:
        """Delete an empty category. Categories still holding hoardings are refused."""
        try:
            if not category_name:
                return StandardResponse.bad_request("Category name is required")

            doc_ref = self.categories_collection.document(category_name)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Category not found")

            async for _ in self._hoardings_of(category_name).limit(1).stream():
                return StandardResponse.conflict("Category still has hoardings. Move or delete them first")

            await doc_ref.delete()
            self._invalidate_categories()
            return StandardResponse.success(data={"id": category_name}, message="Category deleted successfully")
        except Exception as e:
            return self._handle_error(e, f"deleting category '{category_name}'")

    async def ensure_category_exists(self, category_name: str) -> StandardResponse:
        try:
            if not category_name:
                return StandardResponse.bad_request("Category name is required")
            await self.categories_collection.document(category_name).set({"name": category_name}, merge=True)
            self._invalidate_categories()
            return StandardResponse.success(data={"id": category_name})
        except Exception as e:
            return self._handle_error(e, f"ensuring category '{category_name}'")

    # Hoardings

    @time_it
    async def get_all_hoardings(self) -> StandardResponse:
        try:
            hoardings = []
            async for doc in self.client.collection_group(HOARDINGS_SUBCOLLECTION).stream():
                category_name = category_of(doc)
                if category_name is None:
                    continue
                hoardings.append(Hoarding.from_snapshot(doc, categoryName=category_name))
            return StandardResponse.success(data=sort_newest_first(hoardings), message="Hoardings fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching hoardings")

    async def get_hoardings_by_category(self, category_name: str) -> StandardResponse:
        try:
            if not category_name:
                return StandardResponse.bad_request("Category name is required")
            hoardings = [Hoarding.from_snapshot(doc, categoryName=category_name) async for doc in self._hoardings_of(category_name).stream()]
            return StandardResponse.success(data=sort_newest_first(hoardings), message="Hoardings fetched successfully")
        except Exception as e:
            return self._handle_error(e, f"fetching hoardings of category '{category_name}'")

    async def _find_snapshot(self, hoarding_id: str):
        category_ids = [doc.id async for doc in self.categories_collection.stream()]
        snapshots = await asyncio.gather(*(self._hoardings_of(name).document(hoarding_id).get() for name in category_ids))
        for category_name, snapshot in zip(category_ids, snapshots):
            if snapshot.exists:
                return category_name, snapshot
        return None, None

    async def get_hoarding_document(self, hoarding_id: str) -> Optional[Dict[str, Any]]:
        """Raw hoarding document from whichever category holds it, or None. Store errors propagate."""
        if not hoarding_id:
            return None
        category_name, snapshot = await self._find_snapshot(hoarding_id)
        if snapshot is None:
            return None
        return {**(snapshot.to_dict() or {}), "id": snapshot.id, "categoryName": category_name}

    async def find_hoarding(self, hoarding_id: str) -> StandardResponse:
        try:
            if not hoarding_id:
                return StandardResponse.bad_request("Hoarding ID is required")
            data = await self.get_hoarding_document(hoarding_id)
            if data is None:
                return StandardResponse.not_found("Hoarding not found")
            return StandardResponse.success(data=Hoarding.model_validate(data), message="Hoarding retrieved successfully")
        except Exception as e:
            return self._handle_error(e, f"finding hoarding '{hoarding_id}'")

    async def build_lookup(self) -> Callable[[str], Awaitable[Optional[Dict[str, Any]]]]:
        """
        Load every partitioned hoarding once and return an async resolver over that snapshot,
        for enriching a whole booking list without probing categories per id.
        """
        index = {}
        async for doc in self.client.collection_group(HOARDINGS_SUBCOLLECTION).stream():
            category_name = category_of(doc)
            if category_name is not None:
                index[doc.id] = {**(doc.to_dict() or {}), "id": doc.id, "categoryName": category_name}

        async def resolve(hoarding_id: str) -> Optional[Dict[str, Any]]:
            return index.get(hoarding_id)

        return resolve

    async def create_hoarding(self, hoarding: HoardingInput) -> StandardResponse:
        try:
            if validation_error := self._validate_hoarding(hoarding):
                return validation_error

            category_name = hoarding.category.strip()
            ensured = await self.ensure_category_exists(category_name)
            if not ensured.status:
                return ensured

            data = self._hoarding_payload(hoarding)
            data[FireStoreKeys.createdAt] = TimeManager.get_utc_now()

            doc_ref = self._hoardings_of(category_name).document()
            await doc_ref.set(data)

            logger.info(f"✅ Hoarding created: {CATEGORIES_COLLECTION}/{category_name}/{HOARDINGS_SUBCOLLECTION}/{doc_ref.id}")
            return StandardResponse.success(
                data=Hoarding.from_document(doc_ref.id, data, categoryName=category_name), message="Hoarding added successfully", code=ErrorCodes.CREATED
            )
        except Exception as e:
            return self._handle_error(e, "creating hoarding")

    async def update_hoarding(self, category_name: str, hoarding_id: str, hoarding: HoardingInput) -> StandardResponse:
        """Update a hoarding in place. Moving to another category copies it there and removes the old document."""
        try:
            if not category_name or not hoarding_id:
                return StandardResponse.bad_request("Category and hoarding ID are required")
            if validation_error := self._validate_hoarding(hoarding):
                return validation_error

            doc_ref = self._hoardings_of(category_name).document(hoarding_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Hoarding not found")

            existing = doc.to_dict() or {}
            data = self._hoarding_payload(hoarding)
            data[FireStoreKeys.updatedAt] = TimeManager.get_utc_now()

            if existing.get("imageUrl") and data.get("imageUrl") and existing["imageUrl"] != data["imageUrl"]:
                await self.uploader.destroy_by_url(existing["imageUrl"])

            target_category = hoarding.category.strip()
            if target_category != category_name:
                ensured = await self.ensure_category_exists(target_category)
                if not ensured.status:
                    return ensured
                await self._hoardings_of(target_category).document(hoarding_id).set({**existing, **data})
                await doc_ref.delete()
            else:
                await doc_ref.update(data)

            return StandardResponse.success(
                data=Hoarding.from_document(hoarding_id, {**existing, **data}, categoryName=target_category), message="Hoarding updated successfully"
            )
        except Exception as e:
            return self._handle_error(e, f"updating hoarding '{hoarding_id}'")

    async def delete_hoarding(self, category_name: str, hoarding_id: str) -> StandardResponse:
        try:
            if not category_name or not hoarding_id:
                return StandardResponse.bad_request("Category and hoarding ID are required")

            doc_ref = self._hoardings_of(category_name).document(hoarding_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Hoarding not found")

            image_url = (doc.to_dict() or {}).get("imageUrl")
            await doc_ref.delete()
            if image_url:
                await self.uploader.destroy_by_url(image_url)

            return StandardResponse.success(data={"id": hoarding_id, "categoryName": category_name}, message="Hoarding deleted successfully")
        except Exception as e:
            return self._handle_error(e, f"deleting hoarding '{hoarding_id}'")

    async def toggle_availability(self, category_name: str, hoarding_id: str) -> StandardResponse:
        try:
            doc_ref = self._hoardings_of(category_name).document(hoarding_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Hoarding not found")

            hoarding = Hoarding.from_snapshot(doc, categoryName=category_name)
            availability = not hoarding.availability
            await doc_ref.update({"availability": availability, FireStoreKeys.updatedAt: TimeManager.get_utc_now()})
            return StandardResponse.success(data=hoarding.model_copy(update={"availability": availability}), message="Availability updated")
        except Exception as e:
            return self._handle_error(e, f"toggling availability of hoarding '{hoarding_id}'")

    async def upload_image(self, content: bytes, filename: str, content_type: Optional[str] = None) -> StandardResponse:
        if content_type and not content_type.startswith("image/"):
            return StandardResponse.bad_request("Please select an image file")
        return await self.uploader.upload(content, filename, content_type)

    def subscribe(self, callback: Callable[[List[Hoarding]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        """Live list of all partitioned hoardings."""
        sync_client = self._sync_client or FirestoreClient.shared_sync()

        def to_item(doc) -> Optional[Dict[str, Any]]:
            # the legacy flat collection shares the group name; keep only partitioned documents
            category_name = category_of(doc)
            if category_name is None:
                return None
            return {**(doc.to_dict() or {}), "id": doc.id, "categoryName": category_name}

        return SnapshotSubscription(
            sync_client.collection_group(HOARDINGS_SUBCOLLECTION),
            lambda items: callback(sort_newest_first([Hoarding.model_validate(item) for item in items])),
            on_error=on_error,
            name=HOARDINGS_SUBCOLLECTION,
            to_item=to_item,
        )
