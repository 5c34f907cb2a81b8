import asyncio
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..schemas.collection_names import DatabaseCollectionNames
from .logger import logger
from .time_now import TimeManager

LEGACY_HOARDINGS = DatabaseCollectionNames.LEGACY_HOARDINGS_COLLECTION_NAME.value
CATEGORIES = DatabaseCollectionNames.CATEGORIES_COLLECTION_NAME.value
HOARDINGS = DatabaseCollectionNames.HOARDINGS_SUBCOLLECTION_NAME.value
BATCH_LIMIT = 500


class MigrationResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_hoardings: int = 0
    migrated: int = 0
    failed: int = 0
    deleted: int = 0
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    category_mapping: Dict[str, int] = Field(default_factory=dict)


class VerificationResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    old_collection_count: int = 0
    new_structure_count: int = 0
    category_counts: Dict[str, int] = Field(default_factory=dict)

    @property
    def matches(self) -> bool:
        return self.old_collection_count == self.new_structure_count


class HoardingsMigration:
    """
    Moves hoardings from the flat `hoardings/{id}` collection into
    `categories/{category}/hoardings/{id}`, keeping document ids.
    """

    def __init__(self, client=None):
        if client is None:
            # Lazy import to avoid circular dependency
            from ..firestore.client import FirestoreClient

            client = FirestoreClient.shared()
        self.client = client

    async def _ensure_category(self, category_name: str):
        await self.client.collection(CATEGORIES).document(category_name).set({"name": category_name}, merge=True)

    async def _delete_in_batches(self, doc_refs: list) -> int:
        deleted = 0
        for start in range(0, len(doc_refs), BATCH_LIMIT):
            batch = self.client.batch()
            chunk = doc_refs[start : start + BATCH_LIMIT]
            for doc_ref in chunk:
                batch.delete(doc_ref)
            await batch.commit()
            deleted += len(chunk)
        return deleted

    async def migrate(self, delete_old_data: bool = False) -> MigrationResult:
        logger.info("🚀 Starting hoarding migration...")
        result = MigrationResult()

        legacy_docs = [doc async for doc in self.client.collection(LEGACY_HOARDINGS).stream()]
        result.total_hoardings = len(legacy_docs)
        if not legacy_docs:
            logger.warning("⚠️ No hoardings found to migrate")
            return result

        known_categories = set()
        migrated_refs = []
        for doc in legacy_docs:
            data = doc.to_dict() or {}
            category_name = data.get("category")
            title = data.get("title")

            if not category_name:
                logger.warning(f"⚠️ No category found for hoarding '{title}'. Skipping...")
                result.failed += 1
                result.errors.append({"hoardingId": doc.id, "title": title, "error": "No category specified"})
                continue

            try:
                if category_name not in known_categories:
                    await self._ensure_category(category_name)
                    known_categories.add(category_name)

                target = self.client.collection(CATEGORIES).document(category_name).collection(HOARDINGS).document(doc.id)
                await target.set({**data, "migratedAt": TimeManager.get_utc_now()})

                migrated_refs.append(doc.reference)
                result.migrated += 1
                result.category_mapping[category_name] = result.category_mapping.get(category_name, 0) + 1
                logger.debug(f"✅ Migrated: {title} → {CATEGORIES}/{category_name}/{HOARDINGS}/{doc.id}")
            except Exception as e:
                logger.error(f"❌ Failed to migrate hoarding {doc.id}: {str(e)}")
                result.failed += 1
                result.errors.append({"hoardingId": doc.id, "title": title, "error": str(e)})

        if delete_old_data and migrated_refs:
            logger.info(f"🗑️ Deleting {len(migrated_refs)} migrated hoardings from the old collection...")
            try:
                result.deleted = await self._delete_in_batches(migrated_refs)
            except Exception as e:
                logger.error(f"❌ Error deleting old collection: {str(e)}")
                result.errors.append({"error": f"Failed to delete old collection: {str(e)}"})

        logger.info(f"📊 Migration finished: {result.migrated}/{result.total_hoardings} migrated, {result.failed} failed")
        return result

    async def verify(self) -> VerificationResult:
        logger.info("🔍 Verifying migration...")
        result = VerificationResult()

        async for _ in self.client.collection(LEGACY_HOARDINGS).stream():
            result.old_collection_count += 1

        async for category_doc in self.client.collection(CATEGORIES).stream():
            count = 0
            async for _ in self.client.collection(CATEGORIES).document(category_doc.id).collection(HOARDINGS).stream():
                count += 1
            result.category_counts[category_doc.id] = count
            result.new_structure_count += count

        if result.matches:
            logger.info("✅ Migration verified successfully!")
        else:
            logger.warning(f"⚠️ Count mismatch detected! old={result.old_collection_count} new={result.new_structure_count}")
        return result


async def _main(delete_old_data: bool):
    migration = HoardingsMigration()
    result = await migration.migrate(delete_old_data=delete_old_data)
    print(result.model_dump_json(by_alias=True, indent=2))
    verification = await migration.verify()
    print(verification.model_dump_json(by_alias=True, indent=2))


if __name__ == "__main__":
    import sys

    asyncio.run(_main(delete_old_data="--delete-old" in sys.argv))
