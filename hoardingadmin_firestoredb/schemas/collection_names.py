from enum import Enum


class DatabaseCollectionNames(Enum):
    USERS_COLLECTION_NAME = "users"
    WORKERS_COLLECTION_NAME = "workers"
    WORKER_TASKS_SUBCOLLECTION_NAME = "tasks"
    BOOKINGS_COLLECTION_NAME = "bookings"
    CATEGORIES_COLLECTION_NAME = "categories"
    HOARDINGS_SUBCOLLECTION_NAME = "hoardings"
    # flat collection that predates the category partitioning, read only by the migration
    LEGACY_HOARDINGS_COLLECTION_NAME = "hoardings"
    CONTACT_MESSAGES_COLLECTION_NAME = "contactMessages"
    HERO_SECTION_COLLECTION_NAME = "hero_section"
    MEDIA_COLLECTION_NAME = "media"
    NOTIFICATIONS_COLLECTION_NAME = "notifications"
