"""
Firestore database operations module.

This module contains the Firestore-backed data access of the admin panel:
- Client initialization and connection management
- CRUD operations for users, workers, hoardings, bookings and site content
- Snapshot listeners
"""

from .client import FirestoreClient
from .subscriptions import SnapshotStream, SnapshotSubscription
from .users import FirestoreUsersDB
from .workers import FirestoreWorkersDB
from .hoardings import FirestoreHoardingsDB
from .bookings import BookingsState, BookingSystem
from .customers import FirestoreCustomersDB
from .contact_messages import FirestoreContactMessagesDB
from .hero import FirestoreHeroDB
from .media import FirestoreMediaDB
from .notifications import ActivityNotifier, FirestoreNotificationsDB
from .dashboard import FirestoreDashboardDB

__all__ = [
    "ActivityNotifier",
    "BookingSystem",
    "BookingsState",
    "FirestoreClient",
    "FirestoreContactMessagesDB",
    "FirestoreCustomersDB",
    "FirestoreDashboardDB",
    "FirestoreHeroDB",
    "FirestoreHoardingsDB",
    "FirestoreMediaDB",
    "FirestoreNotificationsDB",
    "FirestoreUsersDB",
    "FirestoreWorkersDB",
    "SnapshotStream",
    "SnapshotSubscription",
]
