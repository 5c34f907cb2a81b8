"""
Database module for the hoarding admin backend.

This module contains the admin panel's data layer:
- Firestore database operations and snapshot listeners
- Booking enrichment, customer aggregation, filtering and status transitions
- Authentication, CDN uploads, reports and exports
- Database schemas and models
"""

__version__ = "1.0.0"

# Core database classes
from .firestore.client import FirestoreClient
from .firestore.subscriptions import SnapshotStream, SnapshotSubscription
from .firestore.users import FirestoreUsersDB
from .firestore.workers import FirestoreWorkersDB
from .firestore.hoardings import FirestoreHoardingsDB
from .firestore.bookings import BookingsState, BookingSystem
from .firestore.customers import FirestoreCustomersDB
from .firestore.contact_messages import FirestoreContactMessagesDB
from .firestore.hero import FirestoreHeroDB
from .firestore.media import FirestoreMediaDB
from .firestore.notifications import ActivityNotifier, FirestoreNotificationsDB
from .firestore.dashboard import FirestoreDashboardDB
from .context import AdminContext

# Booking core
from .utils.booking_enrichment import enrich_booking, enrich_bookings
from .utils.customer_aggregator import aggregate_customers
from .utils.booking_filters import BookingFilterCriteria, filter_bookings, filter_customers
from .utils.status_policy import TransitionPolicy, validate_status_transition

# Schemas and models
from .schemas.collection_names import DatabaseCollectionNames
from .schemas.keys import FireStoreKeys
from .utils.standard_response import StandardResponse

__all__ = [
    "__version__",
    # Firestore classes
    "FirestoreClient",
    "SnapshotStream",
    "SnapshotSubscription",
    "FirestoreUsersDB",
    "FirestoreWorkersDB",
    "FirestoreHoardingsDB",
    "BookingSystem",
    "BookingsState",
    "FirestoreCustomersDB",
    "FirestoreContactMessagesDB",
    "FirestoreHeroDB",
    "FirestoreMediaDB",
    "FirestoreNotificationsDB",
    "ActivityNotifier",
    "FirestoreDashboardDB",
    "AdminContext",
    # Booking core
    "enrich_booking",
    "enrich_bookings",
    "aggregate_customers",
    "BookingFilterCriteria",
    "filter_bookings",
    "filter_customers",
    "TransitionPolicy",
    "validate_status_transition",
    # Schemas
    "DatabaseCollectionNames",
    "FireStoreKeys",
    "StandardResponse",
]
