"""
Document schemas and models.

Pydantic models for every stored collection, the derived booking and customer
views, report rows, collection names and Firestore field keys.
"""

from .booking import NOT_AVAILABLE, UNKNOWN_HOARDING, UNKNOWN_USER, Booking, BookingStatus, EnrichedBooking, PaymentStatus
from .collection_names import DatabaseCollectionNames
from .contact_message import ContactMessage
from .customer import UNKNOWN_CUSTOMER_ID, CustomerAggregate
from .dashboard_stats import DashboardStats
from .document import FirestoreDocument
from .hero import DEFAULT_HERO, MAIN_HERO_DOCUMENT_ID, HeroContent, HeroUpdate
from .hoarding import BookingRate, Category, CategoryInput, Hoarding, HoardingInput
from .keys import FireStoreKeys
from .media import MediaInput, MediaItem
from .notification import Notification, NotificationCategory, NotificationInput, NotificationType
from .report import BookingTrend, LocationPerformance, MonthlyRevenue, ReportData, StatusSlice
from .user import User, UserInput, UserRole, UserUpdate
from .worker import TaskInput, Worker, WorkerInput, WorkerTask

__all__ = [
    "Booking",
    "BookingRate",
    "BookingStatus",
    "BookingTrend",
    "Category",
    "CategoryInput",
    "ContactMessage",
    "CustomerAggregate",
    "DashboardStats",
    "DatabaseCollectionNames",
    "DEFAULT_HERO",
    "EnrichedBooking",
    "FireStoreKeys",
    "FirestoreDocument",
    "HeroContent",
    "HeroUpdate",
    "Hoarding",
    "HoardingInput",
    "LocationPerformance",
    "MAIN_HERO_DOCUMENT_ID",
    "MediaInput",
    "MediaItem",
    "MonthlyRevenue",
    "NOT_AVAILABLE",
    "Notification",
    "NotificationCategory",
    "NotificationInput",
    "NotificationType",
    "PaymentStatus",
    "ReportData",
    "StatusSlice",
    "TaskInput",
    "UNKNOWN_CUSTOMER_ID",
    "UNKNOWN_HOARDING",
    "UNKNOWN_USER",
    "User",
    "UserInput",
    "UserRole",
    "UserUpdate",
    "Worker",
    "WorkerInput",
    "WorkerTask",
]
