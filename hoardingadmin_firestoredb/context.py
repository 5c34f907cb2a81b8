from typing import Any, List, Optional

from .auth.identity import IdentityToolkitClient
from .auth.session import AdminAuth
from .firestore.bookings import BookingSystem
from .firestore.client import FirestoreClient
from .firestore.contact_messages import FirestoreContactMessagesDB
from .firestore.customers import FirestoreCustomersDB
from .firestore.dashboard import FirestoreDashboardDB
from .firestore.hero import FirestoreHeroDB
from .firestore.hoardings import FirestoreHoardingsDB
from .firestore.media import FirestoreMediaDB
from .firestore.notifications import ActivityNotifier, FirestoreNotificationsDB
from .firestore.users import FirestoreUsersDB
from .firestore.workers import FirestoreWorkersDB
from .reports.builder import ReportsBuilder
from .utils.cdn_uploader import CloudinaryUploader
from .utils.logger import logger
from .utils.status_policy import TransitionPolicy


class AdminContext:
    """
    Every data-access object of the admin panel built around one client pair.

    Listeners opened through `track` (or the notifier) are torn down by `close()`.

        async with AdminContext() as ctx:
            stats = await ctx.dashboard.get_dashboard_stats()
    """

    def __init__(
        self,
        client=None,
        sync_client=None,
        identity: Optional[IdentityToolkitClient] = None,
        uploader: Optional[CloudinaryUploader] = None,
        policy: Optional[TransitionPolicy] = None,
    ):
        if client is None:
            firestore_client = FirestoreClient.instance()
            client, sync_client = firestore_client.client, sync_client or firestore_client.sync_client
        self.client = client
        self.sync_client = sync_client
        self.identity = identity or IdentityToolkitClient()
        self.uploader = uploader or CloudinaryUploader()

        self.users = FirestoreUsersDB(client, sync_client)
        self.workers = FirestoreWorkersDB(client, sync_client, identity=self.identity)
        self.hoardings = FirestoreHoardingsDB(client, sync_client, uploader=self.uploader)
        self.bookings = BookingSystem(client, sync_client, users_db=self.users, hoardings_db=self.hoardings, policy=policy)
        self.customers = FirestoreCustomersDB(self.bookings, self.users)
        self.messages = FirestoreContactMessagesDB(client, sync_client)
        self.hero = FirestoreHeroDB(client, sync_client, uploader=self.uploader)
        self.media = FirestoreMediaDB(client, sync_client, uploader=self.uploader)
        self.notifications = FirestoreNotificationsDB(client, sync_client)
        self.dashboard = FirestoreDashboardDB(self.users, self.bookings, self.hoardings, self.messages)
        self.reports = ReportsBuilder(self.bookings, self.hoardings)
        self.auth = AdminAuth(self.identity, self.users)
        self.notifier = ActivityNotifier(self.notifications, sync_client)

        self._subscriptions: List[Any] = []

    def track(self, subscription):
        """Keep a listener (anything with `unsubscribe()`) until the context closes."""
        self._subscriptions.append(subscription)
        return subscription

    @property
    def open_subscriptions(self) -> int:
        return len(self._subscriptions)

    def close(self):
        if self.notifier.running:
            self.notifier.stop()
        while self._subscriptions:
            subscription = self._subscriptions.pop()
            try:
                subscription.unsubscribe()
            except Exception as e:
                logger.warning(f"⚠️ Failed to stop a listener: {e}")
        logger.debug("🔌 Admin context closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
