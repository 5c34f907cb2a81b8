import os
import shutil
import subprocess
from typing import Optional
from unittest.mock import AsyncMock, Mock

from google.auth import default
from google.cloud import firestore
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials

from ..utils.config import GOOGLE_CLOUD_PROJECT_ID, LOCAL_ENV, TESTING
from ..utils.logger import logger


class FirestoreClient:
    """
    Resolves credentials once and hands out the async client used for reads and writes
    plus the sync client used for snapshot listeners (the async client has no on_snapshot).
    """

    is_initialized = None

    def __init__(self, client=None, sync_client=None):
        if client is not None:
            self.client = client
            self.sync_client = sync_client
            return

        # Check if we're in a testing environment
        if TESTING:
            logger.info("🧪 Test environment detected - using mock Firestore client")
            self.client = self._create_mock_client()
            self.sync_client = Mock()
            return

        try:
            credentials = self._resolve_credentials()
            self.client = firestore.AsyncClient(project=GOOGLE_CLOUD_PROJECT_ID or None, credentials=credentials)
            self.sync_client = firestore.Client(project=GOOGLE_CLOUD_PROJECT_ID or None, credentials=credentials)
            logger.info("✅ Firestore clients initialized")
        except Exception as e:
            logger.error(f"❌ FIRESTORE CLIENT Failed to authenticate: {e}")
            raise

    def _resolve_credentials(self):
        if LOCAL_ENV:
            # Find gcloud dynamically, fallback to "gcloud" if not found
            gcloud_cmd = shutil.which("gcloud") or "gcloud"

            # Use local gcloud CLI token
            access_token = subprocess.check_output([gcloud_cmd, "auth", "print-access-token"]).decode("utf-8").strip()
            return Credentials(access_token)

        # Try to use Application Default Credentials first
        try:
            credentials, _ = default()
            logger.info("✅ Using Application Default Credentials (ADC).")
            return credentials
        except Exception as adc_error:
            logger.warning(f"⚠️ ADC not available: {adc_error}")

        # Fallback to service account files
        service_account_files = []
        google_creds_file = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if google_creds_file:
            service_account_files.append(google_creds_file)
        service_account_files.extend(["firebase_cred.json", "serviceAccountKey.json"])

        for sa_file in service_account_files:
            if not os.path.exists(sa_file):
                continue
            try:
                credentials = service_account.Credentials.from_service_account_file(
                    sa_file, scopes=["https://www.googleapis.com/auth/cloud-platform"]
                )
                logger.info(f"✅ Using service account file: {sa_file}")
                return credentials
            except Exception as sa_error:
                logger.warning(f"⚠️ Failed to load {sa_file}: {sa_error}")

        raise RuntimeError(
            "❌ No valid authentication method found. "
            "Please ensure either ADC is set up or a valid service account file is available."
        )

    def _create_mock_client(self):
        """Create a mock Firestore client for testing."""

        def mock_collection(collection_name):
            mock_collection_instance = Mock()

            def mock_document(doc_id=None):
                mock_doc = Mock()
                mock_doc.id = doc_id or "mock-id"
                mock_doc.get = AsyncMock(return_value=Mock(exists=False))
                mock_doc.set = AsyncMock()
                mock_doc.update = AsyncMock()
                mock_doc.delete = AsyncMock()
                mock_doc.collection = Mock(side_effect=mock_collection)
                mock_doc.reference = mock_doc
                return mock_doc

            async def empty_stream(*args, **kwargs):
                for item in []:
                    yield item

            mock_query = Mock()
            mock_query.stream = Mock(side_effect=empty_stream)
            mock_query.get = AsyncMock(return_value=[])
            mock_query.where = Mock(return_value=mock_query)
            mock_query.order_by = Mock(return_value=mock_query)
            mock_query.limit = Mock(return_value=mock_query)

            mock_collection_instance.document = Mock(side_effect=mock_document)
            mock_collection_instance.where = mock_query.where
            mock_collection_instance.order_by = mock_query.order_by
            mock_collection_instance.limit = mock_query.limit
            mock_collection_instance.stream = mock_query.stream
            mock_collection_instance.get = mock_query.get
            return mock_collection_instance

        mock_client = Mock()
        mock_client.collection = Mock(side_effect=mock_collection)
        mock_client.collection_group = Mock(side_effect=mock_collection)
        return mock_client

    @classmethod
    def instance(cls) -> "FirestoreClient":
        if cls.is_initialized is None:
            cls.is_initialized = FirestoreClient()
        return cls.is_initialized

    @classmethod
    def shared(cls):
        return cls.instance().client

    @classmethod
    def shared_sync(cls):
        return cls.instance().sync_client

    @classmethod
    def use(cls, client, sync_client: Optional[object] = None) -> "FirestoreClient":
        """Install an already-built client pair, e.g. an emulator client or a test double."""
        cls.is_initialized = FirestoreClient(client=client, sync_client=sync_client)
        return cls.is_initialized

    @classmethod
    def reset(cls):
        cls.is_initialized = None
