import copy
import os
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

os.environ.setdefault("TESTING", "true")

import pytest
from google.api_core import exceptions as google_exceptions

from hoardingadmin_firestoredb.auth.identity import IdentityToolkitError
from hoardingadmin_firestoredb.context import AdminContext
from hoardingadmin_firestoredb.firestore.client import FirestoreClient
from hoardingadmin_firestoredb.utils.cdn_uploader import CloudinaryUploader
from hoardingadmin_firestoredb.utils.standard_response import StandardResponse
from hoardingadmin_firestoredb.utils.status_policy import TransitionPolicy


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# In-memory Firestore


class ChangeType(Enum):
    ADDED = 1
    REMOVED = 2
    MODIFIED = 3


class FakeChange:
    def __init__(self, type: ChangeType, document: "FakeSnapshot"):
        self.type = type
        self.document = document


class FakeSnapshot:
    def __init__(self, store: "FakeFirestore", path: str, data: Optional[Dict[str, Any]]):
        self._store = store
        self._data = copy.deepcopy(data)
        self.reference = FakeDocumentReference(store, path)
        self.id = self.reference.id

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)

    def get(self, field: str) -> Any:
        return (self._data or {}).get(field)


class FakeWatch:
    """Synchronous listener: fires once on registration, then after every write that changes its result."""

    def __init__(self, store: "FakeFirestore", target, callback):
        self._store = store
        self._target = target
        self._callback = callback
        self._last: Dict[str, Dict[str, Any]] = {}
        self.active = True
        store._watches.append(self)
        self.refresh(initial=True)

    def _current(self) -> List[FakeSnapshot]:
        if isinstance(self._target, FakeDocumentReference):
            return [self._target._snapshot()]
        return self._target._snapshots()

    def refresh(self, initial: bool = False):
        if not self.active:
            return
        docs = self._current()
        current = {doc.reference.path: doc for doc in docs if doc.exists}

        changes = []
        for path, doc in current.items():
            if path not in self._last:
                changes.append(FakeChange(ChangeType.ADDED, doc))
            elif self._last[path] != doc.to_dict():
                changes.append(FakeChange(ChangeType.MODIFIED, doc))
        for path, data in self._last.items():
            if path not in current:
                changes.append(FakeChange(ChangeType.REMOVED, FakeSnapshot(self._store, path, data)))

        self._last = {path: doc.to_dict() for path, doc in current.items()}
        if initial or changes:
            self._callback(docs, changes, datetime.now(timezone.utc))

    def unsubscribe(self):
        self.active = False
        if self in self._store._watches:
            self._store._watches.remove(self)


_OPERATORS = {
    "==": lambda field, value: field == value,
    "!=": lambda field, value: field != value,
    "<": lambda field, value: field is not None and field < value,
    "<=": lambda field, value: field is not None and field <= value,
    ">": lambda field, value: field is not None and field > value,
    ">=": lambda field, value: field is not None and field >= value,
    "in": lambda field, value: field in value,
    "array_contains": lambda field, value: isinstance(field, list) and value in field,
}


class FakeQuery:
    def __init__(self, store: "FakeFirestore", path: Optional[str] = None, group: Optional[str] = None):
        self._store = store
        self._path = path
        self._group = group
        self._filters: List[tuple] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None

    def _copy(self) -> "FakeQuery":
        query = FakeQuery(self._store, self._path, self._group)
        query._filters = list(self._filters)
        query._order = self._order
        query._limit = self._limit
        return query

    def where(self, field_path: Optional[str] = None, op_string: Optional[str] = None, value: Any = None, filter=None) -> "FakeQuery":
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        query = self._copy()
        query._filters.append((field_path, op_string, value))
        return query

    def order_by(self, field_path: str, direction: str = "ASCENDING") -> "FakeQuery":
        query = self._copy()
        query._order = (field_path, direction)
        return query

    def limit(self, count: int) -> "FakeQuery":
        query = self._copy()
        query._limit = count
        return query

    def _in_scope(self, path: str) -> bool:
        parent, _ = path.rsplit("/", 1)
        if self._group is not None:
            return parent.rsplit("/", 1)[-1] == self._group
        return parent == self._path

    def _snapshots(self) -> List[FakeSnapshot]:
        self._store._check_read_failure()
        docs = []
        for path, data in self._store.docs.items():
            if not self._in_scope(path):
                continue
            if all(field in data and _OPERATORS[op](data[field], value) for field, op, value in self._filters):
                docs.append(FakeSnapshot(self._store, path, data))
        if self._order is not None:
            field, direction = self._order
            docs.sort(key=lambda doc: doc.get(field), reverse=direction == "DESCENDING")
        if self._limit is not None:
            docs = docs[: self._limit]
        return docs

    async def stream(self):
        for doc in self._snapshots():
            yield doc

    async def get(self) -> List[FakeSnapshot]:
        return self._snapshots()

    def on_snapshot(self, callback) -> FakeWatch:
        return FakeWatch(self._store, self, callback)


class FakeCollection(FakeQuery):
    def __init__(self, store: "FakeFirestore", path: str):
        super().__init__(store, path=path)
        self.id = path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> Optional["FakeDocumentReference"]:
        if "/" not in self._path:
            return None
        return FakeDocumentReference(self._store, self._path.rsplit("/", 1)[0])

    def document(self, document_id: Optional[str] = None) -> "FakeDocumentReference":
        return FakeDocumentReference(self._store, f"{self._path}/{document_id or uuid.uuid4().hex[:20]}")


class FakeDocumentReference:
    def __init__(self, store: "FakeFirestore", path: str):
        self._store = store
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> FakeCollection:
        return FakeCollection(self._store, self.path.rsplit("/", 1)[0])

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self._store, f"{self.path}/{name}")

    def _snapshot(self) -> FakeSnapshot:
        return FakeSnapshot(self._store, self.path, self._store.docs.get(self.path))

    async def get(self) -> FakeSnapshot:
        self._store.reads += 1
        self._store._check_read_failure()
        return self._snapshot()

    async def set(self, data: Dict[str, Any], merge: bool = False):
        self._store._set(self.path, data, merge)

    async def update(self, data: Dict[str, Any]):
        self._store._update(self.path, data)

    async def delete(self):
        self._store._delete(self.path)

    def on_snapshot(self, callback) -> FakeWatch:
        return FakeWatch(self._store, self, callback)


class FakeBatch:
    def __init__(self, store: "FakeFirestore"):
        self._store = store
        self._operations = []

    def set(self, reference: FakeDocumentReference, data: Dict[str, Any], merge: bool = False):
        self._operations.append(lambda: self._store._set(reference.path, data, merge))

    def update(self, reference: FakeDocumentReference, data: Dict[str, Any]):
        self._operations.append(lambda: self._store._update(reference.path, data))

    def delete(self, reference: FakeDocumentReference):
        self._operations.append(lambda: self._store._delete(reference.path))

    async def commit(self):
        self._store.commits += 1
        for operation in self._operations:
            operation()
        self._operations = []


class FakeFirestore:
    """
    Stands in for both the async client (reads and writes) and the sync client (listeners).
    Documents are kept by full path; listeners are called synchronously after each write.
    """

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self._watches: List[FakeWatch] = []
        self.fail_with: Optional[Exception] = None
        self.fail_reads = False
        self.reads = 0
        self.commits = 0

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def collection_group(self, name: str) -> FakeQuery:
        return FakeQuery(self, group=name)

    def batch(self) -> FakeBatch:
        return FakeBatch(self)

    # test helpers

    def seed(self, path: str, data: Dict[str, Any]):
        self._set(path, data, merge=False)

    def data(self, path: str) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self.docs.get(path))

    def ids(self, collection_path: str) -> List[str]:
        return [doc.id for doc in FakeCollection(self, collection_path)._snapshots()]

    @property
    def listener_count(self) -> int:
        return len(self._watches)

    # writes

    def _check_failure(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _check_read_failure(self):
        if self.fail_reads:
            self._check_failure()

    def _set(self, path: str, data: Dict[str, Any], merge: bool):
        self._check_failure()
        data = copy.deepcopy(data)
        self.docs[path] = {**self.docs[path], **data} if merge and path in self.docs else data
        self._notify()

    def _update(self, path: str, data: Dict[str, Any]):
        self._check_failure()
        if path not in self.docs:
            raise google_exceptions.NotFound(f"No document to update: {path}")
        self.docs[path] = {**self.docs[path], **copy.deepcopy(data)}
        self._notify()

    def _delete(self, path: str):
        self._check_failure()
        self.docs.pop(path, None)
        self._notify()

    def _notify(self):
        for watch in list(self._watches):
            watch.refresh()


# Auth and CDN doubles


class FakeIdentity:
    """Email/password accounts held in memory, issuing `token-<uid>` ID tokens."""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.password_updates: List[str] = []

    def _account(self, email: str) -> Dict[str, Any]:
        account = self.accounts[email]
        uid = account["localId"]
        return {"localId": uid, "email": email, "idToken": f"token-{uid}", "refreshToken": f"refresh-{uid}", "expiresIn": "3600"}

    def add_account(self, uid: str, email: str, password: str = "secret123") -> str:
        self.accounts[email] = {"localId": uid, "password": password, "displayName": None}
        return f"token-{uid}"

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Dict[str, Any]:
        if email in self.accounts:
            raise IdentityToolkitError("EMAIL_EXISTS")
        if len(password or "") < 6:
            raise IdentityToolkitError("WEAK_PASSWORD")
        self.accounts[email] = {"localId": f"uid-{len(self.accounts) + 1}", "password": password, "displayName": display_name}
        return self._account(email)

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        account = self.accounts.get(email)
        if account is None or account["password"] != password:
            raise IdentityToolkitError("INVALID_LOGIN_CREDENTIALS")
        return self._account(email)

    def _email_for_token(self, id_token: str) -> str:
        for email, account in self.accounts.items():
            if id_token == f"token-{account['localId']}":
                return email
        raise IdentityToolkitError("INVALID_ID_TOKEN")

    async def update_password(self, id_token: str, new_password: str) -> Dict[str, Any]:
        email = self._email_for_token(id_token)
        self.accounts[email]["password"] = new_password
        self.password_updates.append(email)
        return self._account(email)

    async def update_profile(self, id_token: str, display_name: str) -> Dict[str, Any]:
        email = self._email_for_token(id_token)
        self.accounts[email]["displayName"] = display_name
        return self._account(email)

    async def verify_id_token(self, token: str) -> Dict[str, Any]:
        email = self._email_for_token(token)
        return {"user_id": self.accounts[email]["localId"], "email": email}


class FakeUploader:
    def __init__(self):
        self.uploads: List[Dict[str, Any]] = []
        self.destroyed: List[str] = []

    async def upload(self, content: bytes, filename: str, content_type: Optional[str] = None, folder: Optional[str] = None) -> StandardResponse:
        resource_type = CloudinaryUploader.resource_type_for(content_type)
        folder = folder or "hoardings"
        public_id = f"{folder}/{filename.rsplit('.', 1)[0]}"
        url = f"https://res.cloudinary.com/demo/{resource_type}/upload/v1700000000/{folder}/{filename}"
        self.uploads.append({"filename": filename, "folder": folder, "content_type": content_type, "size": len(content)})
        return StandardResponse.success(data={"url": url, "public_id": public_id, "resource_type": resource_type}, message="File uploaded successfully")

    async def destroy_by_url(self, url: Optional[str]) -> StandardResponse:
        self.destroyed.append(url)
        return StandardResponse.success(data={"deleted": True})


# Fixtures


@pytest.fixture
def store():
    fake = FakeFirestore()
    FirestoreClient.use(fake, fake)
    yield fake
    FirestoreClient.reset()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def context(store, identity, uploader):
    ctx = AdminContext(client=store, sync_client=store, identity=identity, uploader=uploader, policy=TransitionPolicy.PERMISSIVE)
    yield ctx
    ctx.close()


@pytest.fixture
def seeded(store):
    """Three customers, two categories with one hoarding each, a legacy flat hoarding and three bookings."""
    store.seed("users/u1", {"name": "Asha Rao", "email": "asha@example.com", "phone": "9000000001", "role": "user", "createdAt": utc(2026, 9, 1)})
    store.seed("users/u2", {"displayName": "Ravi Kumar", "email": "ravi@example.com", "phoneNumber": "9000000002", "createdAt": utc(2026, 9, 2)})
    store.seed("users/u3", {"name": "Meera Shah", "email": "meera@example.com", "role": "user", "createdAt": utc(2026, 9, 3)})
    store.seed("users/admin1", {"name": "Office Admin", "email": "admin@example.com", "role": "admin", "createdAt": utc(2026, 8, 1)})

    store.seed("categories/Highway", {"name": "Highway", "icon": "road", "active": True, "order": 1})
    store.seed("categories/City", {"name": "City", "icon": "building", "active": False, "order": 2})
    store.seed(
        "categories/Highway/hoardings/h1",
        {"title": "NH48 Mega Board", "location": "Bangalore", "size": "40x20", "price": 1000, "rating": 4.5, "trending": True, "createdAt": utc(2026, 7, 1)},
    )
    store.seed(
        "categories/City/hoardings/h2",
        {"title": "MG Road Unipole", "address": "Mumbai", "size": "20x10", "price": 500, "availability": False, "createdAt": utc(2026, 7, 2)},
    )
    store.seed("hoardings/legacy1", {"title": "Old Flat Board", "location": "Pune", "category": "Highway", "price": 300})

    store.seed(
        "bookings/b1",
        {
            "userId": "u1",
            "hoardingId": "h1",
            "totalPrice": 1000,
            "status": "approved",
            "paymentStatus": "Paid",
            "startDate": utc(2026, 10, 12),
            "endDate": utc(2026, 10, 20),
            "createdAt": utc(2026, 10, 10),
        },
    )
    store.seed("bookings/b2", {"userId": "u1", "hoardingId": "h2", "amount": 500, "status": "Pending", "createdAt": utc(2026, 10, 12)})
    store.seed(
        "bookings/b3",
        {"userId": "u2", "hoardingId": "h1", "amount": 2000, "status": "Approved", "paymentStatus": "Unpaid", "createdAt": utc(2026, 10, 5)},
    )
    return store
