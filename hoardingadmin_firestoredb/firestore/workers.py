from typing import Any, Callable, List, Optional

from ..auth.identity import IdentityToolkitClient, IdentityToolkitError
from ..schemas.collection_names import DatabaseCollectionNames
from ..schemas.keys import FireStoreKeys
from ..schemas.worker import WORKER_ROLE, TaskInput, Worker, WorkerInput, WorkerTask
from ..utils.error_codes import ErrorCodes
from ..utils.logger import logger
from ..utils.standard_response import StandardResponse
from ..utils.time_now import TimeManager
from .client import FirestoreClient
from .subscriptions import SnapshotSubscription
from .users import sort_newest_first

WORKERS_COLLECTION = DatabaseCollectionNames.WORKERS_COLLECTION_NAME.value
TASKS_SUBCOLLECTION = DatabaseCollectionNames.WORKER_TASKS_SUBCOLLECTION_NAME.value


class FirestoreWorkersDB:
    """Field workers. Each worker has a sign-in account; the profile document id is the account uid."""

    _instance = None

    def __init__(self, client=None, sync_client=None, identity: Optional[IdentityToolkitClient] = None):
        self.client = client or FirestoreClient.shared()
        self._sync_client = sync_client
        self.identity = identity or IdentityToolkitClient()
        self.workers_collection = self.client.collection(WORKERS_COLLECTION)

    @classmethod
    def shared(cls):
        if not cls._instance:
            cls._instance = cls()
        return cls._instance

    def _handle_error(self, error: Exception, operation: str) -> StandardResponse:
        logger.error(f"❌ Error {operation}: {str(error)}")
        return StandardResponse.failure(ErrorCodes.get_http_status_code(error), str(error))

    def _validate_worker(self, worker: WorkerInput, creating: bool) -> Optional[StandardResponse]:
        if not worker:
            return StandardResponse.bad_request("Worker data is required")
        if not worker.name or not worker.name.strip():
            return StandardResponse.bad_request("Name is required")
        if not worker.email or not worker.email.strip():
            return StandardResponse.bad_request("Email is required")
        if creating and not worker.password:
            return StandardResponse.bad_request("Password is required")
        return None

    async def get_all_workers(self) -> StandardResponse:
        try:
            workers = [Worker.from_snapshot(doc) async for doc in self.workers_collection.stream()]
            return StandardResponse.success(data=sort_newest_first(workers), message="Workers fetched successfully")
        except Exception as e:
            return self._handle_error(e, "fetching workers")

    async def get_worker(self, worker_id: str) -> StandardResponse:
        try:
            if not worker_id:
                return StandardResponse.bad_request("Worker ID is required")

            doc = await self.workers_collection.document(worker_id).get()
            if not doc.exists:
                return StandardResponse.not_found("Worker not found")
            return StandardResponse.success(data=Worker.from_snapshot(doc), message="Worker retrieved successfully")
        except Exception as e:
            return self._handle_error(e, f"getting worker '{worker_id}'")

    async def create_worker(self, worker: WorkerInput) -> StandardResponse:
        try:
            if validation_error := self._validate_worker(worker, creating=True):
                return validation_error

            try:
                account = await self.identity.sign_up(worker.email, worker.password, display_name=worker.name)
            except IdentityToolkitError as auth_error:
                return StandardResponse.failure(auth_error.status_code, auth_error.message)

            uid = account["localId"]
            # only non-sensitive fields are stored, the password stays with the auth provider
            data = {
                "name": worker.name,
                "email": worker.email,
                FireStoreKeys.active: worker.active,
                FireStoreKeys.role: WORKER_ROLE,
                FireStoreKeys.createdAt: TimeManager.get_utc_now(),
            }
            await self.workers_collection.document(uid).set(data)

            logger.info(f"✅ Worker account created: {uid}")
            return StandardResponse.success(data=Worker.from_document(uid, data), message="Worker account created successfully", code=ErrorCodes.CREATED)
        except Exception as e:
            return self._handle_error(e, "creating worker")

    async def update_worker(self, worker_id: str, worker: WorkerInput) -> StandardResponse:
        """Update name, email and active flag. Passwords are never changed from here."""
        try:
            if not worker_id:
                return StandardResponse.bad_request("Worker ID is required")
            if validation_error := self._validate_worker(worker, creating=False):
                return validation_error

            doc_ref = self.workers_collection.document(worker_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Worker not found")

            update_data = {
                "name": worker.name,
                "email": worker.email,
                FireStoreKeys.active: worker.active,
                FireStoreKeys.updatedAt: TimeManager.get_utc_now(),
            }
            await doc_ref.update(update_data)

            message = "Worker updated successfully"
            if worker.password:
                message += ". Password changes must be done through a password reset email"
            return StandardResponse.success(data=Worker.from_document(worker_id, {**doc.to_dict(), **update_data}), message=message)
        except Exception as e:
            return self._handle_error(e, f"updating worker '{worker_id}'")

    async def delete_worker(self, worker_id: str) -> StandardResponse:
        try:
            if not worker_id:
                return StandardResponse.bad_request("Worker ID is required")

            doc_ref = self.workers_collection.document(worker_id)
            doc = await doc_ref.get()
            if not doc.exists:
                return StandardResponse.not_found("Worker not found")

            await doc_ref.delete()
            return StandardResponse.success(data={"id": worker_id}, message="Worker deleted successfully")
        except Exception as e:
            return self._handle_error(e, f"deleting worker '{worker_id}'")

    async def toggle_worker_active(self, worker_id: str) -> StandardResponse:
        try:
            response = await self.get_worker(worker_id)
            if not response.status:
                return response

            active = not response.data.active
            await self.workers_collection.document(worker_id).update({FireStoreKeys.active: active, FireStoreKeys.updatedAt: TimeManager.get_utc_now()})
            return StandardResponse.success(data=response.data.model_copy(update={"active": active}), message="Worker status updated")
        except Exception as e:
            return self._handle_error(e, f"toggling worker '{worker_id}'")

    async def assign_task(self, worker_id: str, task: TaskInput) -> StandardResponse:
        try:
            if not worker_id:
                return StandardResponse.bad_request("Please select a worker")
            if not task.location or not task.location.strip():
                return StandardResponse.bad_request("Location is required")
            if not task.task_description or not task.task_description.strip():
                return StandardResponse.bad_request("Task description is required")

            worker_response = await self.get_worker(worker_id)
            if not worker_response.status:
                return worker_response

            data = WorkerTask(**task.model_dump(), created_at=TimeManager.get_utc_now()).to_firestore()
            doc_ref = self.workers_collection.document(worker_id).collection(TASKS_SUBCOLLECTION).document()
            await doc_ref.set(data)

            return StandardResponse.success(
                data=WorkerTask.from_document(doc_ref.id, data),
                message=f"Task assigned successfully to {worker_response.data.name or 'worker'}",
                code=ErrorCodes.CREATED,
            )
        except Exception as e:
            return self._handle_error(e, f"assigning task to worker '{worker_id}'")

    async def get_worker_tasks(self, worker_id: str) -> StandardResponse:
        try:
            if not worker_id:
                return StandardResponse.bad_request("Worker ID is required")

            tasks_collection = self.workers_collection.document(worker_id).collection(TASKS_SUBCOLLECTION)
            tasks = [WorkerTask.from_snapshot(doc) async for doc in tasks_collection.stream()]
            return StandardResponse.success(data=sort_newest_first(tasks), message="Tasks fetched successfully")
        except Exception as e:
            return self._handle_error(e, f"fetching tasks of worker '{worker_id}'")

    def subscribe(self, callback: Callable[[List[Worker]], Any], on_error: Optional[Callable[[Exception], Any]] = None) -> SnapshotSubscription:
        sync_client = self._sync_client or FirestoreClient.shared_sync()
        return SnapshotSubscription(
            sync_client.collection(WORKERS_COLLECTION),
            lambda items: callback(sort_newest_first([Worker.model_validate(item) for item in items])),
            on_error=on_error,
            name=WORKERS_COLLECTION,
        )
