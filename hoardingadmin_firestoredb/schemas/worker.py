from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .document import FirestoreDocument

WORKER_ROLE = "worker"
TASK_ASSIGNED = "assigned"


class Worker(FirestoreDocument):
    name: str = ""
    email: str = ""
    active: bool = True
    role: str = WORKER_ROLE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WorkerInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    email: str
    password: Optional[str] = None
    active: bool = True


class WorkerTask(FirestoreDocument):
    location: str = ""
    task_description: str = ""
    assigned_by: str = ""
    status: str = TASK_ASSIGNED
    created_at: Optional[datetime] = None


class TaskInput(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    location: str
    task_description: str
    assigned_by: str = "admin"
