from fastapi import APIRouter, Depends

from ...context import AdminContext
from ...schemas.worker import TaskInput, WorkerInput
from ..dependencies import PageParams, get_context, require_admin, respond, respond_page

router = APIRouter(prefix="/workers", tags=["Workers"])


@router.get("")
async def list_workers(params: PageParams = Depends(), context: AdminContext = Depends(get_context)):
    return respond_page(await context.workers.get_all_workers(), params)


@router.get("/{worker_id}")
async def get_worker(worker_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.get_worker(worker_id))


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_worker(worker: WorkerInput, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.create_worker(worker))


@router.put("/{worker_id}", dependencies=[Depends(require_admin)])
async def update_worker(worker_id: str, worker: WorkerInput, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.update_worker(worker_id, worker))


@router.delete("/{worker_id}", dependencies=[Depends(require_admin)])
async def delete_worker(worker_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.delete_worker(worker_id))


@router.post("/{worker_id}/toggle-active", dependencies=[Depends(require_admin)])
async def toggle_worker_active(worker_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.toggle_worker_active(worker_id))


@router.get("/{worker_id}/tasks")
async def worker_tasks(worker_id: str, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.get_worker_tasks(worker_id))


@router.post("/{worker_id}/tasks", status_code=201)
async def assign_task(worker_id: str, task: TaskInput, context: AdminContext = Depends(get_context)):
    return respond(await context.workers.assign_task(worker_id, task))
