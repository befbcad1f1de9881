from fastapi import APIRouter, Depends, status

from task_api.common.exceptions import (
    ResourceType,
    resource_not_found_response,
    validation_error_response,
)
from task_api.tasks.dependencies import get_task_service
from task_api.tasks.schemas import (
    CreateTaskRequest,
    Task,
    TaskActionResponse,
    TaskMessage,
)
from task_api.tasks.service import TaskService


router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
)


@router.get("")
def list_tasks(
    sort: str | None = None,
    task_service: TaskService = Depends(get_task_service),
) -> list[Task]:
    return task_service.list_tasks(sort)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    responses={**validation_error_response},
)
def create_task(
    task_input: CreateTaskRequest,
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.create_task(task_input)


@router.put("/{task_id}", responses={**resource_not_found_response(ResourceType.TASK)})
def update_task(
    task_id: str, task_service: TaskService = Depends(get_task_service)
) -> Task:
    return task_service.update_task(task_id)


@router.delete(
    "/{task_id}", responses={**resource_not_found_response(ResourceType.TASK)}
)
def delete_task(
    task_id: str, task_service: TaskService = Depends(get_task_service)
) -> TaskMessage:
    return task_service.delete_task(task_id)


@router.post(
    "/{task_id}/restore",
    responses={**resource_not_found_response(ResourceType.TASK)},
)
def restore_task(
    task_id: str, task_service: TaskService = Depends(get_task_service)
) -> TaskActionResponse:
    return task_service.restore_task(task_id)


@router.patch(
    "/{task_id}/complete",
    responses={**resource_not_found_response(ResourceType.TASK)},
)
def complete_task(
    task_id: str, task_service: TaskService = Depends(get_task_service)
) -> TaskActionResponse:
    return task_service.complete_task(task_id)
