import logging

from task_api.common.current_datetime import get_current_datetime
from task_api.common.exceptions import ResourceNotFoundException, TaskStoreException
from task_api.tasks.ordering import parse_sort_key, sort_tasks
from task_api.tasks.schemas import (
    CreateTaskRequest,
    Task,
    TaskActionResponse,
    TaskMessage,
    TaskUpdate,
)
from task_api.tasks.store.base import TaskStore

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, task_store: TaskStore):
        self.task_store = task_store

    def _update(self, task_id: str, updates: TaskUpdate, action: str) -> Task:
        try:
            return self.task_store.update_task(task_id, updates)
        except ResourceNotFoundException:
            logger.warning(f"Task not found for {action}", extra={"task_id": task_id})
            raise
        except TaskStoreException as e:
            logger.error(f"Error during task {action}: {e}", extra={"task_id": task_id})
            raise

    def list_tasks(self, sort: str | None = None) -> list[Task]:
        sort_key = parse_sort_key(sort)
        if sort is not None and sort_key is None:
            logger.warning(f"Ignoring unknown sort key '{sort}'")

        try:
            tasks = self.task_store.list_tasks()
        except TaskStoreException as e:
            logger.error(f"Error fetching tasks: {e}")
            raise

        logger.info(
            f"Retrieved {len(tasks)} tasks successfully", extra={"count": len(tasks)}
        )
        return sort_tasks(tasks, sort_key)

    def create_task(self, task_input: CreateTaskRequest) -> Task:
        try:
            task = self.task_store.create_task(task_input)
        except TaskStoreException as e:
            logger.error(f"Error creating task: {e}")
            raise

        logger.info("New task created", extra={"task_id": task.id, "title": task.title})
        return task

    def update_task(self, task_id: str) -> Task:
        # Only clears the delete flag; see DESIGN.md on the ignored request body.
        task = self._update(
            task_id, TaskUpdate(deleted=False, deleted_at=None), action="update"
        )
        logger.info(
            "Task updated successfully",
            extra={"task_id": task.id, "title": task.title},
        )
        return task

    def delete_task(self, task_id: str) -> TaskMessage:
        task = self._update(
            task_id,
            TaskUpdate(deleted=True, deleted_at=get_current_datetime()),
            action="deletion",
        )
        logger.info(
            "Task deleted successfully",
            extra={"task_id": task.id, "title": task.title},
        )
        return TaskMessage(message="Task deleted successfully")

    def restore_task(self, task_id: str) -> TaskActionResponse:
        task = self._update(
            task_id, TaskUpdate(deleted=False, deleted_at=None), action="restore"
        )
        logger.info(
            "Task restored successfully",
            extra={"task_id": task.id, "title": task.title},
        )
        return TaskActionResponse(message="Task restored successfully", task=task)

    def complete_task(self, task_id: str) -> TaskActionResponse:
        task = self._update(task_id, TaskUpdate(completed=True), action="completion")
        logger.info(
            "Task marked as completed",
            extra={"task_id": task.id, "title": task.title},
        )
        return TaskActionResponse(message="Task marked as completed", task=task)
