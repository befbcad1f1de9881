from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, Callable, TypeVar
from uuid import uuid4

from task_api.common.current_datetime import get_current_datetime
from task_api.common.exceptions import TaskStoreException
from task_api.tasks.schemas import CreateTaskRequest, Task, TaskUpdate

F = TypeVar("F", bound=Callable[..., Any])


def translate_store_errors(*error_types: type[Exception]) -> Callable[[F], F]:
    """Re-raise driver errors from the decorated method as TaskStoreException."""

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            try:
                return func(*args, **kwargs)
            except error_types as e:
                raise TaskStoreException(str(e) or e.__class__.__name__) from e

        return wrapper  # type: ignore

    return decorator


class TaskStore(ABC):
    """Persistence for Task records.

    Backends implement the underscored hooks. The public ``create_task`` and
    ``update_task`` assign ids and timestamps, so every write refreshes
    ``updated_at`` whichever operation issued it.
    """

    def create_task(self, task_input: CreateTaskRequest) -> Task:
        timestamp = get_current_datetime()
        task = Task(
            id=str(uuid4()),
            created_at=timestamp,
            updated_at=timestamp,
            **task_input.model_dump(),
        )
        self._insert_task(task)
        return self.get_task(task.id)

    def update_task(self, task_id: str, updates: TaskUpdate) -> Task:
        changes = updates.model_dump(exclude_unset=True)
        changes["updated_at"] = get_current_datetime()
        self._apply_changes(task_id, changes)
        return self.get_task(task_id)

    @abstractmethod
    def get_task(self, task_id: str) -> Task:
        pass

    @abstractmethod
    def list_tasks(self) -> list[Task]:
        pass

    @abstractmethod
    def ping(self) -> None:
        pass

    @abstractmethod
    def _insert_task(self, task: Task) -> None:
        pass

    @abstractmethod
    def _apply_changes(self, task_id: str, changes: dict[str, Any]) -> None:
        """Write ``changes`` (field name to value) to an existing task.

        Raises ResourceNotFoundException when ``task_id`` is unknown.
        """
        pass

    def close(self) -> None:
        pass
