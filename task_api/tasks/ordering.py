from enum import Enum
from typing import Sequence

from task_api.tasks.schemas import Priority, Task


class TaskSortKey(str, Enum):
    DATE_ADDED = "dateAdded"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"


PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGH: 0,
    Priority.MID: 1,
    Priority.LOW: 2,
}


def parse_sort_key(value: str | None) -> TaskSortKey | None:
    """Return the matching sort key, or None for missing and unknown values."""
    if value is None:
        return None
    try:
        return TaskSortKey(value)
    except ValueError:
        return None


def _due_date_key(task: Task) -> tuple[bool, float]:
    # Tasks without a due date sort first, as an ascending document-store sort would
    if task.due_date is None:
        return (False, 0.0)
    return (True, task.due_date.timestamp())


def sort_tasks(tasks: Sequence[Task], sort_key: TaskSortKey | None) -> list[Task]:
    if sort_key == TaskSortKey.DATE_ADDED:
        return sorted(tasks, key=lambda task: task.created_at, reverse=True)
    if sort_key == TaskSortKey.DUE_DATE:
        return sorted(tasks, key=_due_date_key)
    if sort_key == TaskSortKey.PRIORITY:
        return sorted(tasks, key=lambda task: PRIORITY_RANK[task.priority])
    return list(tasks)
