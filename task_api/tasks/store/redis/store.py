from datetime import datetime
from enum import Enum
from typing import Any
from redis.exceptions import RedisError

from task_api.common.exceptions import ResourceNotFoundException, ResourceType
from task_api.common.redis import RedisClient
from task_api.tasks.schemas import Task
from task_api.tasks.store.base import TaskStore, translate_store_errors


def _serialize_value(value: Any) -> str | int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def serialize_task_fields(fields: dict[str, Any]) -> dict[str, str | int]:
    # A None value has no hash field, so empty strings round-trip verbatim
    return {
        name: _serialize_value(value)
        for name, value in fields.items()
        if value is not None
    }


def deserialize_task(mapping: dict[str, str]) -> Task:
    return Task.model_validate(mapping)


class RedisTaskStore(TaskStore):
    def __init__(self, *, redis_client: RedisClient, key_prefix: str):
        self.client = redis_client
        self.key_prefix = key_prefix

    def _get_task_key(self, task_id: str) -> str:
        key_name = f"{self.key_prefix}:{task_id}"

        if not self.client.exists(key_name):
            raise ResourceNotFoundException(ResourceType.TASK, task_id)

        return key_name

    @translate_store_errors(RedisError)
    def get_task(self, task_id: str) -> Task:
        task_key = self._get_task_key(task_id)
        return deserialize_task(self.client.hgetall(task_key))

    @translate_store_errors(RedisError)
    def list_tasks(self) -> list[Task]:
        task_keys = self.client.keys(f"{self.key_prefix}:*")
        tasks: list[Task] = []
        for key in task_keys:
            mapping = self.client.hgetall(key)
            if not mapping:
                continue
            task = deserialize_task(mapping)
            if not task.deleted:
                tasks.append(task)
        # Key order is arbitrary, so insertion order is the default
        return sorted(tasks, key=lambda task: task.created_at)

    @translate_store_errors(RedisError)
    def ping(self) -> None:
        self.client.ping()

    @translate_store_errors(RedisError)
    def _insert_task(self, task: Task) -> None:
        self.client.hset(
            f"{self.key_prefix}:{task.id}",
            mapping=serialize_task_fields(task.model_dump()),  # type: ignore
        )

    @translate_store_errors(RedisError)
    def _apply_changes(self, task_id: str, changes: dict[str, Any]) -> None:
        task_key = self._get_task_key(task_id)
        cleared = [name for name, value in changes.items() if value is None]

        with self.client.pipeline() as pipe:
            pipe.hset(task_key, mapping=serialize_task_fields(changes))  # type: ignore
            if cleared:
                pipe.hdel(task_key, *cleared)
            pipe.execute()

    def close(self) -> None:
        self.client.close()
