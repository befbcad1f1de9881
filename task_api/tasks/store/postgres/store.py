from enum import Enum
from typing import Any
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from task_api.common.exceptions import ResourceNotFoundException, ResourceType
from task_api.tasks.schemas import Task
from task_api.tasks.store.base import TaskStore, translate_store_errors
from task_api.tasks.store.postgres.model import Base, TaskModel


def _column_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class PostgresTaskStore(TaskStore):
    def __init__(self, database_url: str):
        self.engine = create_engine(database_url)
        self.Session = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def _to_task(self, row: TaskModel) -> Task:
        return Task(
            id=row.id,
            title=row.title,
            description=row.description,
            priority=row.priority,
            due_date_string=row.due_date_string,
            due_date=row.due_date,
            created_at=row.created_at,
            updated_at=row.updated_at,
            completed=row.completed,
            deleted=row.deleted,
            deleted_at=row.deleted_at,
        )

    @translate_store_errors(SQLAlchemyError)
    def get_task(self, task_id: str) -> Task:
        with self.Session() as session:
            row = session.get(TaskModel, task_id)

            if not row:
                raise ResourceNotFoundException(ResourceType.TASK, task_id)

            return self._to_task(row)

    @translate_store_errors(SQLAlchemyError)
    def list_tasks(self) -> list[Task]:
        with self.Session() as session:
            query = session.query(TaskModel).filter_by(deleted=False)
            return [
                self._to_task(row) for row in query.order_by(TaskModel.created_at)
            ]

    @translate_store_errors(SQLAlchemyError)
    def ping(self) -> None:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    @translate_store_errors(SQLAlchemyError)
    def _insert_task(self, task: Task) -> None:
        with self.Session() as session:
            session.add(
                TaskModel(
                    **{
                        name: _column_value(value)
                        for name, value in task.model_dump().items()
                    }
                )
            )
            session.commit()

    @translate_store_errors(SQLAlchemyError)
    def _apply_changes(self, task_id: str, changes: dict[str, Any]) -> None:
        with self.Session() as session:
            row = session.get(TaskModel, task_id)

            if not row:
                raise ResourceNotFoundException(ResourceType.TASK, task_id)

            for name, value in changes.items():
                setattr(row, name, _column_value(value))

            session.commit()

    def close(self) -> None:
        self.engine.dispose()
