import logging
from typing import List, Optional, Protocol

from schemas import Task

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 5


class TaskServiceError(Exception):
    pass


class ValidationError(TaskServiceError):
    """A task field does not meet its content constraint."""


class NotFoundError(TaskServiceError):
    """The referenced task id is not in the store."""


class TaskStore(Protocol):
    async def save(self, task: Task) -> Task: ...

    async def find_by_id(self, task_id: int) -> Optional[Task]: ...

    async def find_all(self) -> List[Task]: ...

    async def delete_by_id(self, task_id: int) -> None: ...


class TaskService:
    """
    Validation and update rules for tasks.

    Title and description are checked before anything is written. Completing
    a task only flips its status, so it skips validation; a generic update
    overwrites every field, status included, and is validated after the merge.
    """

    def __init__(self, store: TaskStore, min_description_length: int = MIN_DESCRIPTION_LENGTH):
        self.store = store
        self.min_description_length = min_description_length

    async def add_task(self, task: Task) -> Task:
        self._validate(task)
        saved = await self.store.save(task)
        logger.info("Created task id=%s", saved.id)
        return saved

    async def update_task(self, task_id: int, fields: Task) -> Task:
        existing = await self._get_or_raise(task_id)
        merged = existing.model_copy(
            update={
                "title": fields.title,
                "description": fields.description,
                "status": fields.status,
                "deadline": fields.deadline,
                "category": fields.category,
            }
        )
        self._validate(merged)
        saved = await self.store.save(merged)
        logger.info("Updated task id=%s status=%s", saved.id, saved.status)
        return saved

    async def delete_task(self, task_id: int) -> None:
        await self.store.delete_by_id(task_id)
        logger.info("Deleted task id=%s", task_id)

    async def list_tasks(self) -> List[Task]:
        return list(await self.store.find_all())

    async def complete_task(self, task_id: int) -> Task:
        task = await self._get_or_raise(task_id)
        saved = await self.store.save(task.model_copy(update={"status": "COMPLETED"}))
        logger.info("Completed task id=%s", saved.id)
        return saved

    async def _get_or_raise(self, task_id: int) -> Task:
        task = await self.store.find_by_id(task_id)
        if task is None:
            logger.warning("Task id=%s not found", task_id)
            raise NotFoundError("Task not found")
        return task

    def _validate(self, task: Task) -> None:
        if task.title is None or not task.title.strip():
            logger.warning("Rejected task id=%s: empty title", task.id)
            raise ValidationError("Task title must not be empty")
        if task.description is None or len(task.description) < self.min_description_length:
            logger.warning("Rejected task id=%s: description too short", task.id)
            raise ValidationError(
                f"Task description must be at least {self.min_description_length} characters long"
            )
