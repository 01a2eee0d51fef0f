from pydantic import BaseModel
from typing import Optional, Literal
from datetime import date

# Task documents live in the "task" collection; the Mongo _id is the integer task id

TaskStatus = Literal["PENDING", "COMPLETED"]


class Task(BaseModel):
    id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: TaskStatus = "PENDING"
    deadline: Optional[date] = None
    category: Optional[str] = None


class TaskCreate(BaseModel):
    """Body of POST /tasks. New tasks always start out PENDING."""

    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[date] = None
    category: Optional[str] = None

    def to_task(self) -> Task:
        return Task(**self.model_dump())


class TaskUpdate(BaseModel):
    """Body of PUT /tasks/{id}. Every field replaces the stored one."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: TaskStatus = "PENDING"
    deadline: Optional[date] = None
    category: Optional[str] = None

    def to_task(self) -> Task:
        return Task(**self.model_dump())
