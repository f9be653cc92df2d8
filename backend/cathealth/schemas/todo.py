"""CatHealth Backend — Health To-do Schemas"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator

from cathealth.models import HealthTodo, RecordType
from cathealth.schemas.common import INT4_MAX, CamelModel, coerce_date


class TodoWrite(CamelModel):
    """
    Body of POST /api/todos and PUT /api/todos/{id}.

    catId is optional; when given it must reference one of the caller's cats.
    """

    title: str = Field(..., min_length=1, max_length=200)
    type: RecordType = RecordType.OTHER
    due_date: Optional[dt.date] = None
    cat_id: Optional[int] = Field(default=None, ge=1, le=INT4_MAX)
    completed: bool = False

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Title must not be blank")
        return stripped

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v):
        return coerce_date(v)

    @field_validator("cat_id", mode="before")
    @classmethod
    def empty_cat(cls, v):
        # The form's "no cat" option posts an empty string
        if v == "":
            return None
        return v


class TodoResponse(CamelModel):
    id: int
    owner_id: int
    cat_id: Optional[int] = None
    title: str
    type: str
    due_date: Optional[dt.date] = None
    completed: bool
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, todo: HealthTodo) -> "TodoResponse":
        return cls(
            id=todo.id,
            owner_id=todo.owner_id,
            cat_id=todo.cat_id,
            title=todo.title,
            type=todo.type,
            due_date=todo.due_date,
            completed=todo.completed,
            created_at=todo.created_at,
            updated_at=todo.updated_at,
        )


class TodoSuggestion(CamelModel):
    """A default reminder generated from the caller's cats (not persisted)."""

    title: str
    type: str
    due_date: dt.date
    cat_id: int
    cat_name: str
