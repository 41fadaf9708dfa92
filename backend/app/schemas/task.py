"""
CrudCamp Backend — Task DTOs
==============================

What:  Request/response models for the /api/tasks resource.

Write semantics:
    POST  → TaskCreate   (title required)
    PUT   → TaskReplace  (full replacement; omitted fields reset to defaults)
    PATCH → TaskUpdate   (partial; only fields present in the body are applied,
                          `title`/`completed` may not be sent as null)
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TASK_SORTS = ("created_at_desc", "created_at_asc", "due_date_asc", "title_asc")


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    due_date: Optional[datetime] = None


class TaskReplace(TaskCreate):
    completed: bool = False


class TaskUpdate(BaseModel):
    """
    Partial update. Callers use `model_dump(exclude_unset=True)` so a field
    left out of the JSON body is untouched, while `"description": null`
    clears the description.
    """
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10_000)
    completed: Optional[bool] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "completed")
    @classmethod
    def reject_null(cls, v, info):
        # Runs only for values actually sent; defaults are not validated
        if v is None:
            raise ValueError(f"{info.field_name} may not be null")
        return v


class TaskResponse(BaseModel):
    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    completed: bool
    due_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """
    What:  Offset-paginated page of the current user's tasks.

    has_more is computed by fetching limit+1 rows, so it is exact even when
    total_count changes between the two queries.
    """
    model_config = ConfigDict(extra="forbid")

    tasks: List[TaskResponse]
    total_count: int = Field(description="Tasks matching the filters")
    limit: int
    offset: int
    has_more: bool
