"""
CrudCamp Backend — Task Service (CRUD Business Logic)
=======================================================

What:  Create, read, list, replace, update and delete tasks for one owner.
Who:   Called by the /api/tasks route handlers with the authenticated user's id.

Ownership Rule:
    Every query is filtered by owner_id. A task that exists but belongs to
    someone else is reported exactly like a missing one (NotFoundError),
    so task ids of other users cannot be probed.

Pagination (offset-based):
    SELECT ... WHERE owner_id = :uid [AND filters]
    ORDER BY <sort> LIMIT :limit + 1 OFFSET :offset
    The extra row decides has_more; a COUNT with the same filters gives
    total_count for the X-Total-Count header.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import CrudCampError, DatabaseError, NotFoundError, ValidationError
from app.models.task import Task
from app.schemas.task import (
    TASK_SORTS,
    TaskCreate,
    TaskListResponse,
    TaskReplace,
    TaskResponse,
    TaskUpdate,
)

logger = logging.getLogger(__name__)


def _order_by(sort: str):
    if sort == "created_at_asc":
        return [asc(Task.created_at), asc(Task.id)]
    if sort == "due_date_asc":
        # NULL due dates go last on every backend
        return [Task.due_date.is_(None), asc(Task.due_date), desc(Task.created_at)]
    if sort == "title_asc":
        return [asc(func.lower(Task.title)), desc(Task.created_at)]
    return [desc(Task.created_at), desc(Task.id)]


class TaskService:
    """
    Stateless CRUD operations on tasks.

    Error Handling Strategy:
        NotFoundError and ValidationError propagate unchanged; anything else
        raised by the database layer is wrapped in DatabaseError.
    """

    async def _load_owned(self, db: AsyncSession, owner_id: UUID, task_id: UUID) -> Task:
        result = await db.execute(
            select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        )
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFoundError(resource="task", resource_id=str(task_id))
        return task

    async def create_task(self, db: AsyncSession, owner_id: UUID, dto: TaskCreate) -> TaskResponse:
        try:
            task = Task(
                owner_id=owner_id,
                title=dto.title,
                description=dto.description,
                due_date=dto.due_date,
            )
            db.add(task)
            await db.flush()
            logger.info("Task %s created for user %s", task.id, owner_id)
            return TaskResponse.model_validate(task)
        except CrudCampError:
            raise
        except Exception as e:
            logger.error("Database error creating task: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the task. Please try again.",
                context={"owner_id": str(owner_id), "error_type": type(e).__name__},
            )

    async def get_task(self, db: AsyncSession, owner_id: UUID, task_id: UUID) -> TaskResponse:
        """
        Raises:
            NotFoundError: no such task for this owner (→ 404)
        """
        try:
            task = await self._load_owned(db, owner_id, task_id)
            return TaskResponse.model_validate(task)
        except CrudCampError:
            raise
        except Exception as e:
            logger.error("Database error fetching task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the task. Please try again.",
                context={"task_id": str(task_id)},
            )

    async def list_tasks(
        self,
        db: AsyncSession,
        owner_id: UUID,
        limit: int = 20,
        offset: int = 0,
        completed: Optional[bool] = None,
        search: Optional[str] = None,
        sort: str = "created_at_desc",
    ) -> TaskListResponse:
        """
        List the owner's tasks, newest first by default.

        Args:
            limit:     page size, 1-100
            offset:    rows to skip, >= 0
            completed: filter on completion state (None = both)
            search:    case-insensitive substring match on title
            sort:      one of TASK_SORTS

        Raises:
            ValidationError: unknown sort key or out-of-range paging values
        """
        if sort not in TASK_SORTS:
            raise ValidationError(
                message=f"Invalid sort '{sort}'. Must be one of: {', '.join(TASK_SORTS)}",
                field="sort",
            )
        if not 1 <= limit <= 100:
            raise ValidationError(message="limit must be between 1 and 100", field="limit")
        if offset < 0:
            raise ValidationError(message="offset must be zero or positive", field="offset")

        try:
            filters = [Task.owner_id == owner_id]
            if completed is not None:
                filters.append(Task.completed == completed)
            if search:
                filters.append(Task.title.icontains(search.strip(), autoescape=True))

            query = (
                select(Task)
                .where(*filters)
                .order_by(*_order_by(sort))
                .offset(offset)
                .limit(limit + 1)
            )
            result = await db.execute(query)
            tasks = list(result.scalars().all())

            count_result = await db.execute(select(func.count(Task.id)).where(*filters))
            total_count = count_result.scalar() or 0

            has_more = len(tasks) > limit
            if has_more:
                tasks = tasks[:limit]

            return TaskListResponse(
                tasks=[TaskResponse.model_validate(t) for t in tasks],
                total_count=total_count,
                limit=limit,
                offset=offset,
                has_more=has_more,
            )

        except Exception as e:
            logger.error("Database error listing tasks: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve tasks. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def replace_task(
        self, db: AsyncSession, owner_id: UUID, task_id: UUID, dto: TaskReplace
    ) -> TaskResponse:
        """PUT semantics: every writable field takes the DTO's value."""
        try:
            task = await self._load_owned(db, owner_id, task_id)
            for field, value in dto.model_dump().items():
                setattr(task, field, value)
            task.updated_at = datetime.now(timezone.utc)
            await db.flush()
            logger.info("Task %s replaced", task_id)
            return TaskResponse.model_validate(task)
        except CrudCampError:
            raise
        except Exception as e:
            logger.error("Database error replacing task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not update the task. Please try again.",
                context={"task_id": str(task_id)},
            )

    async def update_task(
        self, db: AsyncSession, owner_id: UUID, task_id: UUID, dto: TaskUpdate
    ) -> TaskResponse:
        """PATCH semantics: only fields present in the request body change."""
        try:
            task = await self._load_owned(db, owner_id, task_id)
            changes = dto.model_dump(exclude_unset=True)
            for field, value in changes.items():
                setattr(task, field, value)
            task.updated_at = datetime.now(timezone.utc)
            await db.flush()
            logger.info("Task %s updated (%s)", task_id, ", ".join(sorted(changes)) or "no fields")
            return TaskResponse.model_validate(task)
        except CrudCampError:
            raise
        except Exception as e:
            logger.error("Database error updating task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not update the task. Please try again.",
                context={"task_id": str(task_id)},
            )

    async def delete_task(self, db: AsyncSession, owner_id: UUID, task_id: UUID) -> None:
        try:
            task = await self._load_owned(db, owner_id, task_id)
            await db.delete(task)
            await db.flush()
            logger.info("Task %s deleted", task_id)
        except CrudCampError:
            raise
        except Exception as e:
            logger.error("Database error deleting task %s: %s", task_id, str(e))
            raise DatabaseError(
                message="Could not delete the task. Please try again.",
                context={"task_id": str(task_id)},
            )


task_service = TaskService()
