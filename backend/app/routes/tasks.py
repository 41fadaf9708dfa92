"""
CrudCamp Backend — Task Route Handlers
========================================

What:  The CRUD endpoints for the authenticated user's tasks.
How:   Every handler depends on `get_current_user`; the user's id is passed
       to TaskService, which scopes every query to that owner.

Caching:
    Task data is private and mutable, so every response is marked
    `Cache-Control: no-store`.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.common import ErrorResponse
from app.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskReplace,
    TaskResponse,
    TaskUpdate,
)
from app.services.task_service import task_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks",
    tags=["Tasks"],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)

NOT_FOUND = {404: {"description": "Task not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List your tasks",
    description=(
        "Offset-paginated list of the current user's tasks. Filter by completion "
        "state or a title substring; the total match count is also returned in "
        "the X-Total-Count header."
    ),
)
async def list_tasks(
    response: Response,
    limit: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
    offset: int = Query(default=0, ge=0, description="Items to skip"),
    completed: bool | None = Query(default=None, description="Only completed (true) or open (false) tasks"),
    search: str | None = Query(default=None, max_length=200, description="Case-insensitive title substring"),
    sort: str = Query(
        default="created_at_desc",
        description="created_at_desc | created_at_asc | due_date_asc | title_asc",
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskListResponse:
    result = await task_service.list_tasks(
        db=db,
        owner_id=user.id,
        limit=limit,
        offset=offset,
        completed=completed,
        search=search,
        sort=sort,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    response.headers["Cache-Control"] = "no-store"
    return result


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    body: TaskCreate,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    result = await task_service.create_task(db=db, owner_id=user.id, dto=body)
    response.headers["Location"] = f"/api/tasks/{result.id}"
    return result


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses=NOT_FOUND,
    summary="Get one task",
)
async def get_task(
    task_id: UUID,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    result = await task_service.get_task(db=db, owner_id=user.id, task_id=task_id)
    response.headers["Cache-Control"] = "no-store"
    return result


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses=NOT_FOUND,
    summary="Replace a task",
)
async def replace_task(
    task_id: UUID,
    body: TaskReplace,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.replace_task(db=db, owner_id=user.id, task_id=task_id, dto=body)


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    responses=NOT_FOUND,
    summary="Partially update a task",
)
async def update_task(
    task_id: UUID,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.update_task(db=db, owner_id=user.id, task_id=task_id, dto=body)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete a task",
)
async def delete_task(
    task_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await task_service.delete_task(db=db, owner_id=user.id, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
