"""
Task endpoints. All of them act on the caller's own tasks only.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.common import ErrorResponse
from ..schemas.task_schemas import TaskCreate, TaskResponse, TaskUpdate
from ..services.authenticator import Identity
from ..services.task_service import TaskService
from .deps import get_current_identity, get_db, get_task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])

NOT_FOUND = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}}
)
async def create_task(
    task_data: TaskCreate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(get_task_service)
):
    """Create a task owned by the caller."""
    return await task_service.create(
        db, identity, description=task_data.description, completed=task_data.completed
    )


@router.get(
    "",
    response_model=List[TaskResponse],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}}
)
async def list_tasks(
    completed: Optional[str] = Query(None, description='"true" for completed tasks, anything else for open ones'),
    limit: Optional[int] = Query(None, ge=0, description="Page size, 0 for no limit"),
    skip: Optional[int] = Query(None, ge=0, description="Number of tasks to skip"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="<field>_<asc|desc>, e.g. createdAt_desc"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(get_task_service)
):
    """
    List the caller's tasks.

    - **completed**: filter on completion
    - **limit** / **skip**: pagination
    - **sortBy**: description, completed, createdAt or updatedAt with an optional direction
    """
    return await task_service.list(
        db, identity, completed=completed, limit=limit, skip=skip, sort_by=sort_by
    )


@router.get("/{task_id}", response_model=TaskResponse, responses=NOT_FOUND)
async def read_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(get_task_service)
):
    return await task_service.get(db, identity, task_id)


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    responses={400: {"model": ErrorResponse}, **NOT_FOUND}
)
async def update_task(
    task_id: str,
    changes: TaskUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(get_task_service)
):
    """Update description and/or completed. Any other field rejects the request."""
    return await task_service.update(db, identity, task_id, changes.model_dump(exclude_unset=True))


@router.delete("/{task_id}", response_model=TaskResponse, responses=NOT_FOUND)
async def delete_task(
    task_id: str,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    task_service: TaskService = Depends(get_task_service)
):
    return await task_service.delete(db, identity, task_id)
