"""
Task repository. Every query is filtered by owner in the statement itself,
so a caller can never reach another user's task by ID alone.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import structlog

from ..core.exceptions import InternalFailure
from ..interfaces.repository_interface import ITaskRepository
from ..models.task import Task

logger = structlog.get_logger()

SORTABLE_COLUMNS = {
    "description": Task.description,
    "completed": Task.completed,
    "created_at": Task.created_at,
    "updated_at": Task.updated_at,
}


class TaskRepository(ITaskRepository):
    """Repository for task data access operations."""

    async def create(
        self,
        db: AsyncSession,
        owner_id: str,
        description: str,
        completed: bool = False
    ) -> Task:
        try:
            task = Task(owner_id=owner_id, description=description, completed=completed)
            db.add(task)
            await db.flush()
            await db.refresh(task)

            logger.info("Task created", task_id=task.id, owner_id=owner_id)
            return task

        except SQLAlchemyError as e:
            logger.error("Task creation failed", owner_id=owner_id, error=str(e))
            raise InternalFailure("Failed to create task")

    async def get_for_owner(self, db: AsyncSession, task_id: str, owner_id: str) -> Optional[Task]:
        try:
            result = await db.execute(
                select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to get task", task_id=task_id, error=str(e))
            raise InternalFailure()

    async def list_for_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        completed: Optional[bool] = None,
        limit: Optional[int] = None,
        skip: int = 0,
        sort_field: Optional[str] = None,
        descending: bool = False
    ) -> List[Task]:
        """
        List an owner's tasks with optional filter, sort and pagination.

        Creation order is the default and also breaks ties of any other sort.
        """
        query = select(Task).where(Task.owner_id == owner_id)

        if completed is not None:
            query = query.where(Task.completed == completed)

        if sort_field is not None:
            column = SORTABLE_COLUMNS.get(sort_field)
            if column is None:
                raise ValueError(f"Unsortable task field: {sort_field}")
            query = query.order_by(column.desc() if descending else column.asc())

        query = query.order_by(Task.created_at.asc(), Task.id.asc())

        if skip:
            query = query.offset(skip)
        if limit:
            query = query.limit(limit)

        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list tasks", owner_id=owner_id, error=str(e))
            raise InternalFailure()

    async def update(self, db: AsyncSession, task: Task, update_data: Dict[str, Any]) -> Task:
        try:
            for field, value in update_data.items():
                setattr(task, field, value)

            await db.flush()
            await db.refresh(task)

            logger.info("Task updated", task_id=task.id, fields=sorted(update_data))
            return task

        except SQLAlchemyError as e:
            logger.error("Task update failed", task_id=task.id, error=str(e))
            raise InternalFailure("Failed to update task")

    async def delete_for_owner(self, db: AsyncSession, task_id: str, owner_id: str) -> Optional[Task]:
        task = await self.get_for_owner(db, task_id, owner_id)
        if task is None:
            return None

        try:
            await db.delete(task)
            await db.flush()

            logger.info("Task deleted", task_id=task_id, owner_id=owner_id)
            return task

        except SQLAlchemyError as e:
            logger.error("Task deletion failed", task_id=task_id, error=str(e))
            raise InternalFailure("Failed to delete task")

    async def delete_all_for_owner(self, db: AsyncSession, owner_id: str) -> int:
        try:
            result = await db.execute(delete(Task).where(Task.owner_id == owner_id))
            logger.info("Tasks deleted for owner", owner_id=owner_id, count=result.rowcount)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error("Failed to delete tasks for owner", owner_id=owner_id, error=str(e))
            raise InternalFailure()
