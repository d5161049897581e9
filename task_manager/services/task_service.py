"""
Task operations. The owner is always the authenticated caller and every
lookup is scoped by (task id, owner).
"""

from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..core.exceptions import NotFound, ValidationError
from ..core.validation import ensure_valid, normalize_text, validate_task
from ..interfaces.repository_interface import ITaskRepository
from ..models.task import Task
from .authenticator import Identity

logger = structlog.get_logger()

# Accepted sortBy field names and the column each one sorts on
SORT_FIELDS = {
    "description": "description",
    "completed": "completed",
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
}


def parse_sort(sort_by: str) -> Tuple[str, bool]:
    """
    Parse a `<field>_<asc|desc>` sort expression.

    The expression is split on its last underscore so that field names that
    contain one still parse. A bare field name sorts ascending, as does any
    direction other than "desc".

    Returns:
        Tuple of (column name, descending)

    Raises:
        ValidationError: If the field is not sortable
    """
    if sort_by in SORT_FIELDS:
        return SORT_FIELDS[sort_by], False

    field, _, direction = sort_by.rpartition("_")
    column = SORT_FIELDS.get(field)
    if column is None:
        raise ValidationError(
            "Invalid sort field",
            errors=[{"field": "sortBy", "message": f"Cannot sort by '{field or sort_by}'."}]
        )
    return column, direction == "desc"


class TaskService:
    """Service responsible for a user's tasks."""

    def __init__(self, task_repository: ITaskRepository):
        self.task_repository = task_repository

    async def create(
        self,
        db: AsyncSession,
        identity: Identity,
        description: str,
        completed: bool = False
    ) -> Task:
        description = normalize_text(description)
        ensure_valid(validate_task(description, completed))

        task = await self.task_repository.create(
            db,
            owner_id=identity.user.id,
            description=description,
            completed=completed
        )
        await db.commit()
        return task

    async def list(
        self,
        db: AsyncSession,
        identity: Identity,
        completed: Optional[str] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
        sort_by: Optional[str] = None
    ) -> List[Task]:
        """
        List the caller's tasks.

        Args:
            db: Database session
            identity: Caller
            completed: Raw filter value; "true" matches completed tasks and any
                other value matches incomplete ones
            limit: Page size, None or 0 for no limit
            skip: Number of tasks to skip
            sort_by: Sort expression, see parse_sort

        Returns:
            List of tasks
        """
        sort_field, descending = parse_sort(sort_by) if sort_by else (None, False)

        return await self.task_repository.list_for_owner(
            db,
            owner_id=identity.user.id,
            completed=None if completed is None else completed == "true",
            limit=limit or None,
            skip=skip or 0,
            sort_field=sort_field,
            descending=descending
        )

    async def get(self, db: AsyncSession, identity: Identity, task_id: str) -> Task:
        task = await self.task_repository.get_for_owner(db, task_id, identity.user.id)
        if task is None:
            raise NotFound("Task not found")
        return task

    async def update(
        self,
        db: AsyncSession,
        identity: Identity,
        task_id: str,
        changes: Dict[str, Any]
    ) -> Task:
        """
        Apply a partial update to one of the caller's tasks.

        Raises:
            NotFound: If the caller owns no task with this ID
            ValidationError: If the merged task is invalid
        """
        task = await self.get(db, identity, task_id)

        description = (
            normalize_text(changes["description"]) if "description" in changes
            else task.description
        )
        completed = changes["completed"] if "completed" in changes else task.completed
        ensure_valid(validate_task(description, completed))

        update_data: Dict[str, Any] = {}
        if "description" in changes:
            update_data["description"] = description
        if "completed" in changes:
            update_data["completed"] = completed

        if update_data:
            task = await self.task_repository.update(db, task, update_data)
            await db.commit()

        return task

    async def delete(self, db: AsyncSession, identity: Identity, task_id: str) -> Task:
        task = await self.task_repository.delete_for_owner(db, task_id, identity.user.id)
        if task is None:
            raise NotFound("Task not found")

        await db.commit()
        return task
