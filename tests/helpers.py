"""
Small helpers shared by endpoint tests.
"""
from typing import Dict, List, Optional, Type, TypeVar

from sqlalchemy import func, select

from task_manager.core.database import Database
from task_manager.models.task import Task
from task_manager.models.token import UserToken

T = TypeVar("T")


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def load(database: Database, model: Type[T], ident: str) -> Optional[T]:
    """Read a row in a fresh session, bypassing any identity map."""
    async with database.session() as db:
        return await db.get(model, ident)


async def tokens_of(database: Database, user_id: str) -> List[str]:
    async with database.session() as db:
        result = await db.execute(
            select(UserToken.token)
            .where(UserToken.user_id == user_id)
            .order_by(UserToken.created_at, UserToken.id)
        )
        return list(result.scalars().all())


async def task_count(database: Database, owner_id: str) -> int:
    async with database.session() as db:
        result = await db.execute(
            select(func.count()).select_from(Task).where(Task.owner_id == owner_id)
        )
        return result.scalar_one()
