"""
Dependency injection for FastAPI endpoints.
Provides the container, a request-scoped database session, the caller's
identity and the services.
"""
from typing import AsyncGenerator, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..container.container import Container
from ..core.database import Database
from ..services.account_service import AccountService
from ..services.authenticator import Authenticator, Identity
from ..services.task_service import TaskService

logger = structlog.get_logger()

# auto_error=False so a missing or malformed header becomes our own 401
bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


async def get_db(container: Container = Depends(get_container)) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request. Committed when the request succeeds, rolled back
    when anything raises.
    """
    async with container.get(Database).session() as session:
        yield session


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    container: Container = Depends(get_container)
) -> Identity:
    """
    Resolve the caller from the bearer token.

    The resolved user and the raw token are also attached to request.state.

    Raises:
        Unauthenticated: If the token is missing, invalid or revoked
    """
    authenticator = container.get(Authenticator)
    identity = await authenticator.authenticate(
        db,
        credentials.credentials if credentials else None
    )

    request.state.user = identity.user
    request.state.token = identity.token
    structlog.contextvars.bind_contextvars(user_id=identity.user.id)

    return identity


def get_account_service(container: Container = Depends(get_container)) -> AccountService:
    return container.get(AccountService)


def get_task_service(container: Container = Depends(get_container)) -> TaskService:
    return container.get(TaskService)
