"""
Pytest configuration and fixtures for task manager testing.
Every test gets its own container, and so its own in-memory SQLite database.
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from task_manager.container.container import Container
from task_manager.core.config import Settings
from task_manager.core.database import Database
from task_manager.core.security import SecurityService
from task_manager.interfaces.notification_interface import INotificationService
from task_manager.main import create_app
from task_manager.models.base import utcnow
from task_manager.models.task import Task
from task_manager.models.token import UserToken
from task_manager.models.user import User

from tests.factories import TaskFactory, UserFactory
from tests.fakes import FakeNotificationService

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET_KEY = "test-signing-key-zyxwvutsrqponmlkjihgfedcba"

USER_ONE_PASSWORD = "56What@@"
USER_TWO_PASSWORD = "86heyO@!"


@dataclass
class SeedData:
    """Two users with one session each; user one owns two tasks, user two owns one."""

    user_one: User
    user_two: User
    token_one: str
    token_two: str
    task_one: Task
    task_two: Task
    task_three: Task


@pytest.fixture
def settings() -> Settings:
    """Settings for tests, independent of the process environment."""
    return Settings(
        SECRET_KEY=TEST_SECRET_KEY,
        DATABASE_URL=TEST_DATABASE_URL,
        ENVIRONMENT="test",
        DEBUG=False,
        LOG_LEVEL="WARNING",
        BCRYPT_ROUNDS=4,
        POSTMARK_API_KEY=None
    )


@pytest.fixture
def notification_service() -> FakeNotificationService:
    return FakeNotificationService()


@pytest.fixture
def container(settings, notification_service) -> Container:
    """Container with the email provider replaced by an in-memory fake."""
    container = Container(settings)
    container.register_instance(INotificationService, notification_service)
    return container


@pytest_asyncio.fixture
async def app(container):
    """Application with its lifespan running (database connected, handlers wired)."""
    app = create_app(container=container)
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def database(app, container) -> Database:
    return container.get(Database)


@pytest.fixture
def security_service(container) -> SecurityService:
    return container.get(SecurityService)


@pytest_asyncio.fixture
async def seed(database, security_service) -> SeedData:
    """Populate the database the way every endpoint test starts from."""
    base_time = utcnow() - timedelta(minutes=5)

    user_one = UserFactory.build(
        name="Nada",
        email="nadaarachedii@example.com",
        hashed_password=security_service.get_password_hash(USER_ONE_PASSWORD),
        age=0
    )
    user_two = UserFactory.build(
        name="Nada",
        email="hnrach@example.com",
        hashed_password=security_service.get_password_hash(USER_TWO_PASSWORD),
        age=0
    )
    token_one = security_service.create_session_token(user_one.id)
    token_two = security_service.create_session_token(user_two.id)

    # Explicit timestamps keep creation order deterministic
    task_one = TaskFactory.build(
        owner_id=user_one.id,
        description="Finish the node course",
        completed=False,
        created_at=base_time,
        updated_at=base_time
    )
    task_two = TaskFactory.build(
        owner_id=user_one.id,
        description="Read my book",
        completed=True,
        created_at=base_time + timedelta(seconds=1),
        updated_at=base_time + timedelta(seconds=1)
    )
    task_three = TaskFactory.build(
        owner_id=user_two.id,
        description="Bake a cake",
        completed=True,
        created_at=base_time + timedelta(seconds=2),
        updated_at=base_time + timedelta(seconds=2)
    )

    async with database.session() as db:
        db.add_all([user_one, user_two])
        await db.flush()
        db.add_all([
            UserToken(user_id=user_one.id, token=token_one),
            UserToken(user_id=user_two.id, token=token_two),
            task_one,
            task_two,
            task_three
        ])

    return SeedData(
        user_one=user_one,
        user_two=user_two,
        token_one=token_one,
        token_two=token_two,
        task_one=task_one,
        task_two=task_two,
        task_three=task_three
    )
