"""
Unit tests for AccountService with mocked collaborators.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, call

from task_manager.core.exceptions import InvalidCredentials, NotFound, ValidationError
from task_manager.events.account_events import (
    AccountDeletedEvent, UserLoggedOutEvent, UserRegisteredEvent
)
from task_manager.interfaces.image_interface import ImageProcessingError
from task_manager.services.account_service import AccountService
from task_manager.services.authenticator import Identity
from tests.factories import UserFactory

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_dependencies(settings):
    """Mocked collaborators for AccountService."""
    security_service = MagicMock()
    security_service.get_password_hash.side_effect = lambda p: f"hashed:{p}"
    security_service.verify_password.side_effect = lambda p, h: h == f"hashed:{p}"
    security_service.create_session_token.return_value = "token-1"

    return {
        "user_repository": AsyncMock(),
        "task_repository": AsyncMock(),
        "security_service": security_service,
        "event_bus": AsyncMock(),
        "image_processor": MagicMock(),
        "settings": settings
    }


@pytest.fixture
def account_service(mock_dependencies):
    return AccountService(**mock_dependencies)


@pytest.fixture
def db():
    return AsyncMock()


@pytest.fixture
def identity():
    user = UserFactory.build(name="Nada", email="nada@example.com", hashed_password="hashed:keY@W087!", age=20)
    return Identity(user=user, token="token-0")


class TestRegister:

    async def test_register_success(self, account_service, mock_dependencies, db):
        # Arrange
        user_repository = mock_dependencies["user_repository"]
        user_repository.exists_by_email.return_value = False
        created = UserFactory.build(name="Nada", email="nada@example.com")
        user_repository.create.return_value = created

        # Act
        user, token = await account_service.register(db, " Nada ", " NADA@example.com", "keY@W087!", 4)

        # Assert
        assert user is created
        assert token == "token-1"
        user_repository.create.assert_awaited_once_with(
            db, name="Nada", email="nada@example.com", hashed_password="hashed:keY@W087!", age=4
        )
        user_repository.add_token.assert_awaited_once_with(db, created.id, "token-1")
        db.commit.assert_awaited()

        event = mock_dependencies["event_bus"].publish.await_args.args[0]
        assert isinstance(event, UserRegisteredEvent)
        assert event.email == "nada@example.com"

    async def test_register_invalid_input_persists_nothing(self, account_service, mock_dependencies, db):
        mock_dependencies["user_repository"].exists_by_email.return_value = False

        with pytest.raises(ValidationError):
            await account_service.register(db, "Nada", "nada@example.com", "mypassword1", 0)

        mock_dependencies["user_repository"].create.assert_not_awaited()
        mock_dependencies["event_bus"].publish.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_register_taken_email(self, account_service, mock_dependencies, db):
        mock_dependencies["user_repository"].exists_by_email.return_value = True

        with pytest.raises(ValidationError) as exc_info:
            await account_service.register(db, "Nada", "nada@example.com", "keY@W087!", 0)

        assert exc_info.value.errors == [{"field": "email", "message": "Email is already registered."}]


class TestLogin:

    async def test_login_unknown_email(self, account_service, mock_dependencies, db):
        mock_dependencies["user_repository"].get_by_email.return_value = None

        with pytest.raises(InvalidCredentials):
            await account_service.login(db, "ghost@example.com", "whatever")

    async def test_login_wrong_password(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["user_repository"].get_by_email.return_value = identity.user

        with pytest.raises(InvalidCredentials):
            await account_service.login(db, "nada@example.com", "wrong")

        mock_dependencies["user_repository"].add_token.assert_not_awaited()

    async def test_login_appends_token(self, account_service, mock_dependencies, db, identity):
        user_repository = mock_dependencies["user_repository"]
        user_repository.get_by_email.return_value = identity.user
        user_repository.list_tokens.return_value = ["token-0", "token-1"]

        user, token = await account_service.login(db, " NADA@example.com ", "keY@W087!")

        assert user is identity.user
        assert token == "token-1"
        user_repository.get_by_email.assert_awaited_once_with(db, "nada@example.com")
        user_repository.add_token.assert_awaited_once_with(db, identity.user.id, "token-1")


class TestLogout:

    async def test_logout_removes_request_token(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["user_repository"].remove_token.return_value = 1

        await account_service.logout(db, identity)

        mock_dependencies["user_repository"].remove_token.assert_awaited_once_with(
            db, identity.user.id, "token-0"
        )
        event = mock_dependencies["event_bus"].publish.await_args.args[0]
        assert isinstance(event, UserLoggedOutEvent)
        assert event.logout_all is False

    async def test_logout_all(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["user_repository"].clear_tokens.return_value = 3

        await account_service.logout_all(db, identity)

        event = mock_dependencies["event_bus"].publish.await_args.args[0]
        assert event.logout_all is True
        assert event.sessions_removed == 3


class TestUpdateProfile:

    async def test_only_submitted_fields_are_written(self, account_service, mock_dependencies, db, identity):
        user_repository = mock_dependencies["user_repository"]
        user_repository.update.return_value = identity.user

        await account_service.update_profile(db, identity, {"name": "  Nada Rachedi "})

        user_repository.update.assert_awaited_once_with(db, identity.user, {"name": "Nada Rachedi"})
        user_repository.exists_by_email.assert_not_awaited()

    async def test_password_is_rehashed(self, account_service, mock_dependencies, db, identity):
        await account_service.update_profile(db, identity, {"password": "n3w-Secret!"})

        update_data = mock_dependencies["user_repository"].update.await_args.args[2]
        assert update_data == {"hashed_password": "hashed:n3w-Secret!"}

    async def test_email_uniqueness_excludes_self(self, account_service, mock_dependencies, db, identity):
        user_repository = mock_dependencies["user_repository"]
        user_repository.exists_by_email.return_value = False

        await account_service.update_profile(db, identity, {"email": "New@Example.com"})

        user_repository.exists_by_email.assert_awaited_once_with(
            db, "new@example.com", exclude_user_id=identity.user.id
        )

    async def test_invalid_merge_writes_nothing(self, account_service, mock_dependencies, db, identity):
        with pytest.raises(ValidationError):
            await account_service.update_profile(db, identity, {"name": "Ok", "age": -5})

        mock_dependencies["user_repository"].update.assert_not_awaited()

    async def test_null_name_is_rejected(self, account_service, db, identity):
        with pytest.raises(ValidationError):
            await account_service.update_profile(db, identity, {"name": None})


class TestDeleteAccount:

    async def test_delete_order(self, account_service, mock_dependencies, db, identity):
        # Arrange
        manager = MagicMock()
        manager.attach_mock(mock_dependencies["event_bus"].publish, "publish")
        manager.attach_mock(mock_dependencies["task_repository"].delete_all_for_owner, "delete_tasks")
        manager.attach_mock(mock_dependencies["user_repository"].delete, "delete_user")
        manager.attach_mock(db.commit, "commit")

        # Act
        result = await account_service.delete_account(db, identity)

        # Assert
        assert result is identity.user
        names = [c[0] for c in manager.mock_calls]
        assert names == ["publish", "delete_tasks", "delete_user", "commit"]
        assert isinstance(manager.mock_calls[0].args[0], AccountDeletedEvent)
        assert manager.mock_calls[1] == call.delete_tasks(db, identity.user.id)

    async def test_failure_propagates_without_commit(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["user_repository"].delete.side_effect = RuntimeError("store down")

        with pytest.raises(RuntimeError):
            await account_service.delete_account(db, identity)

        db.commit.assert_not_awaited()


class TestAvatar:

    async def test_set_avatar(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["image_processor"].process_avatar.return_value = b"png-bytes"

        await account_service.set_avatar(db, identity, "me.JPEG", b"raw")

        mock_dependencies["image_processor"].process_avatar.assert_called_once_with(b"raw")
        mock_dependencies["user_repository"].update.assert_awaited_once_with(
            db, identity.user, {"avatar": b"png-bytes"}
        )

    @pytest.mark.parametrize("filename", [None, "", "me.gif", "me.jpg.exe", "jpg"])
    async def test_set_avatar_bad_extension(self, account_service, mock_dependencies, db, identity, filename):
        with pytest.raises(ValidationError):
            await account_service.set_avatar(db, identity, filename, b"raw")

        mock_dependencies["image_processor"].process_avatar.assert_not_called()

    async def test_set_avatar_at_size_limit(self, account_service, mock_dependencies, db, identity, settings):
        mock_dependencies["image_processor"].process_avatar.return_value = b"png"

        await account_service.set_avatar(db, identity, "me.png", b"x" * settings.AVATAR_MAX_BYTES)

        mock_dependencies["user_repository"].update.assert_awaited_once()

    async def test_set_avatar_over_size_limit(self, account_service, mock_dependencies, db, identity, settings):
        with pytest.raises(ValidationError):
            await account_service.set_avatar(db, identity, "me.png", b"x" * (settings.AVATAR_MAX_BYTES + 1))

    async def test_set_avatar_undecodable(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["image_processor"].process_avatar.side_effect = ImageProcessingError("bad image")

        with pytest.raises(ValidationError):
            await account_service.set_avatar(db, identity, "me.png", b"raw")

        mock_dependencies["user_repository"].update.assert_not_awaited()

    async def test_clear_avatar(self, account_service, mock_dependencies, db, identity):
        await account_service.clear_avatar(db, identity)

        mock_dependencies["user_repository"].update.assert_awaited_once_with(db, identity.user, {"avatar": None})

    async def test_get_avatar_missing(self, account_service, mock_dependencies, db, identity):
        mock_dependencies["user_repository"].get_by_id.return_value = identity.user

        with pytest.raises(NotFound):
            await account_service.get_avatar(db, identity.user.id)

    async def test_get_avatar_unknown_user(self, account_service, mock_dependencies, db):
        mock_dependencies["user_repository"].get_by_id.return_value = None

        with pytest.raises(NotFound):
            await account_service.get_avatar(db, "nobody")
