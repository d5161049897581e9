"""
User endpoints: registration, sessions, profile and avatar.
"""
from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..schemas.common import ErrorResponse
from ..schemas.user_schemas import (
    AuthResponse, LoginRequest, MessageResponse, UserCreate, UserResponse, UserUpdate
)
from ..services.account_service import AccountService
from ..services.authenticator import Identity
from .deps import get_account_service, get_current_identity, get_db

logger = structlog.get_logger()
router = APIRouter(prefix="/users", tags=["users"])

AUTH_ERRORS = {401: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}}
)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """
    Create an account.

    Returns the public user view and a session token for it.
    """
    user, token = await account_service.register(
        db,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        age=user_data.age
    )
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse, responses={400: {"model": ErrorResponse}})
async def login(
    login_data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """Open a new session. Each login issues an additional token."""
    user, token = await account_service.login(db, login_data.email, login_data.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/logout", response_model=MessageResponse, responses=AUTH_ERRORS)
async def logout(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """End the current session only."""
    await account_service.logout(db, identity)
    return MessageResponse(message="Logged out successfully")


@router.post("/logoutAll", response_model=MessageResponse, responses=AUTH_ERRORS)
async def logout_all(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """End every session of the caller."""
    await account_service.logout_all(db, identity)
    return MessageResponse(message="Logged out of all sessions")


@router.get("/me", response_model=UserResponse, responses=AUTH_ERRORS)
async def read_profile(
    identity: Identity = Depends(get_current_identity),
    account_service: AccountService = Depends(get_account_service)
):
    return account_service.get_profile(identity)


@router.patch(
    "/me",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, **AUTH_ERRORS}
)
async def update_profile(
    changes: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """
    Update name, email, password or age.

    Only the submitted fields change. Any other field rejects the request.
    """
    return await account_service.update_profile(
        db, identity, changes.model_dump(exclude_unset=True)
    )


@router.delete("/me", response_model=UserResponse, responses=AUTH_ERRORS)
async def delete_account(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """Delete the account together with all of its tasks and sessions."""
    return await account_service.delete_account(db, identity)


@router.post(
    "/me/avatar",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, **AUTH_ERRORS}
)
async def upload_avatar(
    avatar: UploadFile = File(...),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """Upload a .jpg, .jpeg or .png avatar. It is stored as a 250x250 PNG."""
    # One byte past the limit is enough to detect an oversize upload
    content = await avatar.read(account_service.settings.AVATAR_MAX_BYTES + 1)
    await account_service.set_avatar(db, identity, avatar.filename, content)
    return MessageResponse(message="Avatar uploaded")


@router.delete("/me/avatar", response_model=MessageResponse, responses=AUTH_ERRORS)
async def delete_avatar(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    await account_service.clear_avatar(db, identity)
    return MessageResponse(message="Avatar removed")


@router.get(
    "/{user_id}/avatar",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 404: {"model": ErrorResponse}}
)
async def read_avatar(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    account_service: AccountService = Depends(get_account_service)
):
    """Public. Serve a user's avatar as PNG."""
    avatar = await account_service.get_avatar(db, user_id)
    return Response(content=avatar, media_type="image/png")
