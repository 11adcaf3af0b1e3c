"""Authentication routes: register, login, logout, me.

Identity is server-side session state: the cookie carries an opaque id that
the injected SessionStore resolves to a user id on every request.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.app.config import Settings, get_settings
from propertyhub.domain.enums import UserRole
from propertyhub.domain.errors import ForbiddenError, NotFoundError, UnauthorizedError
from propertyhub.domain.models import User
from propertyhub.domain.schemas import MessageResponse, UserCreate, UserLogin, UserResponse
from propertyhub.infra.database import get_db
from propertyhub.services.auth_service import authenticate, create_user, get_user_by_id
from propertyhub.services.session_store import DatabaseSessionStore, SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Session plumbing
# ---------------------------------------------------------------------------


def get_session_store(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SessionStore:
    """Dependency: the session store bound to this request's DB session."""
    return DatabaseSessionStore(db, timedelta(days=settings.session_max_age_days))


def set_session_cookie(response: Response, session_id: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


async def require_auth(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> str:
    """Dependency: resolve the session cookie to a user id, or 401."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        raise UnauthorizedError()
    user_id = await store.get(session_id)
    if not user_id:
        raise UnauthorizedError()
    # Sliding expiry: the cookie lifetime restarts with every request.
    set_session_cookie(response, session_id, settings)
    return user_id


async def require_admin(
    user_id: str = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Dependency: authenticated user whose stored role is admin, or 403."""
    user = await get_user_by_id(db, user_id)
    if not user or user.role != UserRole.ADMIN.value:
        raise ForbiddenError("Forbidden: Admin access required")
    return user


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.post("/register", response_model=UserResponse)
async def register(
    data: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    user = await create_user(db, data.email, data.password, data.name, data.role.value, data.phone)
    session_id = await store.create(user.id)
    set_session_cookie(response, session_id, settings)
    logger.info("Registered %s user %s", user.role, user.id)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=UserResponse)
async def login(
    data: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    user = await authenticate(db, data.email, data.password)
    if not user:
        raise UnauthorizedError("Invalid credentials")
    session_id = await store.create(user.id)
    set_session_cookie(response, session_id, settings)
    return UserResponse.model_validate(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
):
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id or not await store.peek(session_id):
        raise UnauthorizedError()
    await store.destroy(session_id)
    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserResponse)
async def me(user_id: str = Depends(require_auth), db: AsyncSession = Depends(get_db)):
    user = await get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return UserResponse.model_validate(user)
