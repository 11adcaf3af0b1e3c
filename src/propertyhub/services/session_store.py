"""Server-side session storage.

The cookie only carries an opaque id; the user it belongs to lives in the
``sessions`` table. Handlers receive a store through a FastAPI dependency
instead of reaching for module state.
"""

import logging
import secrets
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.domain.models import UserSession, utcnow

logger = logging.getLogger(__name__)


class SessionStore:
    """Capability interface: create, resolve and destroy sessions by id."""

    async def create(self, user_id: str) -> str:
        raise NotImplementedError

    async def get(self, session_id: str) -> str | None:
        raise NotImplementedError

    async def peek(self, session_id: str) -> str | None:
        raise NotImplementedError

    async def destroy(self, session_id: str) -> None:
        raise NotImplementedError


class DatabaseSessionStore(SessionStore):
    """Sessions persisted next to the domain tables, with sliding expiry."""

    def __init__(self, db: AsyncSession, max_age: timedelta):
        self.db = db
        self.max_age = max_age

    async def create(self, user_id: str) -> str:
        session_id = secrets.token_urlsafe(32)
        now = utcnow()
        self.db.add(UserSession(
            id=session_id,
            user_id=user_id,
            created_at=now,
            expires_at=now + self.max_age,
        ))
        await self.db.commit()
        return session_id

    async def get(self, session_id: str) -> str | None:
        """Resolve a session to its user id, pushing its expiry forward."""
        if not session_id:
            return None
        row = await self.db.get(UserSession, session_id)
        if row is None:
            return None
        now = utcnow()
        if row.expires_at <= now:
            await self.db.delete(row)
            await self.db.commit()
            return None
        row.expires_at = now + self.max_age
        await self.db.commit()
        return row.user_id

    async def peek(self, session_id: str) -> str | None:
        """Resolve a live session without extending it."""
        if not session_id:
            return None
        row = await self.db.get(UserSession, session_id)
        if row is None or row.expires_at <= utcnow():
            return None
        return row.user_id

    async def destroy(self, session_id: str) -> None:
        await self.db.execute(delete(UserSession).where(UserSession.id == session_id))
        await self.db.commit()

    async def purge_expired(self) -> int:
        result = await self.db.execute(delete(UserSession).where(UserSession.expires_at <= utcnow()))
        await self.db.commit()
        if result.rowcount:
            logger.info("Purged %d expired sessions", result.rowcount)
        return result.rowcount or 0
