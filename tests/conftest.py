"""Shared test infrastructure for the PropertyHub test suite.

Provides:
- db_session: async SQLite in-memory session with all tables created
- dispatcher: NotificationDispatcher whose channels record payloads
- app / client_factory / client: API wired to db_session through dependency overrides
- make_user / make_property / make_lead: row factories
"""

import os
import tempfile

# Settings are read once at import time; pin them before importing the app.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "development"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["TWILIO_ACCOUNT_SID"] = ""
os.environ["ENFORCE_PRICE_RANGE"] = "true"
os.environ["RESTRICT_PROPERTY_WRITES_TO_BROKERS"] = "false"
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="propertyhub-uploads-")
os.environ["CORS_ORIGINS"] = "http://localhost:5173"

from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from propertyhub.infra.database import Base, enable_sqlite_foreign_keys, get_db

# Import model module so its tables are registered with Base.metadata
import propertyhub.domain.models  # noqa: F401

from propertyhub.app.errors import register_exception_handlers
from propertyhub.app.routes.auth import router as auth_router
from propertyhub.app.routes.leads import router as leads_router
from propertyhub.app.routes.objects import get_object_storage, router as objects_router
from propertyhub.app.routes.properties import router as properties_router
from propertyhub.domain.models import Lead, Property, User
from propertyhub.services.auth_service import hash_password
from propertyhub.services.notification_dispatcher import NotificationDispatcher
from propertyhub.services.object_storage import ObjectStorageService


# ---------------------------------------------------------------------------
# Database session fixture
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session():
    """Async SQLite in-memory session with all tables created.

    Creates a fresh engine + tables for each test, yields a session,
    then rolls back and tears down.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine.sync_engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# ---------------------------------------------------------------------------
# Notification dispatcher with recording channels
# ---------------------------------------------------------------------------

@pytest.fixture
def sent_notifications():
    return []


@pytest.fixture
def dispatcher(sent_notifications):
    """Dispatcher whose single channel appends each payload to sent_notifications."""

    async def _record(data: dict):
        sent_notifications.append(data)

    return NotificationDispatcher(maxsize=10, channels=(_record,))


# ---------------------------------------------------------------------------
# App + HTTP clients
# ---------------------------------------------------------------------------

@pytest.fixture
def storage(tmp_path):
    return ObjectStorageService(
        tmp_path / "uploads", public_base_url="http://testserver", max_bytes=1024, signing_key="test-signing-key",
    )


@pytest.fixture
def app(db_session, dispatcher, storage):
    """A FastAPI app with the API routers, bound to the test session."""
    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(auth_router)
    test_app.include_router(properties_router)
    test_app.include_router(leads_router)
    test_app.include_router(objects_router)

    async def _override_get_db():
        yield db_session

    test_app.dependency_overrides[get_db] = _override_get_db
    test_app.dependency_overrides[get_object_storage] = lambda: storage
    test_app.state.notifications = dispatcher
    return test_app


@pytest.fixture
async def client_factory(app):
    """Factory for independent clients (separate cookie jars) against one app."""
    clients = []

    def _factory() -> AsyncClient:
        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(c)
        return c

    yield _factory

    for c in clients:
        await c.aclose()


@pytest.fixture
def client(client_factory):
    return client_factory()


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user(db_session):
    """Factory that creates a User row.

    Usage:
        user = await make_user(email="b@test.com", role="broker")
    """
    async def _factory(
        email: str = "broker@test.com",
        password: str = "secret123",
        name: str = "Test Broker",
        role: str = "broker",
        phone: str | None = "+91 9000000000",
    ) -> User:
        user = User(email=email, password_hash=hash_password(password), name=name, role=role, phone=phone)
        db_session.add(user)
        await db_session.flush()
        return user

    return _factory


@pytest.fixture
def make_property(db_session):
    """Factory that creates a Property row for a broker.

    Usage:
        prop = await make_property(broker, price_min=100, area=50)
    """
    base_time = datetime(2024, 1, 1, 12, 0, 0)

    async def _factory(broker: User, created_offset_minutes: int = 0, **fields) -> Property:
        values = {
            "title": "Test Listing",
            "description": "A listing",
            "property_type": "residential",
            "listing_type": "sale",
            "price_min": 1_000_000,
            "location": "Sector 1",
            "city": "Pune",
            "state": "Maharashtra",
            "area": 1000,
        }
        values.update(fields)
        created = base_time + timedelta(minutes=created_offset_minutes)
        prop = Property(broker_id=broker.id, created_at=created, updated_at=created, **values)
        db_session.add(prop)
        await db_session.flush()
        return prop

    return _factory


@pytest.fixture
def make_lead(db_session):
    async def _factory(property_id: str | None = None, created_offset_minutes: int = 0, **fields) -> Lead:
        values = {
            "lead_type": "property_inquiry" if property_id else "contact",
            "name": "Asha",
            "email": "asha@example.com",
            "phone": "+91 9811111111",
            "message": "Interested",
        }
        values.update(fields)
        created = datetime(2024, 2, 1) + timedelta(minutes=created_offset_minutes)
        lead = Lead(property_id=property_id, created_at=created, updated_at=created, **values)
        db_session.add(lead)
        await db_session.flush()
        return lead

    return _factory
