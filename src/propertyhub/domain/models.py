"""SQLAlchemy ORM models for PropertyHub.

All models use portable types so the same schema runs on SQLite and Postgres:
- String(36) for UUID primary keys
- JSON for ordered string lists (no ARRAY)
- naive UTC DateTime for timestamps
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from propertyhub.infra.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite drops tzinfo on the way back anyway)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Auth / User
# ---------------------------------------------------------------------------


class User(Base):
    """Platform user: broker, owner or admin."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="broker")  # broker, owner, admin
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    properties = relationship("Property", back_populates="broker", passive_deletes=True)


class UserSession(Base):
    """Server-side session keyed by the opaque id stored in the session cookie."""

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


class Property(Base):
    """A listing owned by exactly one broker."""

    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=_uuid)
    broker_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    property_type = Column(String(20), nullable=False)  # residential, commercial, land
    listing_type = Column(String(20), nullable=False, default="sale")  # sale, rent, lease
    status = Column(String(20), nullable=False, default="available")  # available, rented, sold
    price_min = Column(BigInteger, nullable=False)
    price_max = Column(BigInteger, nullable=True)  # null = fixed price (typical for rent)
    location = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    pincode = Column(String(20), nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)
    area = Column(Integer, nullable=False)  # sq ft
    images = Column(JSON, nullable=False, default=list)
    videos = Column(JSON, nullable=False, default=list)
    amenities = Column(JSON, nullable=False, default=list)
    facilities = Column(JSON, nullable=False, default=list)
    nearby_places = Column(JSON, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False)
    views = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    broker = relationship("User", back_populates="properties")


# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------


class Lead(Base):
    """Inbound contact submission, optionally tied to a property."""

    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=_uuid)
    property_id = Column(String(36), ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True)
    lead_type = Column(String(30), nullable=False)  # property_inquiry, interior_design, contact
    status = Column(String(20), nullable=False, default="new")
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)
    budget = Column(BigInteger, nullable=True)
    requirements = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)

    property = relationship("Property")
