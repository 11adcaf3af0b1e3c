"""Property repository: listing queries and ownership-scoped mutations."""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from propertyhub.app.config import get_settings
from propertyhub.domain.enums import UserRole
from propertyhub.domain.errors import ForbiddenError, NotFoundError, ValidationError
from propertyhub.domain.models import Lead, Property, User, utcnow
from propertyhub.domain.schemas import PropertyCreate, PropertyUpdate

logger = logging.getLogger(__name__)

_WRITER_ROLES = {UserRole.BROKER.value, UserRole.ADMIN.value}


def _check_price_range(price_min: int, price_max: int | None) -> None:
    if not get_settings().enforce_price_range:
        return
    if price_max is not None and price_max < price_min:
        raise ValidationError("price_max must be greater than or equal to price_min")


async def _check_writer_role(db: AsyncSession, user_id: str) -> None:
    """Optional role gate on listing writes; ownership is always checked separately."""
    if not get_settings().restrict_property_writes_to_brokers:
        return
    user = await db.get(User, user_id)
    if user is None or user.role not in _WRITER_ROLES:
        raise ForbiddenError()


async def _get_owned(db: AsyncSession, user_id: str, property_id: str) -> Property:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise NotFoundError("Property not found")
    if prop.broker_id != user_id:
        logger.info("User %s denied write on property %s", user_id, property_id)
        raise ForbiddenError()
    return prop


async def list_properties(db: AsyncSession, broker_id: str | None = None) -> list[Property]:
    """All listings newest first, optionally narrowed to one broker."""
    stmt = select(Property).order_by(Property.created_at.desc())
    if broker_id:
        stmt = stmt.where(Property.broker_id == broker_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_properties_with_brokers(db: AsyncSession) -> list[Property]:
    result = await db.execute(
        select(Property)
        .options(selectinload(Property.broker))
        .order_by(Property.created_at.desc())
    )
    return list(result.scalars().all())


async def get_property(db: AsyncSession, property_id: str) -> Property:
    """Fetch one listing and count the page view.

    Every call increments ``views``, so this read is not idempotent. The
    increment runs as a single UPDATE so concurrent readers cannot lose counts.
    """
    result = await db.execute(
        update(Property)
        .where(Property.id == property_id)
        .values(views=Property.views + 1)
    )
    if result.rowcount == 0:
        raise NotFoundError("Property not found")
    await db.commit()

    result = await db.execute(
        select(Property)
        .options(selectinload(Property.broker))
        .where(Property.id == property_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def create_property(db: AsyncSession, user_id: str, data: PropertyCreate) -> Property:
    await _check_writer_role(db, user_id)
    _check_price_range(data.price_min, data.price_max)

    now = utcnow()
    prop = Property(
        **data.model_dump(mode="json"),
        broker_id=user_id,
        views=0,
        created_at=now,
        updated_at=now,
    )
    db.add(prop)
    await db.commit()
    await db.refresh(prop)
    logger.info("Property %s created by %s", prop.id, user_id)
    return prop


async def update_property(
    db: AsyncSession, user_id: str, property_id: str, data: PropertyUpdate
) -> Property:
    """Apply a partial update. Ownership is checked before the payload is looked at."""
    prop = await _get_owned(db, user_id, property_id)
    await _check_writer_role(db, user_id)

    changes = data.changes()
    _check_price_range(
        changes.get("price_min", prop.price_min),
        changes.get("price_max", prop.price_max),
    )
    for field, value in changes.items():
        setattr(prop, field, value)
    prop.updated_at = utcnow()

    await db.commit()
    await db.refresh(prop)
    return prop


async def delete_property(db: AsyncSession, user_id: str, property_id: str) -> None:
    """Hard delete. Leads keep existing with their property reference cleared."""
    prop = await _get_owned(db, user_id, property_id)
    await _check_writer_role(db, user_id)

    await db.execute(
        update(Lead).where(Lead.property_id == property_id).values(property_id=None)
    )
    await db.delete(prop)
    await db.commit()
    logger.info("Property %s deleted by %s", property_id, user_id)
