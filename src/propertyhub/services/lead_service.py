"""Lead repository: public capture and admin-side CRM updates."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from propertyhub.domain.enums import LeadStatus
from propertyhub.domain.errors import NotFoundError, ValidationError
from propertyhub.domain.models import Lead, Property, utcnow
from propertyhub.domain.schemas import LeadCreate, LeadUpdate
from propertyhub.services.notification_dispatcher import LeadNotification, NotificationDispatcher

logger = logging.getLogger(__name__)


async def _require_property(db: AsyncSession, property_id: str) -> Property:
    prop = await db.get(Property, property_id)
    if prop is None:
        raise ValidationError("Referenced property does not exist")
    return prop


async def create_lead(
    db: AsyncSession,
    data: LeadCreate,
    dispatcher: NotificationDispatcher | None = None,
) -> Lead:
    """Persist a lead with status ``new`` and queue the admin alert.

    The alert is queued only after the commit, and whatever happens to it
    afterwards has no effect on the returned lead.
    """
    property_title = None
    if data.property_id is not None:
        property_title = (await _require_property(db, data.property_id)).title

    now = utcnow()
    lead = Lead(
        property_id=data.property_id,
        lead_type=data.resolved_lead_type().value,
        status=LeadStatus.NEW.value,
        name=data.name,
        email=str(data.email),
        phone=data.phone,
        message=data.message,
        budget=data.budget,
        requirements=data.requirements,
        created_at=now,
        updated_at=now,
    )
    db.add(lead)
    await db.commit()
    await db.refresh(lead)
    logger.info("Lead %s captured (%s)", lead.id, lead.lead_type)

    if dispatcher is not None:
        dispatcher.submit(LeadNotification.from_lead(lead, property_title))
    return lead


async def list_leads(db: AsyncSession) -> list[Lead]:
    """All leads newest first, each with its property loaded (None when cleared)."""
    result = await db.execute(
        select(Lead)
        .options(selectinload(Lead.property))
        .order_by(Lead.created_at.desc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def update_lead(db: AsyncSession, lead_id: str, data: LeadUpdate) -> Lead:
    lead = await db.get(Lead, lead_id)
    if lead is None:
        raise NotFoundError("Lead not found")

    changes = data.changes()
    if changes.get("property_id") is not None:
        await _require_property(db, changes["property_id"])
    for field, value in changes.items():
        setattr(lead, field, value)
    lead.updated_at = utcnow()

    await db.commit()
    await db.refresh(lead)
    if "status" in changes:
        logger.info("Lead %s moved to %s", lead.id, lead.status)
    return lead
