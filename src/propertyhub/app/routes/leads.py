"""Lead routes: public capture, admin-only listing and updates."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.app.routes.auth import require_admin
from propertyhub.domain.models import User
from propertyhub.domain.schemas import LeadCreate, LeadResponse, LeadUpdate, LeadWithPropertyResponse
from propertyhub.infra.database import get_db
from propertyhub.services import lead_service
from propertyhub.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/leads", tags=["leads"])


def get_dispatcher(request: Request) -> NotificationDispatcher | None:
    """Dependency: the app-wide notification dispatcher started in lifespan."""
    dispatcher = getattr(request.app.state, "notifications", None)
    if dispatcher is None:
        logger.warning("No notification dispatcher configured; lead alerts disabled")
    return dispatcher


@router.get("", response_model=list[LeadWithPropertyResponse])
async def list_leads(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await lead_service.list_leads(db)


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(
    data: LeadCreate,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher | None = Depends(get_dispatcher),
):
    return await lead_service.create_lead(db, data, dispatcher)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: str,
    data: LeadUpdate,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await lead_service.update_lead(db, lead_id, data)
