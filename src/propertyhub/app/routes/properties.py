"""Property routes: public browsing plus owner-only mutations."""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.domain.enums import PropertyType, SortOption
from propertyhub.domain.schemas import (
    MessageResponse,
    PropertyCreate,
    PropertyResponse,
    PropertySearchResponse,
    PropertyUpdate,
    PropertyWithBrokerResponse,
)
from propertyhub.app.routes.auth import require_auth
from propertyhub.infra.database import get_db
from propertyhub.services import property_service
from propertyhub.services.property_search import ALL_TYPES, PAGE_SIZE, PropertyFilters, search

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.get("", response_model=list[PropertyResponse])
async def list_properties(
    broker_id: str | None = Query(None, alias="brokerId"),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.list_properties(db, broker_id)


@router.get("/with-brokers", response_model=list[PropertyWithBrokerResponse])
async def list_properties_with_brokers(db: AsyncSession = Depends(get_db)):
    return await property_service.list_properties_with_brokers(db)


@router.get("/search", response_model=PropertySearchResponse)
async def search_properties(
    q: str = Query("", description="Matches title, location, city or state"),
    property_type: PropertyType | None = Query(None, alias="type"),
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
    sort: SortOption = SortOption.NEWEST,
    pages: int = Query(1, ge=1, le=100, description="How many pages to reveal"),
    db: AsyncSession = Depends(get_db),
):
    """Filter, sort and reveal the public listing in pages of nine."""
    filters = PropertyFilters(
        query=q,
        property_type=property_type.value if property_type else ALL_TYPES,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
    )
    items = await property_service.list_properties(db)
    page = search(items, filters, pages=pages, page_size=PAGE_SIZE)
    return PropertySearchResponse(
        items=[PropertyResponse.model_validate(p) for p in page.items],
        total=page.total,
        shown=page.shown,
        page_size=page.page_size,
        has_more=page.has_more,
        empty=page.empty,
    )


@router.get("/{property_id}", response_model=PropertyWithBrokerResponse)
async def get_property(property_id: str, db: AsyncSession = Depends(get_db)):
    """Listing detail. Each call counts as one page view."""
    return await property_service.get_property(db, property_id)


@router.post("", response_model=PropertyResponse, status_code=201)
async def create_property(
    data: PropertyCreate,
    user_id: str = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.create_property(db, user_id, data)


@router.patch("/{property_id}", response_model=PropertyResponse)
async def update_property(
    property_id: str,
    data: PropertyUpdate,
    user_id: str = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await property_service.update_property(db, user_id, property_id, data)


@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: str,
    user_id: str = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    await property_service.delete_property(db, user_id, property_id)
    return MessageResponse(message="Property deleted")
