"""Demo data: an admin, a broker and a few listings for the broker.

Safe to run repeatedly; existing accounts are reused and listings are only
added when the demo broker has none.
"""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from propertyhub.domain.models import Property, User
from propertyhub.services.auth_service import get_user_by_email, hash_password

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@propertyhub.com"
ADMIN_PASSWORD = "admin123"
BROKER_EMAIL = "broker@demo.com"
BROKER_PASSWORD = "demo123"

DEMO_PROPERTIES = [
    {
        "title": "Luxury 3BHK Apartment in South Delhi",
        "description": "Spacious 3 bedroom apartment with gym, swimming pool and parking, close to markets and metro.",
        "property_type": "residential",
        "listing_type": "sale",
        "price_min": 7_000_000,
        "price_max": 8_000_000,
        "location": "Saket",
        "city": "New Delhi",
        "state": "Delhi",
        "pincode": "110017",
        "area": 1850,
        "bedrooms": 3,
        "bathrooms": 3,
        "amenities": ["Gym", "Swimming Pool", "Parking", "Security", "Power Backup"],
        "facilities": ["Elevator", "Club House", "Garden"],
        "nearby_places": ["Metro Station - 500m", "Schools - 1km", "Hospital - 2km"],
        "featured": True,
    },
    {
        "title": "Modern Office Space in Cyber City",
        "description": "Premium office space with high-speed internet, 24/7 power backup and ample parking.",
        "property_type": "commercial",
        "listing_type": "rent",
        "price_min": 150_000,
        "price_max": None,
        "location": "Cyber City",
        "city": "Gurugram",
        "state": "Haryana",
        "pincode": "122002",
        "area": 3500,
        "bathrooms": 4,
        "amenities": ["High Speed Internet", "Power Backup", "AC", "Parking"],
        "facilities": ["Reception", "Conference Room", "Cafeteria"],
        "nearby_places": ["Metro - 200m", "Food Court - 100m", "Banks - 500m"],
    },
    {
        "title": "Residential Plot in Noida Extension",
        "description": "Prime residential plot ready for construction. Clear title, approved by authority.",
        "property_type": "land",
        "listing_type": "sale",
        "price_min": 4_000_000,
        "price_max": 5_000_000,
        "location": "Greater Noida West",
        "city": "Greater Noida",
        "state": "Uttar Pradesh",
        "pincode": "201306",
        "area": 2000,
        "amenities": ["Clear Title", "Approved by Authority"],
        "facilities": ["Road Access", "Electricity Connection"],
        "nearby_places": ["Highway - 1km", "Metro Station - 3km"],
    },
    {
        "title": "Farmhouse Plot in NCR",
        "description": "Large agricultural land for farmhouse development with good highway connectivity.",
        "property_type": "land",
        "listing_type": "lease",
        "price_min": 23_000_000,
        "price_max": 27_000_000,
        "location": "Chattarpur",
        "city": "New Delhi",
        "state": "Delhi",
        "pincode": "110074",
        "area": 10000,
        "amenities": ["Peaceful Location", "Highway Access"],
        "facilities": ["Water Connection", "Electricity"],
        "nearby_places": ["Highway - 2km", "Market - 5km"],
    },
]


async def _ensure_user(db: AsyncSession, email: str, password: str, name: str, role: str, phone: str) -> tuple[User, bool]:
    user = await get_user_by_email(db, email)
    if user:
        return user, False
    user = User(email=email, password_hash=hash_password(password), name=name, role=role, phone=phone)
    db.add(user)
    await db.flush()
    return user, True


async def seed_demo_data(db: AsyncSession) -> dict:
    """Create demo accounts and listings. Returns counts of what was inserted."""
    stats = {"users": 0, "properties": 0}

    _, created = await _ensure_user(db, ADMIN_EMAIL, ADMIN_PASSWORD, "Super Admin", "admin", "+91 9999999999")
    stats["users"] += int(created)
    broker, created = await _ensure_user(db, BROKER_EMAIL, BROKER_PASSWORD, "Demo Broker", "broker", "+91 9876543210")
    stats["users"] += int(created)

    existing = await db.scalar(
        select(func.count()).select_from(Property).where(Property.broker_id == broker.id)
    )
    if not existing:
        for fields in DEMO_PROPERTIES:
            db.add(Property(broker_id=broker.id, **fields))
            stats["properties"] += 1

    await db.commit()
    logger.info("Seed complete: %s", stats)
    return stats


async def _run() -> dict:
    from propertyhub.infra.database import async_session, init_db

    await init_db()
    async with async_session() as db:
        return await seed_demo_data(db)


def main() -> None:
    """Entry point for the ``propertyhub-seed`` console script."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    stats = asyncio.run(_run())
    print(f"Seeded {stats['users']} users and {stats['properties']} properties")
    print(f"  Admin:  {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    print(f"  Broker: {BROKER_EMAIL} / {BROKER_PASSWORD}")


if __name__ == "__main__":
    main()
