"""Request helpers shared by the API tests."""

from httpx import AsyncClient


async def register(
    client: AsyncClient,
    email: str,
    role: str = "broker",
    password: str = "secret123",
    name: str = "Test User",
) -> dict:
    """Register through the API so the client holds a session cookie."""
    resp = await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name, "role": role},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def property_payload(**overrides) -> dict:
    payload = {
        "title": "Sea View 2BHK",
        "description": "Bright apartment close to the promenade.",
        "property_type": "residential",
        "listing_type": "sale",
        "price_min": 5_000_000,
        "price_max": 6_000_000,
        "location": "Bandra West",
        "city": "Mumbai",
        "state": "Maharashtra",
        "pincode": "400050",
        "bedrooms": 2,
        "bathrooms": 2,
        "area": 950,
        "images": ["/objects/uploads/a1", "/objects/uploads/b2"],
        "amenities": ["Lift", "Parking"],
        "nearby_places": ["Station - 1km"],
    }
    payload.update(overrides)
    return payload
