import json
import uuid

import pytest
from conftest import DESCRIPTION, auth, stored_status

from pakproperty.models.enums import PropertyStatus

def create_form(**overrides) -> dict:
    fields = {
        "title": "Modern apartment near Clifton beach",
        "description": DESCRIPTION,
        "propertyType": "apartment",
        "category": "residential",
        "rent": "65000",
        "location": json.dumps({"address": "Block 2, Clifton", "city": "Karachi", "area": "Clifton"}),
        "specifications": json.dumps({"bedrooms": 2, "bathrooms": 2}),
        "area": json.dumps({"size": 1200, "unit": "sqft"}),
        "features": json.dumps({"furnishing": "semi-furnished"}),
    }
    fields.update(overrides)
    return fields

@pytest.mark.asyncio
async def test_list_without_filters_returns_everything(client, make_user, make_property):
    owner = await make_user("owner")
    for i in range(3):
        await make_property(owner, title=f"Listing number {i} in Karachi")
    await make_property(owner, status="rented")

    response = await client.get("/api/properties")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total"] == 4
    assert body["count"] == 4
    assert body["pagination"] == {"page": 1, "limit": 12, "pages": 1}

@pytest.mark.asyncio
async def test_each_filter_narrows_the_result(client, make_user, make_property):
    owner = await make_user("owner")
    await make_property(owner, rent=40000, location={"city": "Lahore", "area": "Gulberg"})
    await make_property(owner, rent=90000, specifications={"bedrooms": 5, "bathrooms": 4})
    await make_property(owner, property_type="apartment", features={"furnishing": "fully-furnished"})
    await make_property(owner, category="commercial", property_type="office", title="Corner office on Shahrah-e-Faisal")

    everything = (await client.get("/api/properties")).json()
    all_ids = {p["id"] for p in everything["data"]}
    filters = [
        {"city": "Lahore"},
        {"area": "gulb"},
        {"propertyType": "apartment"},
        {"category": "commercial"},
        {"minPrice": "50000"},
        {"maxPrice": "50000"},
        {"bedrooms": "4"},
        {"bathrooms": "3"},
        {"furnishing": "fully-furnished"},
        {"search": "corner office"},
        {"status": "rented"},
    ]
    for params in filters:
        body = (await client.get("/api/properties", params=params)).json()
        ids = {p["id"] for p in body["data"]}
        assert ids <= all_ids, params
        assert len(ids) < len(all_ids), params

@pytest.mark.asyncio
async def test_filters_are_combined(client, make_user, make_property):
    owner = await make_user("owner")
    match = await make_property(owner, rent=70000, location={"city": "Lahore", "area": "Gulberg"})
    await make_property(owner, rent=30000, location={"city": "Lahore", "area": "Gulberg"})
    await make_property(owner, rent=70000)

    body = (await client.get("/api/properties", params={"city": "Lahore", "minPrice": 50000})).json()
    assert [p["id"] for p in body["data"]] == [str(match.id)]

@pytest.mark.asyncio
async def test_empty_filter_values_are_ignored(client, make_user, make_property):
    owner = await make_user("owner")
    await make_property(owner)
    body = (await client.get("/api/properties", params={"city": "", "bedrooms": "", "search": ""})).json()
    assert body["total"] == 1

@pytest.mark.asyncio
async def test_pagination_and_sort(client, make_user, make_property):
    owner = await make_user("owner")
    for rent in (50000, 10000, 30000, 20000, 40000):
        await make_property(owner, rent=rent)

    first = (await client.get("/api/properties", params={"sort": "price-asc", "limit": 2})).json()
    second = (await client.get("/api/properties", params={"sort": "price-asc", "limit": 2, "page": 2})).json()
    assert [p["rent"] for p in first["data"]] == [10000, 20000]
    assert [p["rent"] for p in second["data"]] == [30000, 40000]
    assert first["pagination"] == {"page": 1, "limit": 2, "pages": 3}
    assert first["total"] == 5

    desc = (await client.get("/api/properties", params={"sort": "price-desc", "limit": 1})).json()
    assert desc["data"][0]["rent"] == 50000

@pytest.mark.asyncio
@pytest.mark.parametrize("params", [
    {"propertyType": "castle"},
    {"city": "Atlantis"},
    {"sort": "random"},
    {"page": "0"},
    {"minPrice": "cheap"},
    {"minPrice": "90000", "maxPrice": "1000"},
])
async def test_malformed_filters_are_rejected(client, params):
    response = await client.get("/api/properties", params=params)
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["message"]

@pytest.mark.asyncio
async def test_featured_returns_flagged_available_listings(client, make_user, make_property):
    owner = await make_user("owner")
    featured = await make_property(owner, is_featured=True)
    await make_property(owner, is_featured=True, status="rented")
    await make_property(owner)

    body = (await client.get("/api/properties/featured")).json()
    assert [p["id"] for p in body["data"]] == [str(featured.id)]

@pytest.mark.asyncio
async def test_get_single_property_counts_views(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner)
    await client.get(f"/api/properties/{prop.id}")
    body = (await client.get(f"/api/properties/{prop.id}")).json()
    assert body["data"]["views"] == 2
    assert body["data"]["ownerId"] == str(owner.id)

@pytest.mark.asyncio
async def test_unknown_property_is_not_found(client):
    response = await client.get(f"/api/properties/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Property not found"}

@pytest.mark.asyncio
async def test_create_property_with_images(client, make_user, media_root):
    owner = await make_user("owner")
    files = [
        ("images", ("front.jpg", b"\xff\xd8front", "image/jpeg")),
        ("images", ("kitchen.png", b"\x89PNGkitchen", "image/png")),
    ]
    data = create_form(imageCaption0="front.jpg", imageCaption1="kitchen.png")
    response = await client.post("/api/properties", data=data, files=files, headers=auth(owner))

    assert response.status_code == 201
    created = response.json()["data"]
    assert created["ownerId"] == str(owner.id)
    assert created["status"] == "available"
    assert created["location"]["city"] == "Karachi"
    assert created["specifications"]["bedrooms"] == 2
    assert created["features"]["furnishing"] == "semi-furnished"
    assert [img["caption"] for img in created["images"]] == ["front.jpg", "kitchen.png"]
    assert [img["isPrimary"] for img in created["images"]] == [True, False]
    assert created["slug"].startswith("modern-apartment-near-clifton-beach-karachi-clifton-")
    assert len(list((media_root / "properties").iterdir())) == 2

@pytest.mark.asyncio
async def test_create_requires_authentication(client):
    response = await client.post("/api/properties", data=create_form())
    assert response.status_code == 401
    assert response.json()["success"] is False

@pytest.mark.asyncio
async def test_create_requires_listing_role(client, make_user):
    tenant = await make_user("tenant")
    response = await client.post("/api/properties", data=create_form(), headers=auth(tenant))
    assert response.status_code == 403

@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"title": "Too short"},
    {"propertyType": "castle"},
    {"rent": "-5"},
    {"specifications": json.dumps({"kitchens": 1})},
    {"location": "not json"},
])
async def test_create_rejects_invalid_fields(client, make_user, overrides):
    owner = await make_user("owner")
    response = await client.post("/api/properties", data=create_form(**overrides), headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["success"] is False

@pytest.mark.asyncio
async def test_create_rejects_non_image_upload(client, make_user):
    owner = await make_user("owner")
    files = [("images", ("notes.txt", b"hello", "text/plain"))]
    response = await client.post("/api/properties", data=create_form(), files=files, headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["message"] == "Only image files are allowed"

@pytest.mark.asyncio
async def test_update_merges_fields_and_appends_images(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner, images=[{"url": "/media/properties/old.jpg", "caption": "old", "isPrimary": True, "order": 0}])
    other = await make_user("owner")

    response = await client.put(
        f"/api/properties/{prop.id}",
        data={"rent": "95000", "ownerId": str(other.id), "features": json.dumps({"furnishing": "fully-furnished"})},
        files=[("images", ("new.jpg", b"\xff\xd8new", "image/jpeg"))],
        headers=auth(owner),
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["rent"] == 95000
    assert updated["title"] == "Spacious family house in DHA"
    assert updated["ownerId"] == str(owner.id)
    assert updated["features"]["furnishing"] == "fully-furnished"
    assert [img["url"] for img in updated["images"]][0] == "/media/properties/old.jpg"
    assert len(updated["images"]) == 2
    assert updated["images"][1]["order"] == 1
    assert updated["images"][1]["isPrimary"] is False

@pytest.mark.asyncio
async def test_update_revalidates_status(client, make_user, make_property, session_factory):
    owner = await make_user("owner")
    prop = await make_property(owner)
    response = await client.put(f"/api/properties/{prop.id}", data={"status": "demolished"}, headers=auth(owner))
    assert response.status_code == 400
    assert await stored_status(session_factory, prop.id) == "available"

@pytest.mark.asyncio
async def test_update_by_non_owner_is_forbidden(client, make_user, make_property):
    owner = await make_user("owner")
    intruder = await make_user("agent")
    prop = await make_property(owner)
    response = await client.put(f"/api/properties/{prop.id}", data={"rent": "1"}, headers=auth(intruder))
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to update this property"

@pytest.mark.asyncio
async def test_partial_document_update_keeps_other_fields(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner, location={"sector": "Khayaban-e-Ittehad"})
    response = await client.put(
        f"/api/properties/{prop.id}",
        json={"specifications": {"bedrooms": 5}, "location": {"area": "DHA Phase 6"}},
        headers=auth(owner),
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["specifications"]["bedrooms"] == 5
    assert updated["specifications"]["bathrooms"] == 2
    assert updated["location"]["city"] == "Karachi"
    assert updated["location"]["sector"] == "Khayaban-e-Ittehad"
    assert updated["location"]["area"] == "DHA Phase 6"

@pytest.mark.asyncio
async def test_update_keeps_residential_rooms_required(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner)
    response = await client.put(f"/api/properties/{prop.id}", json={"specifications": {"bathrooms": None}}, headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["message"] == "Residential properties require bedrooms and bathrooms"
    stored = (await client.get(f"/api/properties/{prop.id}")).json()["data"]
    assert stored["specifications"]["bathrooms"] == 2

    office = await make_property(
        owner, category="commercial", property_type="office",
        specifications={"bedrooms": None, "bathrooms": None},
    )
    response = await client.put(f"/api/properties/{office.id}", json={"category": "residential"}, headers=auth(owner))
    assert response.status_code == 400

@pytest.mark.asyncio
async def test_invalid_document_patch_names_the_field(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner)
    response = await client.put(f"/api/properties/{prop.id}", json={"location": {"city": "Atlantis"}}, headers=auth(owner))
    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["location.city"]

@pytest.mark.asyncio
async def test_available_from_is_stored_as_utc(client, make_user, make_property):
    owner = await make_user("owner")
    created = await client.post(
        "/api/properties", data=create_form(availableFrom="2025-01-01T05:00:00+05:00"), headers=auth(owner),
    )
    assert created.json()["data"]["availableFrom"] == "2025-01-01T00:00:00"

    prop = await make_property(owner)
    response = await client.put(
        f"/api/properties/{prop.id}", json={"availableFrom": "2025-03-01T10:30:00-02:00"}, headers=auth(owner),
    )
    assert response.json()["data"]["availableFrom"] == "2025-03-01T12:30:00"

@pytest.mark.asyncio
async def test_owner_marks_property_rented(client, make_user, make_property, session_factory):
    owner = await make_user("owner")
    prop = await make_property(owner, status="available")

    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": "rented"}, headers=auth(owner))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "rented"

    body = (await client.get(f"/api/properties/{prop.id}")).json()
    assert body["data"]["status"] == "rented"

@pytest.mark.asyncio
async def test_non_owner_cannot_change_status(client, make_user, make_property, session_factory):
    owner = await make_user("owner")
    other = await make_user("owner")
    prop = await make_property(owner, status="available")

    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": "rented"}, headers=auth(other))
    assert response.status_code == 403
    assert await stored_status(session_factory, prop.id) == "available"

@pytest.mark.asyncio
@pytest.mark.parametrize("status", [s.value for s in PropertyStatus])
async def test_every_allowed_status_is_persisted(client, make_user, make_property, session_factory, status):
    owner = await make_user("owner")
    prop = await make_property(owner, status="reserved" if status == "available" else "available")
    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": status}, headers=auth(owner))
    assert response.status_code == 200
    assert await stored_status(session_factory, prop.id) == status

@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["demolished", "", "RENTED", None])
async def test_unknown_status_is_rejected(client, make_user, make_property, session_factory, status):
    owner = await make_user("owner")
    prop = await make_property(owner)
    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": status}, headers=auth(owner))
    assert response.status_code == 400
    assert response.json()["message"] == "Validation failed"
    assert await stored_status(session_factory, prop.id) == "available"

@pytest.mark.asyncio
async def test_status_change_requires_token(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner)
    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": "sold"})
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_admin_can_change_any_status(client, make_user, make_property, session_factory):
    owner = await make_user("owner")
    admin = await make_user("admin")
    prop = await make_property(owner)
    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": "sold"}, headers=auth(admin))
    assert response.status_code == 200
    assert await stored_status(session_factory, prop.id) == "sold"

@pytest.mark.asyncio
async def test_assigned_agent_can_change_status(client, make_user, make_property, session_factory):
    owner = await make_user("owner")
    agent = await make_user("agent")
    prop = await make_property(owner, agent_id=agent.id)
    response = await client.patch(f"/api/properties/{prop.id}/status", json={"status": "reserved"}, headers=auth(agent))
    assert response.status_code == 200

@pytest.mark.asyncio
async def test_only_admin_toggles_featured(client, make_user, make_property):
    owner = await make_user("owner")
    admin = await make_user("admin")
    prop = await make_property(owner)

    denied = await client.patch(f"/api/properties/{prop.id}/featured", json={"isFeatured": True}, headers=auth(owner))
    assert denied.status_code == 403
    allowed = await client.patch(f"/api/properties/{prop.id}/featured", json={"isFeatured": True}, headers=auth(admin))
    assert allowed.json()["data"]["isFeatured"] is True

@pytest.mark.asyncio
async def test_my_properties_lists_owned_and_assigned(client, make_user, make_property):
    owner = await make_user("owner")
    agent = await make_user("agent")
    owned = await make_property(owner)
    assigned = await make_property(owner, agent_id=agent.id)
    await make_property(await make_user("owner"))

    mine = (await client.get("/api/properties/my-properties", headers=auth(owner))).json()
    theirs = (await client.get("/api/properties/my-properties", headers=auth(agent))).json()
    assert {p["id"] for p in mine["data"]} == {str(owned.id), str(assigned.id)}
    assert [p["id"] for p in theirs["data"]] == [str(assigned.id)]

@pytest.mark.asyncio
async def test_analytics_for_owner(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner, views=7, saved_count=2)
    body = (await client.get(f"/api/properties/{prop.id}/analytics", headers=auth(owner))).json()
    assert body["data"]["views"] == 7
    assert body["data"]["savedCount"] == 2
    assert body["data"]["daysListed"] == 0

@pytest.mark.asyncio
async def test_delete_removes_listing_and_images(client, make_user, media_root):
    owner = await make_user("owner")
    created = await client.post(
        "/api/properties",
        data=create_form(),
        files=[("images", ("front.jpg", b"\xff\xd8front", "image/jpeg"))],
        headers=auth(owner),
    )
    property_id = created.json()["data"]["id"]
    assert len(list((media_root / "properties").iterdir())) == 1

    response = await client.delete(f"/api/properties/{property_id}", headers=auth(owner))
    assert response.json() == {"success": True, "message": "Property deleted successfully"}
    assert list((media_root / "properties").iterdir()) == []
    assert (await client.get(f"/api/properties/{property_id}")).status_code == 404

@pytest.mark.asyncio
async def test_delete_by_other_user_is_forbidden_but_admin_allowed(client, make_user, make_property):
    owner = await make_user("owner")
    prop = await make_property(owner)

    denied = await client.delete(f"/api/properties/{prop.id}", headers=auth(await make_user("agent")))
    assert denied.status_code == 403
    assert denied.json()["message"] == "Not authorized to delete this property"

    allowed = await client.delete(f"/api/properties/{prop.id}", headers=auth(await make_user("admin")))
    assert allowed.status_code == 200

@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client, make_user, make_property):
    owner = await make_user("owner")
    await make_property(owner)
    match = await make_property(owner, title="Penthouse_suite with terrace view")

    underscore = (await client.get("/api/properties", params={"search": "_"})).json()
    assert [p["id"] for p in underscore["data"]] == [str(match.id)]
    percent = (await client.get("/api/properties", params={"search": "%", "area": "%"})).json()
    assert percent["total"] == 0
