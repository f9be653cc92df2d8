"""
CatHealth Backend — Health Record & Calendar API Tests
========================================================

Records are owned through their cat: every record route must answer 404
for a missing record and 403 for someone else's, and the calendar must
only ever show the caller's events.
"""

import pytest


async def _cat(client, user, name="Milo"):
    response = await client.post(
        "/api/cats", json={"name": name, "breed": "Siamese"}, headers=user["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _record(client, user, cat_id, **fields):
    payload = {"type": "vaccination", "date": "2024-01-01", "description": "Rabies"}
    payload.update(fields)
    response = await client.post(f"/api/cats/{cat_id}/records", json=payload, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_register_login_add_cat_and_record(test_client):
    registered = await test_client.post(
        "/api/register",
        json={"name": "alice", "email": "alice@example.com", "password": "secret123"},
    )
    assert registered.status_code == 201

    login = await test_client.post(
        "/api/login", json={"email": "alice@example.com", "password": "secret123"}
    )
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    cat = await test_client.post("/api/cats", json={"name": "Fluffy", "breed": "Persian"}, headers=headers)
    assert cat.status_code == 201
    cat_id = cat.json()["id"]

    created = await test_client.post(
        f"/api/cats/{cat_id}/records",
        json={"type": "vaccination", "date": "2024-01-01", "description": "Rabies shot"},
        headers=headers,
    )
    assert created.status_code == 201

    records = await test_client.get(f"/api/cats/{cat_id}/records", headers=headers)
    assert records.status_code == 200
    body = records.json()
    assert len(body) == 1
    assert body[0]["type"] == "vaccination"
    assert body[0]["catId"] == cat_id
    assert body[0]["date"] == "2024-01-01"


@pytest.mark.asyncio
async def test_cat_detail_includes_its_records(test_client, alice):
    cat = await _cat(test_client, alice)
    record = await _record(test_client, alice, cat["id"])

    detail = await test_client.get(f"/api/cats/{cat['id']}", headers=alice["headers"])
    assert [r["id"] for r in detail.json()["healthRecords"]] == [record["id"]]


@pytest.mark.asyncio
async def test_records_listed_newest_date_first(test_client, alice):
    cat = await _cat(test_client, alice)
    await _record(test_client, alice, cat["id"], date="2023-05-01", description="old")
    await _record(test_client, alice, cat["id"], date="2024-06-01", description="new")
    await _record(test_client, alice, cat["id"], date="2024-01-15", description="middle")

    response = await test_client.get(f"/api/cats/{cat['id']}/records", headers=alice["headers"])

    assert response.status_code == 200
    assert [r["description"] for r in response.json()] == ["new", "middle", "old"]

    detail = await test_client.get(f"/api/cats/{cat['id']}", headers=alice["headers"])
    assert [r["description"] for r in detail.json()["healthRecords"]] == ["new", "middle", "old"]


@pytest.mark.asyncio
async def test_record_access_is_transitive_through_cat(test_client, alice, bob):
    cat = await _cat(test_client, alice)
    record = await _record(test_client, alice, cat["id"])
    url = f"/api/records/{record['id']}"

    assert (await test_client.get(url, headers=bob["headers"])).status_code == 403
    assert (
        await test_client.put(
            url,
            json={"type": "checkup", "date": "2024-02-02", "description": "x"},
            headers=bob["headers"],
        )
    ).status_code == 403
    assert (await test_client.delete(url, headers=bob["headers"])).status_code == 403

    # Still intact for the owner
    assert (await test_client.get(url, headers=alice["headers"])).status_code == 200


@pytest.mark.asyncio
async def test_cannot_add_record_to_other_users_cat(test_client, alice, bob):
    cat = await _cat(test_client, alice)

    response = await test_client.post(
        f"/api/cats/{cat['id']}/records",
        json={"type": "checkup", "date": "2024-01-01", "description": "sneaky"},
        headers=bob["headers"],
    )
    assert response.status_code == 403

    listing = await test_client.get(f"/api/cats/{cat['id']}/records", headers=bob["headers"])
    assert listing.status_code == 403


@pytest.mark.asyncio
async def test_missing_record_is_404(test_client, alice):
    for url in ("/api/records/999999", "/api/records/abc", "/api/cats/999999/records"):
        response = await test_client.get(url, headers=alice["headers"])
        assert response.status_code == 404, url


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"type": "surgery", "date": "2024-01-01", "description": "x"},
        {"type": "checkup", "date": "2024-13-45", "description": "x"},
        {"type": "checkup", "date": "yesterday", "description": "x"},
        {"type": "checkup", "date": "2024-01-01", "description": ""},
        {"type": "checkup", "description": "no date"},
    ],
)
async def test_invalid_record_is_400(test_client, alice, payload):
    cat = await _cat(test_client, alice)

    response = await test_client.post(f"/api/cats/{cat['id']}/records", json=payload, headers=alice["headers"])
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_and_delete_record(test_client, alice):
    cat = await _cat(test_client, alice)
    record = await _record(test_client, alice, cat["id"])

    updated = await test_client.put(
        f"/api/records/{record['id']}",
        json={"type": "medication", "date": "2024-03-03T10:00:00Z", "description": "Dewormer", "notes": "2 pills"},
        headers=alice["headers"],
    )
    assert updated.status_code == 200
    assert updated.json()["type"] == "medication"
    assert updated.json()["date"] == "2024-03-03"
    assert updated.json()["notes"] == "2 pills"

    deleted = await test_client.delete(f"/api/records/{record['id']}", headers=alice["headers"])
    assert deleted.status_code == 204
    again = await test_client.get(f"/api/records/{record['id']}", headers=alice["headers"])
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_attach_pdf_to_record(test_client, alice, sample_pdf_bytes):
    cat = await _cat(test_client, alice)
    record = await _record(test_client, alice, cat["id"])

    response = await test_client.post(
        f"/api/records/{record['id']}/file",
        files={"file": ("invoice.pdf", sample_pdf_bytes, "application/pdf")},
        headers=alice["headers"],
    )

    assert response.status_code == 200
    file_url = response.json()["fileUrl"]
    assert file_url.endswith(".pdf")
    served = await test_client.get(file_url)
    assert served.status_code == 200
    assert served.content == sample_pdf_bytes


@pytest.mark.asyncio
async def test_calendar_only_shows_own_events_in_date_order(test_client, alice, bob):
    milo = await _cat(test_client, alice, "Milo")
    luna = await _cat(test_client, alice, "Luna")
    felix = await _cat(test_client, bob, "Felix")
    await _record(test_client, alice, milo["id"], date="2024-03-01", description="Milo checkup", type="checkup")
    await _record(test_client, alice, luna["id"], date="2024-01-10", description="Luna shots")
    await _record(test_client, bob, felix["id"], date="2024-02-01", description="Felix shots")

    response = await test_client.get("/api/calendar", headers=alice["headers"])

    assert response.status_code == 200
    events = response.json()
    assert [e["description"] for e in events] == ["Luna shots", "Milo checkup"]
    assert events[0]["catName"] == "Luna"
    assert events[1]["catId"] == milo["id"]
    assert set(events[0]) == {"id", "catId", "catName", "type", "date", "description"}


@pytest.mark.asyncio
async def test_calendar_bounds_are_inclusive(test_client, alice):
    cat = await _cat(test_client, alice)
    for day in ("2024-01-01", "2024-01-15", "2024-01-31", "2024-02-01"):
        await _record(test_client, alice, cat["id"], date=day, description=day)

    response = await test_client.get(
        "/api/calendar", params={"start": "2024-01-01", "end": "2024-01-31"}, headers=alice["headers"]
    )

    assert [e["date"] for e in response.json()] == ["2024-01-01", "2024-01-15", "2024-01-31"]


@pytest.mark.asyncio
async def test_calendar_rejects_bad_dates(test_client, alice):
    bad = await test_client.get("/api/calendar", params={"start": "soon"}, headers=alice["headers"])
    assert bad.status_code == 400

    reversed_range = await test_client.get(
        "/api/calendar", params={"start": "2024-02-01", "end": "2024-01-01"}, headers=alice["headers"]
    )
    assert reversed_range.status_code == 400
