"""
CatHealth Backend — Health To-do Tests
========================================

CRUD through HTTP plus the month arithmetic behind suggestions.
"""

import datetime as dt
from unittest.mock import MagicMock

import pytest

from cathealth.schemas.auth import TokenClaims
from cathealth.services.todo_service import TodoService, add_months


class TestAddMonths:
    def test_simple(self):
        assert add_months(dt.date(2024, 1, 15), 3) == dt.date(2024, 4, 15)

    def test_crosses_year(self):
        assert add_months(dt.date(2024, 11, 30), 3) == dt.date(2025, 2, 28)

    def test_clamps_to_leap_day(self):
        assert add_months(dt.date(2023, 11, 30), 3) == dt.date(2024, 2, 29)

    def test_twelve_months(self):
        assert add_months(dt.date(2024, 2, 29), 12) == dt.date(2025, 2, 28)


@pytest.mark.asyncio
async def test_suggestions_for_each_cat(mock_db_session):
    milo = MagicMock(id=1)
    milo.name = "Milo"
    mock_db_session.execute.return_value.all = MagicMock(return_value=[milo])

    suggestions = await TodoService().suggestions(
        mock_db_session,
        TokenClaims(user_id=1, email="alice@example.com"),
        today=dt.date(2024, 1, 31),
    )

    assert [(s.title, s.type, s.due_date) for s in suggestions] == [
        ("Annual vaccination for Milo", "vaccination", dt.date(2025, 1, 31)),
        ("Regular checkup for Milo", "checkup", dt.date(2024, 4, 30)),
    ]
    assert all(s.cat_id == 1 and s.cat_name == "Milo" for s in suggestions)


@pytest.mark.asyncio
async def test_suggestions_endpoint_lists_only_own_cats(test_client, alice, bob):
    await test_client.post("/api/cats", json={"name": "Milo", "breed": "Siamese"}, headers=alice["headers"])
    await test_client.post("/api/cats", json={"name": "Felix", "breed": "Tabby"}, headers=bob["headers"])

    response = await test_client.get("/api/todos/suggestions", headers=alice["headers"])

    assert response.status_code == 200
    titles = [s["title"] for s in response.json()]
    assert titles == ["Annual vaccination for Milo", "Regular checkup for Milo"]


@pytest.mark.asyncio
async def test_todo_lifecycle(test_client, alice):
    cat = (
        await test_client.post("/api/cats", json={"name": "Milo", "breed": "Siamese"}, headers=alice["headers"])
    ).json()

    created = await test_client.post(
        "/api/todos",
        json={"title": "Buy flea drops", "type": "medication", "dueDate": "2024-05-01", "catId": cat["id"]},
        headers=alice["headers"],
    )
    assert created.status_code == 201
    todo = created.json()
    assert todo["completed"] is False
    assert todo["catId"] == cat["id"]

    done = await test_client.put(
        f"/api/todos/{todo['id']}",
        json={"title": "Buy flea drops", "type": "medication", "dueDate": "2024-05-01", "completed": True},
        headers=alice["headers"],
    )
    assert done.status_code == 200
    assert done.json()["completed"] is True

    open_items = await test_client.get("/api/todos", params={"completed": "false"}, headers=alice["headers"])
    assert open_items.json() == []
    finished = await test_client.get("/api/todos", params={"completed": "true"}, headers=alice["headers"])
    assert [t["id"] for t in finished.json()] == [todo["id"]]

    deleted = await test_client.delete(f"/api/todos/{todo['id']}", headers=alice["headers"])
    assert deleted.status_code == 204


@pytest.mark.asyncio
async def test_open_todos_sorted_by_due_date_undated_last(test_client, alice):
    for title, due in (("later", "2024-09-01"), ("someday", None), ("soon", "2024-02-01")):
        await test_client.post("/api/todos", json={"title": title, "dueDate": due}, headers=alice["headers"])

    response = await test_client.get("/api/todos", headers=alice["headers"])

    assert [t["title"] for t in response.json()] == ["soon", "later", "someday"]


@pytest.mark.asyncio
async def test_todo_ownership(test_client, alice, bob):
    todo = (
        await test_client.post("/api/todos", json={"title": "Vet visit"}, headers=alice["headers"])
    ).json()

    assert (await test_client.delete(f"/api/todos/{todo['id']}", headers=bob["headers"])).status_code == 403
    assert (
        await test_client.put(f"/api/todos/{todo['id']}", json={"title": "mine now"}, headers=bob["headers"])
    ).status_code == 403
    assert (await test_client.get("/api/todos", headers=bob["headers"])).json() == []
    assert (await test_client.delete("/api/todos/999999", headers=bob["headers"])).status_code == 404


@pytest.mark.asyncio
async def test_todo_cannot_point_at_other_users_cat(test_client, alice, bob):
    cat = (
        await test_client.post("/api/cats", json={"name": "Milo", "breed": "Siamese"}, headers=alice["headers"])
    ).json()

    response = await test_client.post(
        "/api/todos", json={"title": "Hijack", "catId": cat["id"]}, headers=bob["headers"]
    )
    assert response.status_code == 403

    missing = await test_client.post("/api/todos", json={"title": "Ghost", "catId": 999999}, headers=bob["headers"])
    assert missing.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("cat_id", [99999999999999999999, 2**31, 0, -4])
async def test_out_of_range_cat_id_is_400(test_client, alice, cat_id):
    response = await test_client.post(
        "/api/todos", json={"title": "Vet visit", "catId": cat_id}, headers=alice["headers"]
    )

    assert response.status_code == 400
    assert response.json()["message"].startswith("catId")
    assert (await test_client.get("/api/todos", headers=alice["headers"])).json() == []


@pytest.mark.asyncio
async def test_largest_cat_id_is_a_plain_404(test_client, alice):
    response = await test_client.post(
        "/api/todos", json={"title": "Vet visit", "catId": 2**31 - 1}, headers=alice["headers"]
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_invalid_completed_filter_is_400(test_client, alice):
    response = await test_client.get("/api/todos", params={"completed": "maybe"}, headers=alice["headers"])
    assert response.status_code == 400
