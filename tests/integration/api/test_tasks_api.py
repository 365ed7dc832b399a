"""Integration tests for Tasks API."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from httpx import AsyncClient

from domain.entities.task import PAGING_MAX

BASE_URL = "/api/v1/tasks"


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


async def _create(client: AsyncClient, **body: object) -> dict:
    payload = {"title": "Default task title"}
    payload.update(body)  # type: ignore[arg-type]
    response = await client.post(BASE_URL, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_create_task(self, api_client: AsyncClient) -> None:
        """POST creates with defaults and points Location at the new task."""
        response = await api_client.post(BASE_URL, json={"title": "Buy groceries today"})

        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Buy groceries today"
        assert data["done"] is False
        assert data["notes"] is None
        assert data["dueDate"] is None
        assert data["createdAt"] == data["updatedAt"]
        assert response.headers["location"].endswith(f"{BASE_URL}/{data['id']}")

    @pytest.mark.asyncio
    async def test_create_task_full(self, api_client: AsyncClient) -> None:
        data = await _create(
            api_client,
            title="   Write the quarterly report   ",
            notes="Include Q3 numbers",
            dueDate="2026-11-01T17:00:00+01:00",
            done=True,
        )

        assert data["title"] == "Write the quarterly report"
        assert data["notes"] == "Include Q3 numbers"
        assert data["done"] is True
        assert _parse(data["dueDate"]) == datetime(2026, 11, 1, 16, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_short_title_rejected(self, api_client: AsyncClient) -> None:
        response = await api_client.post(BASE_URL, json={"title": "short"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Title must be longer than 10 characters."
        assert body["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_missing_title_rejected(self, api_client: AsyncClient) -> None:
        response = await api_client.post(BASE_URL, json={"notes": "no title here"})

        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_long_notes_rejected(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BASE_URL, json={"title": "Valid task title", "notes": "n" * 1001}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Notes must be 1000 characters or less."

    @pytest.mark.asyncio
    async def test_bad_due_date_rejected(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BASE_URL, json={"title": "Valid task title", "dueDate": "tomorrow-ish"}
        )

        assert response.status_code == 400
        assert "ISO 8601" in response.json()["error"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "due_date", ["9999-12-31T23:00:00-05:00", "0001-01-01T00:30:00+01:00"]
    )
    async def test_out_of_range_due_date_rejected(
        self, api_client: AsyncClient, due_date: str
    ) -> None:
        response = await api_client.post(
            BASE_URL, json={"title": "Valid task title", "dueDate": due_date}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid due date format. Use ISO 8601 format."

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            BASE_URL, json={"title": "Valid task title", "done": "maybe"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestGetTask:
    @pytest.mark.asyncio
    async def test_get_task(self, api_client: AsyncClient) -> None:
        created = await _create(api_client, dueDate="2026-12-24T18:30:00Z")

        response = await api_client.get(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert _parse(data["dueDate"]) == datetime(2026, 12, 24, 18, 30, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_get_task_not_found(self, api_client: AsyncClient) -> None:
        response = await api_client.get(f"{BASE_URL}/{uuid4()}")

        assert response.status_code == 404
        assert response.content == b""


class TestUpdateTask:
    @pytest.mark.asyncio
    async def test_complete_then_filter(self, api_client: AsyncClient) -> None:
        """Create, mark done via PATCH, then check the status filters."""
        created = await _create(api_client, title="Buy groceries today")

        response = await api_client.patch(f"{BASE_URL}/{created['id']}", json={"done": True})

        assert response.status_code == 200
        data = response.json()
        assert data["done"] is True
        assert data["title"] == "Buy groceries today"
        assert _parse(data["updatedAt"]) > _parse(data["createdAt"])

        completed = await api_client.get(BASE_URL, params={"status": "completed"})
        active = await api_client.get(BASE_URL, params={"status": "active"})
        assert created["id"] in [t["id"] for t in completed.json()]
        assert created["id"] not in [t["id"] for t in active.json()]

    @pytest.mark.asyncio
    async def test_absent_fields_untouched(self, api_client: AsyncClient) -> None:
        created = await _create(
            api_client, notes="keep me", dueDate="2026-07-01T00:00:00Z", done=True
        )

        response = await api_client.patch(
            f"{BASE_URL}/{created['id']}", json={"title": "  Renamed task title  "}
        )

        data = response.json()
        assert data["title"] == "Renamed task title"
        assert data["notes"] == "keep me"
        assert data["dueDate"] == created["dueDate"]
        assert data["done"] is True

    @pytest.mark.asyncio
    async def test_empty_due_date_clears(self, api_client: AsyncClient) -> None:
        created = await _create(api_client, dueDate="2026-07-01T00:00:00Z")

        response = await api_client.patch(f"{BASE_URL}/{created['id']}", json={"dueDate": ""})

        assert response.status_code == 200
        assert response.json()["dueDate"] is None

    @pytest.mark.asyncio
    async def test_invalid_update_leaves_task_unchanged(self, api_client: AsyncClient) -> None:
        created = await _create(api_client)

        response = await api_client.patch(
            f"{BASE_URL}/{created['id']}",
            json={"notes": "fine", "title": "tiny"},
        )
        current = await api_client.get(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 400
        assert current.json() == created

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "due_date", ["9999-12-31T23:00:00-05:00", "0001-01-01T00:30:00+01:00"]
    )
    async def test_out_of_range_due_date_leaves_task_unchanged(
        self, api_client: AsyncClient, due_date: str
    ) -> None:
        created = await _create(api_client)

        response = await api_client.patch(
            f"{BASE_URL}/{created['id']}", json={"dueDate": due_date}
        )
        current = await api_client.get(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert current.json() == created

    @pytest.mark.asyncio
    async def test_update_not_found(self, api_client: AsyncClient) -> None:
        response = await api_client.patch(
            f"{BASE_URL}/{uuid4()}", json={"title": "Nobody home here"}
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_patch_refreshes_updated_at(self, api_client: AsyncClient) -> None:
        created = await _create(api_client)

        response = await api_client.patch(f"{BASE_URL}/{created['id']}", json={})

        assert response.status_code == 200
        assert _parse(response.json()["updatedAt"]) > _parse(created["updatedAt"])


class TestToggleTask:
    @pytest.mark.asyncio
    async def test_toggle_twice_advances_updated_at(self, api_client: AsyncClient) -> None:
        created = await _create(api_client)
        url = f"{BASE_URL}/{created['id']}/toggle"

        first = await api_client.post(url, json={"done": True})
        second = await api_client.post(url, json={"done": True})

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json()["done"] is True
        assert second.json()["done"] is True
        assert _parse(second.json()["updatedAt"]) > _parse(first.json()["updatedAt"])
        assert _parse(first.json()["updatedAt"]) > _parse(created["updatedAt"])

    @pytest.mark.asyncio
    async def test_toggle_back(self, api_client: AsyncClient) -> None:
        created = await _create(api_client, done=True)

        response = await api_client.post(
            f"{BASE_URL}/{created['id']}/toggle", json={"done": False}
        )

        assert response.json()["done"] is False

    @pytest.mark.asyncio
    async def test_toggle_not_found(self, api_client: AsyncClient) -> None:
        response = await api_client.post(f"{BASE_URL}/{uuid4()}/toggle", json={"done": True})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_toggle_requires_done(self, api_client: AsyncClient) -> None:
        created = await _create(api_client)

        response = await api_client.post(f"{BASE_URL}/{created['id']}/toggle", json={})

        assert response.status_code == 400


class TestDeleteTask:
    @pytest.mark.asyncio
    async def test_delete_task(self, api_client: AsyncClient) -> None:
        created = await _create(api_client)

        response = await api_client.delete(f"{BASE_URL}/{created['id']}")

        assert response.status_code == 204
        assert response.content == b""
        get = await api_client.get(f"{BASE_URL}/{created['id']}")
        assert get.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_task_not_found(self, api_client: AsyncClient) -> None:
        response = await api_client.delete(f"{BASE_URL}/{uuid4()}")

        assert response.status_code == 404


class TestListTasks:
    @pytest.mark.asyncio
    async def test_yesterday_before_tomorrow(self, api_client: AsyncClient) -> None:
        now = datetime.now(timezone.utc)
        tomorrow = await _create(
            api_client, title="Due tomorrow task", dueDate=(now + timedelta(days=1)).isoformat()
        )
        yesterday = await _create(
            api_client, title="Due yesterday task", dueDate=(now - timedelta(days=1)).isoformat()
        )

        response = await api_client.get(BASE_URL, params={"sort": "dueDate", "order": "asc"})

        ids = [t["id"] for t in response.json()]
        assert ids.index(yesterday["id"]) < ids.index(tomorrow["id"])

    @pytest.mark.asyncio
    async def test_total_count_header_and_paging(self, api_client: AsyncClient) -> None:
        for i in range(5):
            await _create(api_client, title=f"Paged task number {i}", done=i % 2 == 0)

        first = await api_client.get(BASE_URL, params={"page": 1, "pageSize": 2})
        last = await api_client.get(BASE_URL, params={"page": 3, "pageSize": 2})
        beyond = await api_client.get(BASE_URL, params={"page": 4, "pageSize": 2})

        assert first.status_code == 200
        assert first.headers["x-total-count"] == "5"
        assert len(first.json()) == 2
        assert len(last.json()) == 1
        assert beyond.json() == []
        assert beyond.headers["x-total-count"] == "5"

    @pytest.mark.asyncio
    async def test_incomplete_first_across_pages(self, api_client: AsyncClient) -> None:
        for i in range(6):
            await _create(api_client, title=f"Mixed state task {i}", done=i < 3)

        seen: list[dict] = []
        for page in (1, 2, 3):
            response = await api_client.get(
                BASE_URL, params={"sort": "createdAt", "order": "desc", "page": page, "pageSize": 2}
            )
            seen.extend(response.json())

        assert len({t["id"] for t in seen}) == 6
        assert [t["done"] for t in seen] == [False, False, False, True, True, True]

    @pytest.mark.asyncio
    async def test_lenient_parameters(self, api_client: AsyncClient) -> None:
        await _create(api_client)

        response = await api_client.get(
            BASE_URL, params={"status": "ARCHIVED", "sort": "priority", "order": "up"}
        )

        assert response.status_code == 200
        assert response.headers["x-total-count"] == "1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [
            {"page": 0},
            {"pageSize": 0},
            {"page": "one"},
            {"page": 1_000_000_000_000, "pageSize": 1_000_000_000_000},
            {"page": PAGING_MAX + 1},
        ],
    )
    async def test_invalid_paging_is_400(
        self, api_client: AsyncClient, params: dict[str, object]
    ) -> None:
        response = await api_client.get(BASE_URL, params=params)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_largest_page_is_empty(self, api_client: AsyncClient) -> None:
        await _create(api_client)

        response = await api_client.get(
            BASE_URL, params={"page": PAGING_MAX, "pageSize": PAGING_MAX}
        )

        assert response.status_code == 200
        assert response.json() == []
        assert response.headers["x-total-count"] == "1"


class TestCORS:
    @pytest.mark.asyncio
    async def test_preflight_answered_without_body(self, api_client: AsyncClient) -> None:
        response = await api_client.options(
            BASE_URL,
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "PATCH",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_total_count_is_exposed(self, api_client: AsyncClient) -> None:
        response = await api_client.get(BASE_URL, headers={"Origin": "http://example.com"})

        assert response.headers["access-control-expose-headers"] == "X-Total-Count"
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
