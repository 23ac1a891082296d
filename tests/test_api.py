"""HTTP-level tests: routing, roles, validation and list operation results."""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeBackend, FakeClock, schema_with

from wedding_planner_api.app.core.security import get_current_user
from wedding_planner_api.app.main import create_app
from wedding_planner_api.app.state.preferences import MemoryStore

CLIENT_USER = {"user_id": "C1", "sub": "couple@example.com", "role": "client", "name": "Anna & Ivan", "access_token": "tc"}
ORGANIZER_USER = {"user_id": "O1", "sub": "org@example.com", "role": "organizer", "name": "Olga", "access_token": "to"}
MAIN_USER = {"user_id": "M1", "sub": "main@example.com", "role": "main_organizer", "name": "Maria", "access_token": "tm"}


def _seed():
    return {
        "weddings": [
            {"id": "W1", "client_id": "C1", "organizer_id": "O1", "couple_name_1_en": "Anna", "couple_name_2_en": "Ivan"},
            {"id": "W2", "client_id": "C2", "organizer_id": "O2", "couple_name_1_en": "Kate", "couple_name_2_en": "Max"},
        ],
        "tasks": [
            {"id": "t1", "wedding_id": "W1", "title": "Venue", "status": "pending", "order": 0},
            {"id": "t2", "wedding_id": "W1", "title": "Photographer", "status": "pending", "order": 1},
            {"id": "t3", "wedding_id": "W1", "title": "Flowers", "status": "pending", "order": 2},
        ],
        "documents": [
            {"id": "d1", "wedding_id": "W1", "name": "Contract", "link": "https://drive.google.com/file/d/F1/view"},
        ],
    }


@pytest.fixture
def backend():
    return FakeBackend(_seed())


@pytest.fixture
def app(backend):
    return create_app(backend=backend, clock=FakeClock(), local_store=MemoryStore())


@pytest.fixture
def as_user(app):
    """Switch the authenticated user for subsequent requests."""

    def switch(user):
        app.dependency_overrides[get_current_user] = lambda: dict(user)

    yield switch
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


class TestInfoAndAuth:
    def test_health_reports_ordering(self, client):
        response = client.get("/api/v1/info/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["ordering"] == {"tasks": True, "documents": True, "task_groups": True}

    def test_missing_token_is_401(self, client):
        assert client.get("/api/v1/weddings/me").status_code == 401

    def test_invalid_token_is_401(self, client):
        response = client.get("/api/v1/weddings/me", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_token_resolves_profile_role(self, client, backend):
        backend.users["good"] = {"id": "O1", "email": "org@example.com"}
        backend.rows("profiles").append({"id": "O1", "role": "organizer", "name": "Olga"})
        response = client.get("/api/v1/weddings/", headers={"Authorization": "Bearer good"})
        assert response.status_code == 200
        assert [w["id"] for w in response.json()] == ["W1"]
        assert "good" in backend.tokens

    def test_signup_metadata_does_not_grant_role(self, client, backend):
        backend.users["self-made"] = {"id": "X1", "user_metadata": {"role": "main_organizer"}}
        headers = {"Authorization": "Bearer self-made"}
        assert client.get("/api/v1/weddings/", headers=headers).status_code == 403
        assert client.get("/api/v1/weddings/W2/tasks", headers=headers).status_code == 404

    def test_profile_lookup_failure_is_503(self, client, backend):
        backend.users["self-made"] = {"id": "X1", "user_metadata": {"role": "main_organizer"}}
        backend.fail("profiles", "select")
        response = client.get("/api/v1/weddings/", headers={"Authorization": "Bearer self-made"})
        assert response.status_code == 503

    def test_client_cannot_list_weddings(self, client, as_user):
        as_user(CLIENT_USER)
        assert client.get("/api/v1/weddings/").status_code == 403


class TestWeddings:
    def test_client_reads_own_wedding(self, client, as_user):
        as_user(CLIENT_USER)
        response = client.get("/api/v1/weddings/me")
        assert response.status_code == 200
        assert response.json()["id"] == "W1"

    def test_foreign_wedding_is_404(self, client, as_user):
        as_user(CLIENT_USER)
        assert client.get("/api/v1/weddings/W2").status_code == 404

    def test_main_organizer_sees_all(self, client, as_user):
        as_user(MAIN_USER)
        response = client.get("/api/v1/weddings/")
        assert {w["id"] for w in response.json()} == {"W1", "W2"}

    def test_create_validation(self, client, as_user):
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/weddings/",
            json={
                "client_id": "C3",
                "couple_name_1_en": " ",
                "couple_name_2_en": "B",
                "wedding_date": "2026-05-28",
                "country": "Montenegro",
                "venue": "Castle",
            },
        )
        assert response.status_code == 422

    def test_create_assigns_organizer(self, client, as_user, backend):
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/weddings/",
            json={
                "client_id": "C3",
                "couple_name_1_en": "Lena",
                "couple_name_2_en": "Pavel",
                "wedding_date": "2026-05-28",
                "country": "Montenegro",
                "venue": "Castle",
            },
        )
        assert response.status_code == 201
        assert response.json()["organizer_id"] == "O1"

    def test_notes_are_debounced_and_flushed_on_shutdown(self, app, backend, as_user):
        as_user(CLIENT_USER)
        with TestClient(app) as test_client:
            for text in ("Call", "Call the", "Call the florist"):
                response = test_client.put("/api/v1/weddings/W1/notes", json={"notes": text})
                assert response.status_code == 202
                assert response.json() == {"scheduled": True, "delay_ms": 1000}
        assert backend.row("weddings", "W1")["notes"] == "Call the florist"
        assert len(backend.calls_for("update", "weddings")) == 1


class TestTasks:
    def test_list_in_display_order(self, client, as_user):
        as_user(CLIENT_USER)
        response = client.get("/api/v1/weddings/W1/tasks")
        assert [t["id"] for t in response.json()] == ["t1", "t2", "t3"]

    def test_list_localizes_titles(self, client, as_user, backend):
        backend.row("tasks", "t1").update({"title_en": "Book [the venue](venue.com)", "title_ru": "Площадка"})
        as_user(CLIENT_USER)
        tasks = client.get("/api/v1/weddings/W1/tasks", params={"lang": "en"}).json()
        assert tasks[0]["display_title"] == "Book [the venue](venue.com)"
        assert tasks[0]["title_parts"][1] == {"type": "link", "content": "the venue", "href": "https://venue.com"}
        tasks = client.get("/api/v1/weddings/W1/tasks").json()
        assert tasks[0]["display_title"] == "Площадка"

    def test_task_of_other_wedding_is_404(self, client, as_user, backend):
        backend.rows("weddings").append({"id": "W3", "client_id": "C3", "organizer_id": "O1"})
        backend.rows("tasks").append({"id": "t9", "wedding_id": "W3", "title": "Old", "status": "pending"})
        as_user(ORGANIZER_USER)
        assert [t["title"] for t in client.get("/api/v1/weddings/W3/tasks").json()] == ["Old"]

        assert client.put("/api/v1/weddings/W1/tasks/t9", json={"title": "New"}).status_code == 404
        assert client.delete("/api/v1/weddings/W1/tasks/t9").status_code == 404
        assert backend.row("tasks", "t9")["title"] == "Old"

        assert client.put("/api/v1/weddings/W3/tasks/t9", json={"title": "New"}).status_code == 200
        assert [t["title"] for t in client.get("/api/v1/weddings/W3/tasks").json()] == ["New"]

    def test_client_toggles_task(self, client, as_user, backend):
        as_user(CLIENT_USER)
        response = client.post("/api/v1/weddings/W1/tasks/t2/toggle", json={"completed": True})
        body = response.json()
        assert body["success"] is True
        assert {t["id"]: t["status"] for t in body["items"]}["t2"] == "completed"
        assert backend.row("tasks", "t2")["status"] == "completed"

    def test_toggle_failure_reports_banner(self, client, as_user, backend):
        as_user(CLIENT_USER)
        backend.fail("tasks", "update")
        body = client.post("/api/v1/weddings/W1/tasks/t2/toggle", json={"completed": True}).json()
        assert body["success"] is False
        assert body["error"] == "Не удалось обновить статус задания"
        assert {t["id"]: t["status"] for t in body["items"]}["t2"] == "pending"

    def test_client_cannot_reorder(self, client, as_user):
        as_user(CLIENT_USER)
        response = client.post("/api/v1/weddings/W1/tasks/reorder", json={"dragged_id": "t3", "target_id": "t1"})
        assert response.status_code == 403

    def test_organizer_reorders(self, client, as_user, backend):
        as_user(ORGANIZER_USER)
        body = client.post(
            "/api/v1/weddings/W1/tasks/reorder", json={"dragged_id": "t3", "target_id": "t1"}
        ).json()
        assert body["success"] is True
        assert [t["id"] for t in body["items"]] == ["t3", "t1", "t2"]
        assert backend.row("tasks", "t3")["order"] == 0

    def test_reorder_is_visible_on_next_read(self, client, as_user):
        as_user(ORGANIZER_USER)
        client.get("/api/v1/weddings/W1/tasks")
        client.post("/api/v1/weddings/W1/tasks/reorder", json={"dragged_id": "t3", "target_id": "t1"})
        response = client.get("/api/v1/weddings/W1/tasks")
        assert [t["id"] for t in response.json()] == ["t3", "t1", "t2"]

    def test_create_requires_title(self, client, as_user):
        as_user(ORGANIZER_USER)
        response = client.post("/api/v1/weddings/W1/tasks", json={"title_en": "  "})
        assert response.status_code == 422
        assert "Введите название задания" in response.text

    def test_create_appends(self, client, as_user):
        as_user(ORGANIZER_USER)
        response = client.post("/api/v1/weddings/W1/tasks", json={"title_ru": "Торт"})
        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Торт"
        assert body["order"] == 3
        assert body["wedding_id"] == "W1"


class TestReorderWithoutOrderColumn:
    @pytest.fixture
    def backend(self):
        backend = FakeBackend(_seed())
        backend.schema = schema_with(
            tasks=["id", "wedding_id", "title", "status"],
            documents=["id", "wedding_id", "name"],
            task_groups=["id", "name"],
        )
        return backend

    def test_degraded_success(self, client, as_user, backend, caplog):
        as_user(ORGANIZER_USER)
        body = client.post(
            "/api/v1/weddings/W1/tasks/reorder", json={"dragged_id": "t3", "target_id": "t1"}
        ).json()
        assert body["success"] is True
        assert body["degraded"] is True
        assert backend.calls_for("update") == []
        assert "order kept locally only" in caplog.text

    def test_health_shows_missing_column(self, client):
        assert client.get("/api/v1/info/health").json()["ordering"]["tasks"] is False


class TestDocuments:
    def test_download_link_rewritten(self, client, as_user):
        as_user(CLIENT_USER)
        response = client.get("/api/v1/documents/d1/download")
        assert response.json() == {"url": "https://drive.google.com/uc?export=download&id=F1"}

    def test_download_foreign_document(self, client, as_user, backend):
        backend.rows("documents").append({"id": "d9", "wedding_id": "W2", "name": "Secret", "link": "x.com"})
        as_user(CLIENT_USER)
        assert client.get("/api/v1/documents/d9/download").status_code == 404

    def test_document_of_other_wedding_is_404(self, client, as_user, backend):
        backend.rows("weddings").append({"id": "W3", "client_id": "C3", "organizer_id": "O1"})
        backend.rows("documents").append({"id": "d9", "wedding_id": "W3", "name": "Secret"})
        as_user(ORGANIZER_USER)
        assert client.put("/api/v1/weddings/W1/documents/d9", json={"name": "Mine"}).status_code == 404
        assert client.delete("/api/v1/weddings/W1/documents/d9").status_code == 404
        assert backend.row("documents", "d9")["name"] == "Secret"

    def test_create_requires_name(self, client, as_user):
        as_user(ORGANIZER_USER)
        response = client.post("/api/v1/weddings/W1/documents", json={"link": "https://x.com"})
        assert response.status_code == 422


class TestOrganizerBoard:
    def test_board_and_move(self, client, as_user, backend):
        backend.rows("task_groups").append({"id": "G1", "organizer_id": "O1", "name": "Vendors", "order": 0})
        backend.rows("tasks").append(
            {"id": "o1", "organizer_id": "O1", "wedding_id": None, "task_group_id": None, "title": "Call"}
        )
        as_user(ORGANIZER_USER)

        board = client.get("/api/v1/task-groups/board").json()
        assert [c["name"] for c in board] == ["Несортированные задачи", "Vendors"]
        assert [t["id"] for t in board[0]["tasks"]] == ["o1"]
        assert board[0]["tasks"][0]["display_title"] == "Call"

        body = client.post("/api/v1/organizer-tasks/move", json={"task_id": "o1", "target_group_id": "G1"}).json()
        assert body["success"] is True
        assert backend.row("tasks", "o1")["task_group_id"] == "G1"

        board = client.get("/api/v1/task-groups/board").json()
        assert [t["id"] for t in board[1]["tasks"]] == ["o1"]

    def test_logs_have_action_text(self, client, as_user, backend):
        backend.rows("organizer_task_logs").append(
            {"id": "l1", "task_id": "o1", "new_status": "completed", "old_status": "pending", "action": "completed"}
        )
        as_user(ORGANIZER_USER)
        logs = client.get("/api/v1/organizer-tasks/o1/logs").json()
        assert logs[0]["action_text"] == "Выполнил"


class TestPresentation:
    def test_viewer_state(self, client, as_user, backend):
        backend.rows("presentations").append(
            {
                "id": "P1",
                "wedding_id": "W1",
                "title": "Our day",
                "image_urls": ["1.png", "2.png"],
                "presentation_sections": [{"title": "Intro", "page_number": 1, "order_index": 0}],
            }
        )
        as_user(CLIENT_USER)
        body = client.get("/api/v1/weddings/W1/presentation").json()
        assert body["presentation"]["id"] == "P1"
        assert body["navigator"]["slide_count"] == 2
        assert body["active_section"]["title"] == "Intro"

    def test_organizer_uploads_presentation(self, client, as_user, backend):
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/weddings/W1/presentation",
            data={"title": "Our day"},
            files=[
                ("pdf", ("deck.pdf", b"%PDF-1.4", "application/pdf")),
                ("images", ("page_1.jpg", b"one", "image/jpeg")),
                ("images", ("page_2.jpg", b"two", "image/jpeg")),
            ],
        )
        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Our day"
        assert len(body["image_urls"]) == 2

        as_user(CLIENT_USER)
        view = client.get("/api/v1/weddings/W1/presentation").json()
        assert view["presentation"]["id"] == body["id"]
        assert view["navigator"]["slide_count"] == 2

    def test_upload_rejects_non_pdf(self, client, as_user, backend):
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/weddings/W1/presentation",
            data={"title": "Our day"},
            files={"pdf": ("deck.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert backend.uploaded == {}

    def test_upload_failure_cleans_storage(self, client, as_user, backend):
        backend.fail("presentations", "insert")
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/weddings/W1/presentation",
            data={"title": "Our day"},
            files={"pdf": ("deck.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 502
        assert backend.removed_objects == [("presentations", [path for _, path in backend.uploaded])]

    def test_client_cannot_upload(self, client, as_user):
        as_user(CLIENT_USER)
        response = client.post(
            "/api/v1/weddings/W1/presentation",
            data={"title": "Our day"},
            files={"pdf": ("deck.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 403

    def test_sections_validation(self, client, as_user):
        as_user(ORGANIZER_USER)
        response = client.put("/api/v1/presentations/P1/sections", json={"sections": [{"title": "A", "page_number": 0}]})
        assert response.status_code == 422


class TestClientsAndPreferences:
    def test_create_client(self, client, as_user, backend):
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/clients/",
            json={
                "email": "new@example.com",
                "password": "secret1",
                "couple_name_1": "Lena",
                "couple_name_2": "Pavel",
                "wedding_date": "2026-09-12",
                "venue": "Villa",
                "country": "Italy",
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["client"]["name"] == "Lena & Pavel"
        assert body["wedding"]["organizer_id"] == "O1"

    def test_short_password(self, client, as_user):
        as_user(ORGANIZER_USER)
        response = client.post(
            "/api/v1/clients/",
            json={
                "email": "new@example.com",
                "password": "123",
                "couple_name_1": "Lena",
                "couple_name_2": "Pavel",
                "wedding_date": "2026-09-12",
                "venue": "Villa",
                "country": "Italy",
            },
        )
        assert response.status_code == 422

    def test_language_roundtrip(self, client, as_user):
        as_user(CLIENT_USER)
        assert client.get("/api/v1/preferences/language").json() == {"language": "ru"}
        assert client.put("/api/v1/preferences/language", json={"language": "en"}).status_code == 200
        assert client.get("/api/v1/preferences/language").json() == {"language": "en"}
        assert client.put("/api/v1/preferences/language", json={"language": "de"}).status_code == 422
