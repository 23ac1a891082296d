"""Tests for the httpx backend client against a mock transport."""

import asyncio
import json

import httpx

from wedding_planner_api.app.core.backend import BackendClient, is_undefined_column, unwrap_single


def _client(handler, token=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BackendClient(base_url="https://backend.test/", api_key="anon", access_token=token, http=http)


class TestRequests:
    def test_select_builds_filters_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["headers"] = request.headers
            return httpx.Response(200, json=[{"id": "t1"}])

        client = _client(handler, token="user-token")
        rows, error = asyncio.run(
            client.select("tasks", filters={"wedding_id": "W1", "task_group_id": None}, order="order")
        )
        assert error is None
        assert rows == [{"id": "t1"}]
        assert seen["url"].path == "/rest/v1/tasks"
        params = seen["url"].params
        assert params["wedding_id"] == "eq.W1"
        assert params["task_group_id"] == "is.null"
        assert params["order"] == "order.asc"
        assert seen["headers"]["apikey"] == "anon"
        assert seen["headers"]["authorization"] == "Bearer user-token"

    def test_single_select_returns_first_row_or_none(self):
        client = _client(lambda request: httpx.Response(200, json=[]))
        assert asyncio.run(client.select("weddings", filters={"client_id": "C1"}, single=True)) == (None, None)

    def test_update_sends_patch_with_representation(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["prefer"] = request.headers.get("prefer")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"id": "t1", "order": 2}])

        row, error = asyncio.run(_client(handler).update("tasks", {"id": "t1"}, {"order": 2}))
        assert row == {"id": "t1", "order": 2}
        assert seen == {"method": "PATCH", "prefer": "return=representation", "body": {"order": 2}}

    def test_update_matching_nothing(self):
        row, error = asyncio.run(_client(lambda r: httpx.Response(200, json=[])).update("tasks", {"id": "x"}, {}))
        assert row is None and error is None

    def test_bulk_insert_returns_list(self):
        def handler(request):
            return httpx.Response(201, json=json.loads(request.content))

        rows, error = asyncio.run(_client(handler).insert("presentation_sections", [{"title": "A"}, {"title": "B"}]))
        assert rows == [{"title": "A"}, {"title": "B"}]

    def test_rpc_posts_named_parameters(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "W1"})

        data, _ = asyncio.run(_client(handler).rpc("get_wedding_by_id", {"p_wedding_id": "W1"}))
        assert data == {"id": "W1"}
        assert seen == {"path": "/rest/v1/rpc/get_wedding_by_id", "body": {"p_wedding_id": "W1"}}

    def test_signed_url_is_absolute(self):
        def handler(request):
            return httpx.Response(200, json={"signedURL": "/object/sign/docs/a.pdf?token=t"})

        url, error = asyncio.run(_client(handler).create_signed_url("docs", "a.pdf", 60))
        assert url == "https://backend.test/storage/v1/object/sign/docs/a.pdf?token=t"


    def test_upload_sends_raw_bytes(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"Key": "presentations/W1/a.pdf"})

        client = _client(handler)
        path, error = asyncio.run(client.upload_object("presentations", "W1/a.pdf", b"%PDF", "application/pdf"))
        assert path == "W1/a.pdf" and error is None
        assert seen == {"path": "/storage/v1/object/presentations/W1/a.pdf", "type": "application/pdf", "body": b"%PDF"}
        assert client.public_url("presentations", "W1/p.jpg") == "https://backend.test/storage/v1/object/public/presentations/W1/p.jpg"


class TestErrors:
    def test_http_error_becomes_tuple(self, caplog):
        def handler(request):
            return httpx.Response(400, json={"code": "42703", "message": 'column "order" does not exist'})

        data, error = asyncio.run(_client(handler).update("tasks", {"id": "t1"}, {"order": 0}))
        assert data is None
        assert error == {"status_code": 400, "code": "42703", "message": 'column "order" does not exist'}
        assert is_undefined_column(error)
        assert "failed (400)" in caplog.text

    def test_non_json_error_body(self):
        data, error = asyncio.run(_client(lambda r: httpx.Response(500, text="Bad gateway")).rpc("x"))
        assert error["status_code"] == 500
        assert error["message"] == "Bad gateway"

    def test_success_with_non_json_body(self, caplog):
        data, error = asyncio.run(_client(lambda r: httpx.Response(200, text="<html>ok</html>")).select("tasks"))
        assert data is None
        assert error["status_code"] == 200
        assert "non-JSON body" in caplog.text

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        data, error = asyncio.run(_client(handler).select("tasks"))
        assert data is None
        assert error["status_code"] is None
        assert "connection refused" in error["message"]

    def test_auth_user_uses_given_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            return httpx.Response(200, json={"id": "U1"})

        user, _ = asyncio.run(_client(handler).get_user("abc"))
        assert user == {"id": "U1"}
        assert seen["auth"] == "Bearer abc"


class TestHelpers:
    def test_unwrap_single(self):
        assert unwrap_single([{"id": 1}, {"id": 2}]) == {"id": 1}
        assert unwrap_single([]) is None
        assert unwrap_single({"id": 3}) == {"id": 3}

    def test_is_undefined_column(self):
        assert is_undefined_column({"code": "PGRST204"})
        assert not is_undefined_column({"code": "23505"})
        assert not is_undefined_column(None)
