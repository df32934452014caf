"""
Tests for the error taxonomy and response envelopes.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel


class TestStoreStatusMapping:
    """Store error codes map to fixed HTTP statuses."""

    @pytest.mark.parametrize("code,status", [
        ("PGRST116", 404),
        ("PGRST204", 204),
        ("23505", 400),
        ("23503", 400),
        ("23514", 400),
        ("42501", 403),
        ("PGRST301", 400),
        ("PGRST304", 400),
        ("Duplicate", 409),
        ("409", 409),
        ("XX000", 500),
        (None, 500),
    ])
    def test_map_store_status(self, code, status):
        from core.errors import map_store_status

        assert map_store_status(code) == status

    def test_store_error_carries_mapped_status(self):
        from core.errors import StoreError

        error = StoreError("duplicate key", store_code="23505", hint="use another id")

        assert error.status_code == 400
        assert error.code == "23505"
        assert error.store_code == "23505"
        assert error.hint == "use another id"

    def test_taxonomy_statuses(self):
        from core.errors import AppError, NotFoundError, RateOrQuotaError, ValidationError

        assert ValidationError("bad").status_code == 400
        assert ValidationError("bad").code == "VALIDATION_ERROR"
        assert NotFoundError("gone").status_code == 404
        assert NotFoundError("gone").code == "NOT_FOUND"
        assert RateOrQuotaError("slow down").status_code == 429
        assert issubclass(ValidationError, AppError)


class TestPagination:

    def test_has_next_and_prev(self):
        from core.responses import Pagination

        p = Pagination.build(page=2, limit=10, total=25)

        assert p.pages == 3
        assert p.has_next is True
        assert p.has_prev is True

    def test_last_page(self):
        from core.responses import Pagination

        dumped = Pagination.build(page=3, limit=10, total=25).model_dump(by_alias=True)

        assert dumped == {
            "page": 3, "limit": 10, "total": 25, "pages": 3,
            "hasNext": False, "hasPrev": True,
        }

    def test_empty_result(self):
        from core.responses import Pagination

        p = Pagination.build(page=1, limit=20, total=0)

        assert p.pages == 0
        assert p.has_next is False
        assert p.has_prev is False


class TestFormatResponse:

    def test_success_envelope(self):
        from core.responses import format_response

        body = format_response({"id": "1"}, message="ok", stats={"total": 1})

        assert body["success"] is True
        assert body["data"] == {"id": "1"}
        assert body["message"] == "ok"
        assert body["stats"] == {"total": 1}
        assert "timestamp" in body
        assert "pagination" not in body


def _app_raising(exc: Exception, include_details: bool) -> FastAPI:
    from core.responses import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app, include_details=include_details)

    class Body(BaseModel):
        name: str

    @app.get("/boom")
    def boom():
        raise exc

    @app.post("/echo")
    def echo(body: Body):
        return {"name": body.name}

    return app


class TestExceptionHandlers:

    def test_app_error_envelope(self):
        from core.errors import NotFoundError

        app = _app_raising(NotFoundError("Outfit not found", details={"id": "x"}), include_details=True)
        response = TestClient(app).get("/boom")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Outfit not found"
        assert body["code"] == "NOT_FOUND"
        assert body["path"] == "/boom"
        assert body["method"] == "GET"
        assert body["details"] == {"id": "x"}

    def test_details_hidden_in_production(self):
        from core.errors import ValidationError

        app = _app_raising(ValidationError("bad", details={"field": "name"}), include_details=False)
        body = TestClient(app).get("/boom").json()

        assert "details" not in body

    def test_store_error_uses_mapped_status(self):
        from core.errors import StoreError

        app = _app_raising(StoreError("permission denied", store_code="42501"), include_details=False)

        assert TestClient(app).get("/boom").status_code == 403

    def test_no_content_store_error_has_empty_body(self):
        from core.errors import StoreError

        app = _app_raising(StoreError("no content", store_code="PGRST204"), include_details=False)
        response = TestClient(app).get("/boom")

        assert response.status_code == 204
        assert response.content == b""

    def test_request_validation_is_400(self):
        app = _app_raising(RuntimeError("unused"), include_details=False)
        response = TestClient(app).post("/echo", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "name" in body["error"]

    def test_unknown_route_is_404_envelope(self):
        app = _app_raising(RuntimeError("unused"), include_details=False)
        body = TestClient(app).get("/nope").json()

        assert body["success"] is False
        assert body["error"] == "Endpoint not found"

    def test_unexpected_error_is_generic_in_production(self):
        app = _app_raising(RuntimeError("secret internals"), include_details=False)
        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
