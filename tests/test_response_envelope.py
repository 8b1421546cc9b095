from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from app.core.errors import register_exception_handlers, status_for_service_error
from app.core.response_envelope import register_response_envelope
from app.services.exceptions import (
    Conflict,
    IdentityServiceError,
    NotFound,
    PaymentGatewayError,
    PermissionDenied,
    ValidationFailed,
)

ALREADY_DONE = Conflict("Already done", code="already_done", details={"id": "x"})
FORBIDDEN_DETAIL = {"message": "Nope", "role": "borrower"}


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    register_response_envelope(app)

    @app.get("/dict")
    async def plain_dict():
        return {"message": "Fetched", "data": [1, 2]}

    @app.get("/list")
    async def plain_list():
        return [1, 2, 3]

    @app.delete("/empty", status_code=204)
    async def empty():
        return None

    @app.get("/conflict")
    async def conflict():
        raise ALREADY_DONE

    @app.get("/http")
    async def http_error():
        raise HTTPException(status_code=403, detail=FORBIDDEN_DETAIL)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database exploded")

    return app


client = TestClient(_build_app(), raise_server_exceptions=False)


def test_dict_payload_is_spread_into_envelope() -> None:
    response = client.get("/dict")
    assert response.json() == {"status": True, "message": "Fetched", "data": [1, 2]}


def test_non_dict_payload_is_wrapped_under_data() -> None:
    response = client.get("/list")
    assert response.json() == {"status": True, "message": "OK", "data": [1, 2, 3]}


def test_no_content_becomes_success_envelope() -> None:
    response = client.delete("/empty")
    assert response.status_code == 200
    assert response.json() == {"status": True, "message": "OK", "data": None}


def test_service_error_envelope() -> None:
    response = client.get("/conflict")
    assert response.status_code == 409
    assert response.json() == {"status": False, "code": "already_done", "message": "Already done", "id": "x"}


def test_http_exception_detail_is_spread() -> None:
    response = client.get("/http")
    assert response.status_code == 403
    assert response.json() == {"status": False, "code": "forbidden", "message": "Nope", "role": "borrower"}


def test_unknown_route_uses_error_envelope() -> None:
    response = client.get("/missing")
    assert response.status_code == 404
    assert response.json()["status"] is False
    assert response.json()["code"] == "not_found"


def test_unhandled_exception_reports_error_text() -> None:
    response = client.get("/boom")
    assert response.status_code == 500
    body = response.json()
    assert body["status"] is False
    assert body["code"] == "internal_server_error"
    assert body["error"] == "database exploded"


def test_service_error_status_mapping() -> None:
    assert status_for_service_error(ValidationFailed("x")) == 400
    assert status_for_service_error(PermissionDenied("x")) == 403
    assert status_for_service_error(NotFound("x")) == 404
    assert status_for_service_error(Conflict("x")) == 409
    assert status_for_service_error(PaymentGatewayError("x")) == 500
    assert status_for_service_error(IdentityServiceError("x")) == 500


def test_error_envelope_leaves_exception_details_untouched() -> None:
    client.get("/conflict")
    client.get("/http")

    assert ALREADY_DONE.details == {"id": "x"}
    assert FORBIDDEN_DETAIL == {"message": "Nope", "role": "borrower"}
