from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response


def _success_message(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Success"


def _build_success_envelope(payload: Any, status_code: int) -> dict[str, Any]:
    if isinstance(payload, dict):
        body = dict(payload)
        message = body.pop("message", None) or _success_message(status_code)
        return {"status": True, "message": message, **body}
    return {"status": True, "message": _success_message(status_code), "data": payload}


def _is_enveloped(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    return isinstance(payload.get("status"), bool) and "message" in payload


def _copy_headers(source: Response, target: Response) -> Response:
    for key, value in source.headers.items():
        if key.lower() in {"content-length", "content-type"}:
            continue
        target.headers[key] = value
    return target


class ResponseEnvelopeMiddleware(BaseHTTPMiddleware):
    """Wrap successful JSON bodies as ``{"status": true, "message": ..., **payload}``."""

    async def dispatch(self, request, call_next) -> Response:
        response = await call_next(request)

        if response.status_code < 200 or response.status_code >= 300:
            return response

        # Convert 204 to a 200 success envelope for frontend consistency
        if response.status_code == 204:
            new_response = JSONResponse(status_code=200, content=_build_success_envelope(None, 200))
            return _copy_headers(response, new_response)

        if response.headers.get("content-type", "").split(";")[0].strip() != "application/json":
            return response

        body = b""
        async for chunk in response.body_iterator:
            body += chunk

        try:
            raw_body = body.decode("utf-8")
            payload = json.loads(raw_body) if raw_body else None
        except (UnicodeDecodeError, json.JSONDecodeError):
            return _copy_headers(
                response,
                Response(content=body, status_code=response.status_code, media_type=response.media_type),
            )

        if _is_enveloped(payload):
            content = payload
        else:
            content = _build_success_envelope(payload, response.status_code)
        new_response = JSONResponse(status_code=response.status_code, content=content)
        return _copy_headers(response, new_response)


def register_response_envelope(app) -> None:
    app.add_middleware(ResponseEnvelopeMiddleware)
