from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.responses import JSONResponse
from fastapi import Request
from shared.core.schemas import JsonOutResult
from typing import Callable
import json
import logging

logger = logging.getLogger(__name__)

ENVELOPE_KEYS = {"status", "status_code", "message"}


def _passthrough_headers(response) -> dict:
    return {k: v for k, v in response.headers.items() if k.lower() != "content-length"}


class JsonResponseMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        # Skip docs/openapi endpoints
        if request.url.path.startswith(("/openapi", "/docs", "/redoc")):
            return await call_next(request)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

            wrapped_error = JsonOutResult(
                data=None,
                status="Failed",
                status_code="500",
                message=f"Internal Server Error: {e}",
            ).model_dump(mode="json")

            return JSONResponse(content=wrapped_error, status_code=500)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        # Read the full body
        body_bytes = b""
        async for chunk in response.body_iterator:
            body_bytes += chunk

        try:
            data = json.loads(body_bytes.decode("utf-8")) if body_bytes else None
        except ValueError:
            data = None

        # Already an envelope (error_response / exception handlers)
        if isinstance(data, dict) and ENVELOPE_KEYS.issubset(data.keys()):
            if not (200 <= response.status_code < 400):
                data["status"] = "Failed"
            return JSONResponse(
                content=data,
                status_code=response.status_code,
                headers=_passthrough_headers(response),
            )

        # Error responses (4xx/5xx)
        if not (200 <= response.status_code < 400):
            message = ""
            if isinstance(data, dict):
                message = str(data.get("detail") or data.get("message") or "")
            elif isinstance(data, str):
                message = data
            else:
                message = "An unexpected error occurred"

            wrapped_error = JsonOutResult(
                data=None,
                status="Failed",
                status_code=str(response.status_code),
                message=message,
            ).model_dump(mode="json")

            return JSONResponse(
                content=wrapped_error,
                status_code=response.status_code,
                headers=_passthrough_headers(response),
            )

        wrapped = JsonOutResult(
            data=data,
            status="Success",
            status_code=str(response.status_code),
            message="Data retrieved successfully"
        ).model_dump(mode="json")

        return JSONResponse(
            content=wrapped,
            status_code=response.status_code,
            headers=_passthrough_headers(response),
        )
