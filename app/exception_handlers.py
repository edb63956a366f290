from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, List

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from querygate.errors import GatewayError, map_error


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers for the FastAPI application."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(
        request: Request, exc: GatewayError
    ) -> JSONResponse:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        status, retryable = map_error(getattr(exc, "code", None))
        code = exc.code.value if exc.code is not None else "gateway_error"
        message = getattr(exc, "message", str(exc))
        extra: Dict[str, Any] = getattr(exc, "extra", {}) or {}
        details: Optional[List[str]] = getattr(exc, "details", None)

        payload = {
            "error": {
                "code": code,
                "message": message,
                "details": details,
                "retryable": retryable,
                "request_id": request_id,
                "extra": extra,
            }
        }

        headers = {"X-Request-ID": request_id}
        if retryable:
            headers["Retry-After"] = "2"

        return JSONResponse(status_code=status, content=payload, headers=headers)

    @app.exception_handler(HTTPException)
    async def http_exception_to_error_contract(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            return JSONResponse(status_code=exc.status_code, content=exc.detail)

        return JSONResponse(
            status_code=exc.status_code, content={"detail": exc.detail}
        )
