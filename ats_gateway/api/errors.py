"""HTTP error envelope and FastAPI exception handlers."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

_UNSET = object()


class ApiError(Exception):
    """Error answered as ``{"error": message[, "details": ...]}``."""

    def __init__(self, status_code: int, message: str, details: Any = _UNSET):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not _UNSET:
            payload["details"] = self.details
        return payload


def register_error_handlers(app: FastAPI) -> None:
    """Install the handlers that render errors in the gateway envelope."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = [str(err.get("msg", "invalid value")) for err in exc.errors()]
        logger.info("Rejected request to %s: %s", request.url.path, messages)
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": messages},
        )
