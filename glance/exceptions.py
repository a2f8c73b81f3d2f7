from __future__ import annotations

import json
from enum import Enum
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from kubernetes.client.rest import ApiException
from starlette.exceptions import HTTPException as StarletteHTTPException


logger = structlog.get_logger(__name__)


class AppException(Exception):
    """Base application error carrying the HTTP status it should be answered with."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 400,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details or {}


class ClusterErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"
    FORBIDDEN = "Forbidden"
    OTHER = "Other"

    @classmethod
    def from_status(cls, status: int | None) -> "ClusterErrorKind":
        return _KIND_BY_STATUS.get(status or 0, cls.OTHER)


_KIND_BY_STATUS = {
    404: ClusterErrorKind.NOT_FOUND,
    409: ClusterErrorKind.CONFLICT,
    403: ClusterErrorKind.FORBIDDEN,
}

_HTTP_STATUS_BY_KIND = {
    ClusterErrorKind.NOT_FOUND: 404,
    ClusterErrorKind.CONFLICT: 409,
    ClusterErrorKind.FORBIDDEN: 403,
}


class ClusterAPIError(AppException):
    """A failed call against the Kubernetes API, tagged by kind.

    ``code``/``reason``/``remote_message`` come from the API's ``Status``
    body when there is one. Transport failures have kind OTHER and no code.
    """

    def __init__(
        self,
        operation: str,
        kind: ClusterErrorKind,
        *,
        code: int | None = None,
        reason: str = "",
        remote_message: str = "",
    ) -> None:
        message = f"{operation} failed: {remote_message}"
        if code is not None:
            message += f" (Code: {code}, Reason: {reason})"
        super().__init__(
            message,
            status_code=500,
            code="CLUSTER_API_ERROR",
            details={"operation": operation, "kind": kind.value, "code": code, "reason": reason},
        )
        self.operation = operation
        self.kind = kind
        self.remote_code = code
        self.reason = reason
        self.remote_message = remote_message

    @property
    def is_not_found(self) -> bool:
        return self.kind is ClusterErrorKind.NOT_FOUND

    @classmethod
    def from_api_exception(cls, operation: str, exc: ApiException) -> "ClusterAPIError":
        status: dict[str, Any] = {}
        if exc.body:
            try:
                parsed = json.loads(exc.body)
            except (TypeError, ValueError):
                parsed = None
            if isinstance(parsed, dict):
                status = parsed
        code = status.get("code") or exc.status
        reason = status.get("reason") or exc.reason or ""
        remote_message = status.get("message") or exc.reason or str(exc)
        return cls(
            operation,
            ClusterErrorKind.from_status(code),
            code=code,
            reason=str(reason),
            remote_message=str(remote_message),
        )

    @classmethod
    def from_transport_error(cls, operation: str, exc: Exception) -> "ClusterAPIError":
        return cls(operation, ClusterErrorKind.OTHER, remote_message=str(exc))


class ClusterConnectionError(Exception):
    """Startup could not obtain a live, probed handle to the cluster."""


def error_payload(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _json_error(request: Request, status_code: int, message: str) -> JSONResponse:
    headers = {}
    rid = _request_id(request)
    if rid:
        headers["X-Request-ID"] = rid
    return JSONResponse(status_code=status_code, content=error_payload(message), headers=headers)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers so every error leaves as ``{"success": false, "error": ...}``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        logger.warning("http.error", status=exc.status_code, path=request.url.path, error=message)
        return _json_error(request, exc.status_code, message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        message = f"Invalid request format: {_format_validation_errors(exc)}"
        logger.info("http.invalid_request", path=request.url.path, errors=len(exc.errors()))
        return _json_error(request, 400, message)

    @app.exception_handler(ClusterAPIError)
    async def cluster_error_handler(request: Request, exc: ClusterAPIError):  # type: ignore[override]
        status_code = exc.status_code
        if request.app.state.settings.remote_error_status_mapping:
            status_code = _HTTP_STATUS_BY_KIND.get(exc.kind, status_code)
        return _json_error(request, status_code, exc.message)

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):  # type: ignore[override]
        logger.warning("http.app_error", status=exc.status_code, code=exc.code, path=request.url.path)
        return _json_error(request, exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):  # type: ignore[override]
        logger.exception("http.unhandled_exception", path=request.url.path)
        return _json_error(request, 500, "Internal server error")
