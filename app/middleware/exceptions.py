from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.core.exceptions import DomainError
from app.schemas.response import ErrorResponse, ErrorDetail
from datetime import datetime, timezone
import logging
import uuid

logger = logging.getLogger(__name__)

def _get_error_kind(status_code: int) -> str:
    kind_map = {
        400: "BadRequest",
        404: "NotFoundError",
        405: "MethodNotAllowed",
        409: "ConflictError",
        422: "ValidationError",
        500: "InternalServerError",
    }
    return kind_map.get(status_code, f"HTTP_{status_code}")

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())

def _error_response(request: Request, request_id: str, status_code: int, kind: str,
                    message: str, details=None) -> JSONResponse:
    error_response = ErrorResponse(
        error=ErrorDetail(error_kind=kind, message=message, details=details),
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=request.url.path,
        request_id=request_id
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_response.model_dump(by_alias=True))
    )

async def domain_exception_handler(request: Request, exc: DomainError):
    request_id = _request_id(request)
    logger.warning(
        f"[{request_id}] {exc.error_kind}: {exc.message}",
        extra={"request_id": request_id, "details": exc.details}
    )
    return _error_response(request, request_id, exc.status_code, exc.error_kind, exc.message, exc.details)

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = _request_id(request)
    logger.warning(f"[{request_id}] Validation error: {exc.errors()}", extra={"request_id": request_id})
    return _error_response(
        request, request_id, 422, "ValidationError",
        "Request validation failed",
        {"validation_errors": exc.errors()}
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    request_id = _request_id(request)
    logger.warning(f"[{request_id}] HTTP {exc.status_code}: {exc.detail}", extra={"request_id": request_id})
    return _error_response(
        request, request_id, exc.status_code, _get_error_kind(exc.status_code),
        exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    )

async def global_exception_handler(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.error(f"[{request_id}] Unhandled exception: {exc}", exc_info=True, extra={"request_id": request_id})
    return _error_response(
        request, request_id, 500, "InternalServerError",
        "An unexpected error occurred",
        {"error_type": type(exc).__name__}
    )
