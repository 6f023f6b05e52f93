from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base for errors raised by the exam services.

    Carries an ``error_kind`` used by the global handler to build the error
    payload, plus optional structured ``details`` (blocking ids, missing ids).
    """
    error_kind: str = "DomainError"
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message
        self.details = details


class ValidationError(DomainError):
    error_kind = "ValidationError"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ReferentialIntegrityError(DomainError):
    error_kind = "ReferentialIntegrityError"
    status_code = status.HTTP_409_CONFLICT


class IncompleteStationError(DomainError):
    error_kind = "IncompleteStationError"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    error_kind = "NotFoundError"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    error_kind = "ConflictError"
    status_code = status.HTTP_409_CONFLICT
