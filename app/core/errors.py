from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.core.logging import get_logger

logger = get_logger(module="errors")


class DairyFlowError(Exception):
    """Base class for domain errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "error": self.error,
            "message": self.message,
        }


class NotFoundError(DairyFlowError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"


class InvalidStateError(DairyFlowError):
    """Status guard violated: request not Pending, farmer inactive..."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid State"


class IntegrityViolationError(InvalidStateError):
    """A referenced row vanished under us. Not user-correctable."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Integrity Violation"


class InsufficientStockError(DairyFlowError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Insufficient Stock"

    def __init__(self, available: int, message: Optional[str] = None):
        super().__init__(
            message or f"Insufficient stock. Only {available} bags available"
        )
        self.available = available

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["available"] = self.available
        return data


class DuplicateError(DairyFlowError):
    status_code = status.HTTP_409_CONFLICT
    error = "Duplicate Error"


async def dairyflow_error_handler(request: Request, exc: DairyFlowError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error=exc.error,
            detail=exc.message,
        )
    else:
        logger.warning(
            "Request rejected",
            method=request.method,
            path=request.url.path,
            error=exc.error,
            detail=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DairyFlowError, dairyflow_error_handler)
