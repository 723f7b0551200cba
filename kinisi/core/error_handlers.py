from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.responses import JSONResponse

from kinisi.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    DomainError,
    InvalidPreferencesError,
    MalformedProgramError,
    NotFoundError,
    ValidationError,
)
from kinisi.core.logging import get_logger

logger = get_logger(__name__)


ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidPreferencesError: status.HTTP_400_BAD_REQUEST,
    BusinessRuleError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    MalformedProgramError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
}


def error_envelope(request: Request, code: str, message: str, details: dict | None) -> dict:
    return {
        "data": None,
        "meta": {
            "request_id": getattr(request.state, "request_id", None),
            "timestamp": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
        },
        "errors": [
            {
                "code": code,
                "message": message,
                "details": details,
            }
        ],
    }


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = ERROR_STATUS_MAP.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.info("domain_error", code=exc.code, status_code=status_code)

    return JSONResponse(
        status_code=status_code,
        content=error_envelope(request, exc.code, exc.message, exc.details),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error", error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(request, "INTERNAL_001", "Internal server error", {}),
    )
