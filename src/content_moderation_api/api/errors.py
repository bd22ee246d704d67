"""Translation of service results into HTTP responses."""

from typing import TypeVar

from fastapi import HTTPException
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from content_moderation_api.errors import ErrorKind
from content_moderation_api.errors import ModerationError
from content_moderation_api.errors import Result

T = TypeVar("T")

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.RESOLUTION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CLASSIFIER_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.DUPLICATE_APPEAL: status.HTTP_409_CONFLICT,
}


def error_to_http(error: ModerationError) -> HTTPException:
    return HTTPException(
        status_code=ERROR_STATUS_CODES[error.kind],
        detail={"kind": error.kind.value, "message": error.message},
    )


def unwrap_or_raise(result: Result[T]) -> T:
    """Return the result value or raise the matching HTTPException."""
    if result.error is not None:
        raise error_to_http(result.error)
    return result.value  # type: ignore[return-value]


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures with the structured error body."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "kind": ErrorKind.VALIDATION_ERROR.value,
                "message": f"{location}: {message}" if location else message,
            }
        },
    )
