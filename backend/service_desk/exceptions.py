from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    detail: str | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    default_status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status_code
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input. Never retried."""

    default_status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    """Missing, invalid or expired credential, or an inactive employee."""

    default_status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(AppError):
    """Access policy denial."""

    default_status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """Unknown request or vehicle."""

    default_status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Business-rule conflict, e.g. no vehicle available for an interval."""

    default_status_code = status.HTTP_409_CONFLICT


class TransientStoreError(AppError):
    """The store stayed busy after all retry attempts."""

    default_status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class IntegrityError(AppError):
    """A persisted invariant is violated. The operation is rolled back."""

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def format_validation_errors(errors: list[dict]) -> str:
    """Render pydantic errors, naming missing or blank fields first."""
    missing: list[str] = []
    invalid: list[str] = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        if err.get("type") in ("missing", "string_too_short"):
            missing.append(field)
        else:
            invalid.append(f"{field}: {err.get('msg')}")
    parts = []
    if missing:
        parts.append(f"Missing required fields: {', '.join(missing)}")
    parts.extend(invalid)
    return "; ".join(parts)


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=exc.message,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            detail=format_validation_errors(list(exc.errors())),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
