"""
Exception handlers.

Map the application error taxonomy onto HTTP responses.

Sandi Metz Principles:
- Single Responsibility: Error -> HTTP translation
- Consistent error handling: One body shape for every failure
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from jarvis.exceptions import AppError
from jarvis.models.error import ErrorCode, ErrorResponse
from jarvis.utils.logger import log_error


def _debug_enabled(request: Request) -> bool:
    state = getattr(request.app.state, "app_state", None)
    return bool(state and state.settings.debug)


async def app_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Render an application error.

    Args:
        request: FastAPI request
        exc: Raised exception

    Returns:
        JSON error response with the mapped status code
    """
    body, status = ErrorResponse.from_exception(exc, debug=_debug_enabled(request))
    log_error(
        exc,
        context=request.url.path,
        category=body.category,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status,
        content=body.model_dump(mode="json", exclude_none=True),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render a request body validation failure."""
    body = ErrorResponse(
        detail="; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ),
        error_code=ErrorCode.VALIDATION_ERROR,
        category="validation",
    )
    return JSONResponse(status_code=422, content=body.model_dump(mode="json", exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    """
    Install the handlers on an application.

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, app_error_handler)
