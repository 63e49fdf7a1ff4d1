"""
API error types and their HTTP rendering.

Every failure a handler can produce is a GlobalStylesError carrying a stable
machine-readable code, an HTTP status and a human-readable message. Errors
are rendered as {"code", "message", "data": {"status"}}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class GlobalStylesError(Exception):
    """Base class for errors returned to API callers."""

    code: str = "rest_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "An error occurred."

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.code}({self.status_code}): {self.message}"

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status_code, **self.details},
        }


class CannotView(GlobalStylesError):
    code = "rest_cannot_view"
    message = "Sorry, you are not allowed to view this global style."


class ForbiddenContext(GlobalStylesError):
    code = "rest_forbidden_context"
    message = "Sorry, you are not allowed to edit this global style."


class CannotEdit(GlobalStylesError):
    code = "rest_cannot_edit"
    message = "Sorry, you are not allowed to edit this global style."


class CannotManageGlobalStyles(GlobalStylesError):
    code = "rest_cannot_manage_global_styles"
    message = "Sorry, you are not allowed to access the global styles on this site."


class GlobalStylesNotFound(GlobalStylesError):
    code = "rest_global_styles_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "No global styles config exist with that id."


class ThemeNotFound(GlobalStylesError):
    code = "rest_theme_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Theme not found."


class CustomCssIllegalMarkup(GlobalStylesError):
    code = "rest_custom_css_illegal_markup"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Markup is not allowed in CSS."


class InvalidParam(GlobalStylesError):
    code = "rest_invalid_param"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid parameter(s)."


class NoRoute(GlobalStylesError):
    code = "rest_no_route"
    status_code = status.HTTP_404_NOT_FOUND
    message = "No route was found matching the URL and request method."


# =============================================================================
# Exception handlers
# =============================================================================


async def global_styles_error_handler(request: Request, exc: GlobalStylesError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing failures (unknown path or method) as rest_no_route."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        error = NoRoute(details={"method": request.method})
        return await global_styles_error_handler(request, error)

    error = GlobalStylesError(message=str(exc.detail), status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=error.to_dict(), headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as rest_invalid_param."""
    params = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        params[".".join(loc) or "body"] = err.get("msg", "Invalid value")

    error = InvalidParam(
        message=f"Invalid parameter(s): {', '.join(params)}",
        details={"params": params},
    )
    return await global_styles_error_handler(request, error)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the API's error rendering on an application."""
    app.add_exception_handler(GlobalStylesError, global_styles_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
