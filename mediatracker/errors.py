"""Error taxonomy shared by repositories, policies and routes.

Every error kind is an ``HTTPException`` subclass, so FastAPI renders it
without extra handlers. :class:`GuardedRoute` turns anything else raised
while serving a request into an opaque :class:`InternalError`.
"""

import logging
from typing import Any, Callable, Coroutine

from fastapi import HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class InvalidInput(HTTPException):
    """Malformed or missing required request data."""

    def __init__(self, detail: str = "Invalid input"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthenticationError(HTTPException):
    """The caller's identity could not be resolved from the request."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    """The access policy denied the operation."""

    def __init__(self, detail: str = "You are not authorized to access requested data"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    """The target resource does not exist."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    """A uniqueness constraint would be violated."""

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InternalError(HTTPException):
    """
    Any failure that is not one of the other kinds.

    The underlying exception is kept on ``cause`` for diagnostics and is
    never exposed in the response body.
    """

    def __init__(self, detail: str = "Internal server error", cause: Exception | None = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail
        )
        self.cause = cause


class GuardedRoute(APIRoute):
    """Route class reporting unexpected exceptions as :class:`InternalError`."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def guarded_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except (StarletteHTTPException, RequestValidationError):
                raise
            except Exception as exc:
                logger.exception(
                    "%s %s failed with an unexpected error",
                    request.method,
                    request.url.path,
                )
                raise InternalError(cause=exc) from exc

        return guarded_route_handler
