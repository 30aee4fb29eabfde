"""Error handling pipeline for perch requests.

Maps HTTPError, ResolutionError and unexpected failures to Response
objects, using registered error handlers or sensible defaults.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any, TypeAlias

from perch.errors import HTTPError, ResolutionError
from perch.http.request import RequestContext
from perch.http.response import Response
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.server")

ErrorHandlers: TypeAlias = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: RequestContext,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: RequestContext,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Preserve the HTTP status from the exception unless the handler
        # explicitly returned a Response with its own status
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail).with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_resolution_error(
    exc: ResolutionError,
    request: RequestContext,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """A required argument was missing from the request: 400 Bad Request."""
    logger.info("400 %s %s — %s %s", request.method, request.path, exc, dict(exc.data))

    handler = error_handlers.get(ResolutionError) or error_handlers.get(400)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(400)
        return response

    body: dict[str, Any] = {"error": exc.message, "parameter": exc.parameter}
    if debug:
        body.update({key: list(value) for key, value in exc.data.items() if key != "parameter"})
    return negotiate((body, 400))


async def handle_internal_error(
    exc: Exception,
    request: RequestContext,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        return await call_error_handler(handler, request, exc)

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500)

    return Response(body="Internal Server Error", status=500)
