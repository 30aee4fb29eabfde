"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Builds a
RequestContext from the scope and body, runs the synchronous
dispatcher in a worker thread, and sends the negotiated Response back
through ASGI send().
"""

from dataclasses import replace
from typing import Any

from anyio import to_thread

from perch._internal.asgi import HTTPScope, Receive, Scope, Send
from perch.config import AppConfig
from perch.dispatcher import Dispatcher
from perch.errors import HTTPError, ResolutionError
from perch.http.body import parse_body
from perch.http.request import RequestContext
from perch.http.response import Response
from perch.server.errors import (
    ErrorHandlers,
    handle_http_error,
    handle_internal_error,
    handle_resolution_error,
)
from perch.server.negotiation import negotiate
from perch.server.sender import send_response


def context_from_scope(scope: Scope, config: AppConfig) -> RequestContext:
    """Build a body-less RequestContext from an ASGI HTTP scope."""
    http = HTTPScope.from_scope(scope)
    return RequestContext(
        method=http.method,
        path=http.path,
        params=http.query.to_params(),
        headers=http.headers,
        query=http.query,
        scheme=http.scheme,
        server=http.server,
        client=http.client,
        config=config,
    )


async def read_body(receive: Receive, limit: int) -> bytes:
    """Read the full request body, refusing anything over *limit* bytes."""
    chunks: list[bytes] = []
    size = 0
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunk = message.get("body", b"")
        if chunk:
            size += len(chunk)
            if size > limit:
                raise HTTPError(status=413, detail="Request body too large")
            chunks.append(chunk)
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def with_body(request: RequestContext, raw: bytes) -> RequestContext:
    """Decode *raw* and merge mapping bodies into the request params (body wins)."""
    body = parse_body(raw, request.content_type)
    if isinstance(body, dict):
        return replace(request, params={**request.params, **body}, body=body)
    return replace(request, body=body)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
    config: AppConfig,
    error_handlers: ErrorHandlers,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = context_from_scope(scope, config)
    response: Response
    try:
        request = with_body(request, await read_body(receive, config.max_content_length))
        result: Any = await to_thread.run_sync(dispatcher.dispatch, request)
        response = negotiate(result)
    except ResolutionError as exc:
        response = await handle_resolution_error(exc, request, error_handlers, config.debug)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, config.debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, config.debug)

    await send_response(response, send, method=request.method)
