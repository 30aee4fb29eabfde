"""Built-in argument resolvers.

Every resolver has the shape ``(name, tag, request) -> value | None``;
``None`` means "not mine, keep looking".
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from perch._internal.naming import to_header_name, to_snake_key

if TYPE_CHECKING:
    from perch.http.request import RequestContext
    from perch.resolvers.tags import ParamTag

_DEFAULT_PORTS = {"http": 80, "https": 443}


def build_map_resolver(values: Mapping[str, Any]) -> Callable[..., Any]:
    """Static resolver: parameters named like a key get that exact value."""

    def resolve(name: str, tag: ParamTag | None, request: RequestContext) -> Any:
        return values.get(name)

    return resolve


def build_fn_resolver(functions: Mapping[str, Callable[[RequestContext], Any]]) -> Callable[..., Any]:
    """Dynamic resolver: parameters named like a key get ``fn(request)``."""

    def resolve(name: str, tag: ParamTag | None, request: RequestContext) -> Any:
        fn = functions.get(name)
        if fn is None:
            return None
        return fn(request)

    return resolve


def request_key_resolver(name: str, tag: ParamTag | None, request: RequestContext) -> Any:
    """Resolve a parameter to the same-named attribute of the request context."""
    return getattr(request, name, None)


def params_resolver(name: str, tag: ParamTag | None, request: RequestContext) -> Any:
    return request.params.get(name)


def route_params_resolver(name: str, tag: ParamTag | None, request: RequestContext) -> Any:
    return request.route_params.get(name)


def header_resolver(name: str, tag: ParamTag | None, request: RequestContext) -> Any:
    return request.headers.get(to_header_name(name))


def snake_params_resolver(request: RequestContext) -> dict[str, Any]:
    """The request params with keys normalized to snake_case.

    Lets an endpoint take ``snake_params`` and read ``user_id`` even when
    the client sent ``user-id`` or ``userId``.
    """
    return {to_snake_key(key): value for key, value in request.params.items()}


def server_uri_for(request: RequestContext) -> str:
    """Root URI of the server, without a trailing slash.

    Uses the request's ``server_uri``, then the configured one, then
    scheme plus the Host header (or ASGI server address).
    """
    explicit = request.server_uri or request.config.server_uri
    if explicit:
        return explicit.rstrip("/")

    host = request.headers.get("host")
    if host is None and request.server is not None:
        server_host, port = request.server
        host = server_host if _DEFAULT_PORTS.get(request.scheme) == port else f"{server_host}:{port}"
    return f"{request.scheme}://{host or 'localhost'}"


def resource_uri_resolver(request: RequestContext) -> str:
    """Absolute URI of the matched resource, always ending in ``/``.

    The server URI followed by the mounted context path, with any
    parameters in the context filled from the route parameters.
    """
    context = request.context_path.strip("/")
    if not context:
        return f"{server_uri_for(request)}/"
    return f"{server_uri_for(request)}/{context}/"


reserved_resolver = build_fn_resolver(
    {
        "request": lambda request: request,
        "params": lambda request: request.params,
        "snake_params": snake_params_resolver,
        "resource_uri": resource_uri_resolver,
    }
)
"""Resolves the reserved parameter names ``request``, ``params``,
``snake_params`` and ``resource_uri``."""
