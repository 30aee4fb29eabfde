"""ASGI types and the typed view of an HTTP scope.

Only the server adapter touches raw ASGI; everything past
``HTTPScope.from_scope`` works with decoded values.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from perch.http.headers import Headers
from perch.http.query import QueryParams

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class HTTPScope:
    """Decoded request line and metadata of an ASGI ``http`` scope.

    ``path`` is relative to the scope's ``root_path`` so mounted
    applications route on their own paths.
    """

    method: str
    path: str
    scheme: str
    headers: Headers
    query: QueryParams
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    @classmethod
    def from_scope(cls, scope: Scope) -> "HTTPScope":
        path = scope["path"]
        root_path = scope.get("root_path", "")
        if root_path and path.startswith(root_path):
            path = path[len(root_path) :] or "/"
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=path,
            scheme=scope.get("scheme", "http"),
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            server=(server[0], server[1]) if server else None,
            client=(client[0], client[1]) if client else None,
        )
