"""RequestContext — per-request state seen by resolvers and middleware.

Frozen: a context is created for each incoming request and discarded
after the response. Dispatch derives a new context (with route params
and the matched entry) instead of mutating the incoming one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from perch.config import AppConfig
from perch.http.headers import Headers
from perch.http.query import QueryParams

if TYPE_CHECKING:
    from perch.resolvers.chain import ResolverChain
    from perch.routing.route import RouteEntry, RouteMatch


@dataclass(frozen=True, slots=True)
class RequestContext:
    """An immutable view of one request.

    ``params`` merges query string and decoded body parameters.
    ``route_params`` are filled in by the dispatcher from the matched
    path template. ``resolvers`` is the chain in effect for the matched
    endpoint.
    """

    method: str
    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    route_params: Mapping[str, str] = field(default_factory=dict)
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    body: Any = None
    scheme: str = "http"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None
    server_uri: str | None = None
    config: AppConfig = field(default_factory=AppConfig)
    resolvers: ResolverChain | None = None
    entry: RouteEntry | None = None

    @classmethod
    def create(
        cls,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> RequestContext:
        """Build a context from plain mappings (tests, non-ASGI callers)::

            RequestContext.create("GET", "/items/1", headers={"Accept": "application/json"})
        """
        return cls(
            method=method.upper(),
            path=path,
            params=dict(params or {}),
            headers=Headers.from_mapping(headers or {}),
            **kwargs,
        )

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def context_path(self) -> str:
        """The matched entry's mount prefix with route params filled in.

        Empty when no entry has been matched or it was mounted at the root.
        """
        if self.entry is None:
            return ""
        parts = [
            str(self.route_params.get(seg.param_name, seg.value)) if seg.param_name else seg.value
            for seg in self.entry.context
        ]
        return "/" + "/".join(parts) if parts else ""

    def with_match(self, match: RouteMatch) -> RequestContext:
        """Return a context bound to a matched route."""
        return replace(
            self,
            route_params=match.route_params,
            resolvers=match.entry.resolvers,
            entry=match.entry,
        )
