"""Request dispatcher — match, resolve arguments, invoke.

The dispatcher is synchronous and holds no per-request state: the
table and resolver chains it reads are immutable, so one dispatcher
serves any number of concurrent requests.

Errors:
    - ``ResolutionError`` when a required argument cannot be bound
    - anything the endpoint or middleware raises, propagated unchanged
"""

import logging
from collections.abc import Callable
from typing import Any, Final

from perch.http.request import RequestContext
from perch.resolvers.chain import ResolverChain
from perch.routing.route import RouteEntry
from perch.routing.table import DispatchTable

logger = logging.getLogger("perch.dispatch")


class _Unmatched:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNMATCHED"

    def __bool__(self) -> bool:
        return False


UNMATCHED: Final = _Unmatched()
"""Returned by ``Dispatcher.dispatch`` when no entry matches and no fallback is set."""


class Dispatcher:
    """Dispatches RequestContexts against a compiled DispatchTable.

    Usage::

        dispatcher = Dispatcher(table, fallback=not_found)
        result = dispatcher.dispatch(RequestContext.create("GET", "/items/42"))
    """

    __slots__ = ("_fallback", "table")

    def __init__(
        self,
        table: DispatchTable,
        *,
        fallback: Callable[[RequestContext], Any] | None = None,
    ) -> None:
        self.table = table
        self._fallback = fallback

    def dispatch(self, request: RequestContext) -> Any:
        """Serve *request*; returns whatever the endpoint returns.

        An unmatched request is passed to the fallback handler, or
        answered with ``UNMATCHED`` when there is none.
        """
        match = self.table.match(request.method, request.path)
        if match is None:
            logger.debug("No route for %s %s", request.method, request.path)
            if self._fallback is not None:
                return self._fallback(request)
            return UNMATCHED

        request = request.with_match(match)
        entry = match.entry

        def endpoint(req: RequestContext) -> Any:
            return invoke_entry(entry, req)

        # Wrap middleware around the invocation, outermost first
        handler: Callable[[RequestContext], Any] = endpoint
        for mw in reversed(entry.middleware):
            handler = _wrap(mw, handler)

        return handler(request)


def _wrap(mw: Callable[..., Any], next_handler: Callable[[RequestContext], Any]) -> Callable[[RequestContext], Any]:
    def call(req: RequestContext) -> Any:
        return mw(req, next_handler)

    return call


def resolve_arguments(entry: RouteEntry, request: RequestContext) -> tuple[list[Any], dict[str, Any]]:
    """Resolve every parameter of *entry*'s function against *request*.

    Keyword-only parameters are passed by name; everything else
    positionally, in declaration order.

    Raises:
        ResolutionError: A required parameter resolved to nothing.
    """
    chain = request.resolvers or entry.resolvers or ResolverChain()
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for param in entry.function.parameters:
        value = chain.resolve(param, request)
        if param.keyword_only:
            kwargs[param.name] = value
        else:
            args.append(value)
    return args, kwargs


def invoke_entry(entry: RouteEntry, request: RequestContext) -> Any:
    """Resolve arguments and call the endpoint function."""
    args, kwargs = resolve_arguments(entry, request)
    return entry.function.function(*args, **kwargs)
