"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    def my_mw(request: RequestContext, next: Next) -> Any: ...

No base class required. Middleware runs outer to inner around the
endpoint invocation; it may return early, replace the context passed
to ``next``, or transform the endpoint's result.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias

from perch.http.request import RequestContext

# The next handler in the middleware chain
Next: TypeAlias = Callable[[RequestContext], Any]


class Middleware(Protocol):
    """Protocol for perch endpoint middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def require_json(request: RequestContext, next: Next) -> Any:
            if request.content_type != "application/json":
                raise HTTPError(status=415)
            return next(request)

        # Class middleware
        class Audit:
            def __call__(self, request: RequestContext, next: Next) -> Any:
                ...
    """

    def __call__(self, request: RequestContext, next: Next) -> Any: ...
