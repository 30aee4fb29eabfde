"""Middleware — Protocol-based, no inheritance required.

An endpoint middleware is any callable matching::

    def mw(request: RequestContext, next: Next) -> Any

Built-in middleware:
    RequestLogging -- Log method, path, endpoint and elapsed time
"""

from perch.middleware.request_log import RequestLogging
from perch.middleware.protocol import Middleware, Next

__all__ = [
    "Middleware",
    "Next",
    "RequestLogging",
]
