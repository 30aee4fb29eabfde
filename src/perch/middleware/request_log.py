"""Request logging middleware.

Logs one line per dispatched request at INFO: method, path, the
endpoint that served it and the elapsed time. Failures are logged
with the exception type and re-raised untouched.
"""

import logging
import time
from typing import Any

from perch.http.request import RequestContext
from perch.middleware.protocol import Next


class RequestLogging:
    """Middleware that logs each endpoint invocation.

    Usage::

        config = AppConfig(default_middleware=(RequestLogging(),))
    """

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("perch.requests")

    def __call__(self, request: RequestContext, next: Next) -> Any:
        endpoint = request.entry.name if request.entry is not None else "-"
        start = time.perf_counter()
        try:
            result = next(request)
        except Exception as exc:
            elapsed = (time.perf_counter() - start) * 1000
            self._logger.info(
                "%s %s -> %s failed with %s (%.1fms)",
                request.method,
                request.path,
                endpoint,
                type(exc).__name__,
                elapsed,
            )
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self._logger.info("%s %s -> %s (%.1fms)", request.method, request.path, endpoint, elapsed)
        return result
