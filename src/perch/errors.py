"""Perch exception hierarchy.

Shared across the compiler, resolvers, dispatcher and ASGI adapter so
every module raises and catches the same types.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when namespace metadata or app configuration is invalid.

    Raised while compiling the dispatch table, never at request time.
    Carries the identity of the offending module and function when known.
    """

    def __init__(
        self,
        message: str,
        *,
        module: str | None = None,
        function: str | None = None,
    ) -> None:
        self.module = module
        self.function = function
        if module and function:
            message = f"{module}.{function}: {message}"
        elif module:
            message = f"{module}: {message}"
        super().__init__(message)


class RouteConflictError(ConfigurationError):
    """Two endpoints claim the same verb and path shape."""

    def __init__(self, path: str, verb: str, first: str, second: str) -> None:
        self.path = path
        self.verb = verb
        self.first = first
        self.second = second
        super().__init__(
            f"Route {verb} {path!r} declared by {first} conflicts with {second}. "
            "Rename one endpoint or set AppConfig(allow_overlap=True)."
        )


class ResolutionError(PerchError):
    """A required endpoint argument could not be resolved.

    ``context_key_path`` is the lookup that came back empty (for tagged
    parameters), ``searched`` names every source that was consulted.
    """

    message = "Resolved argument value was absent"

    def __init__(
        self,
        parameter: str,
        *,
        context_key_path: tuple[str, ...] | None = None,
        searched: tuple[str, ...] = (),
    ) -> None:
        self.parameter = parameter
        self.context_key_path = context_key_path
        self.searched = searched
        super().__init__(self.message)

    @property
    def data(self) -> Mapping[str, Any]:
        """Structured error data for logging and error responses."""
        data: dict[str, Any] = {"parameter": self.parameter}
        if self.context_key_path is not None:
            data["context_key_path"] = self.context_key_path
        if self.searched:
            data["searched"] = self.searched
        return data


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by endpoints or middleware. The ASGI adapter catches these
    and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
