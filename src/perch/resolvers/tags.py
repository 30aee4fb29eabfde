"""Parameter tags — per-parameter resolution instructions.

Attach a tag with ``typing.Annotated``::

    def show(id: Annotated[int, PathParam()],
             agent: Annotated[str, Header("User-Agent")],
             method: Annotated[str, FromRequest("method")]): ...

A tagged parameter is looked up at exactly one place in the request
context. When nothing is there, resolution fails with that place as the
error's ``context_key_path``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from perch._internal.naming import to_header_name

if TYPE_CHECKING:
    from perch.http.request import RequestContext


class ParamTag:
    """Base class for parameter tags."""

    __slots__ = ()

    is_path_param: bool = False

    def context_key_path(self, name: str) -> tuple[str, ...]:
        """Key path, rooted at ``request``, that this tag reads."""
        raise NotImplementedError

    def lookup(self, name: str, request: RequestContext) -> Any:
        """Walk the key path through *request*; ``None`` when absent."""
        value: Any = request
        for key in self.context_key_path(name)[1:]:
            if value is None:
                return None
            if isinstance(value, Mapping):
                value = value.get(key)
            else:
                value = getattr(value, key, None)
        return value


@dataclass(frozen=True, slots=True, init=False)
class FromRequest(ParamTag):
    """Read a key path from the request context.

    ``FromRequest()`` reads the attribute named like the parameter,
    ``FromRequest("params", "user-id")`` walks nested keys.
    """

    keys: tuple[str, ...]

    def __init__(self, *keys: str) -> None:
        object.__setattr__(self, "keys", keys)

    def context_key_path(self, name: str) -> tuple[str, ...]:
        return ("request", *(self.keys or (name,)))


@dataclass(frozen=True, slots=True)
class PathParam(ParamTag):
    """Bind to a route parameter captured from the path template."""

    name: str | None = None

    is_path_param = True

    def context_key_path(self, name: str) -> tuple[str, ...]:
        return ("request", "route_params", self.name or name)


@dataclass(frozen=True, slots=True)
class Param(ParamTag):
    """Bind to a query/body parameter, optionally under another key."""

    name: str | None = None

    def context_key_path(self, name: str) -> tuple[str, ...]:
        return ("request", "params", self.name or name)


@dataclass(frozen=True, slots=True)
class Header(ParamTag):
    """Bind to a request header; defaults to the parameter name in header form."""

    name: str | None = None

    def context_key_path(self, name: str) -> tuple[str, ...]:
        return ("request", "headers", self.name or to_header_name(name))
