"""Endpoint metadata — decorators for functions, NamespaceMeta for modules.

Metadata is only *recorded* here. It is read once by the namespace
scanner when the dispatch table is compiled::

    __perch__ = NamespaceMeta(constraints={"id": "int"})

    def index():                         # GET /   (by convention)
        ...

    @endpoint("POST", "/:id/archive")    # explicit path-spec
    @arg_resolvers(build_map_resolver({"store": STORE}))
    def archive(id: int, store):
        ...
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any, TypeVar

META_ATTR = "__perch__"

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True)
class FunctionMeta:
    """Metadata attached to one endpoint function."""

    verb: str | None = None
    path: str | tuple[str, ...] | None = None
    constraints: Mapping[str, str] = field(default_factory=dict)
    arg_resolvers: tuple[Callable[..., Any], ...] = ()
    middleware: tuple[Callable[..., Any], ...] | None = None

    @property
    def has_path_spec(self) -> bool:
        return self.verb is not None or self.path is not None


@dataclass(frozen=True, slots=True)
class NamespaceMeta:
    """Metadata shared by every endpoint of a module.

    Assign it to the module attribute ``__perch__``. *arg_resolvers* and
    *middleware* take a single callable or a sequence of them; other
    shapes are rejected when the dispatch table is compiled.
    """

    constraints: Mapping[str, str] = field(default_factory=dict)
    arg_resolvers: Callable[..., Any] | Sequence[Callable[..., Any]] = ()
    middleware: Callable[..., Any] | Sequence[Callable[..., Any]] | None = None


def get_meta(func: Callable[..., Any]) -> FunctionMeta:
    """Return the metadata recorded on *func* (empty if none)."""
    meta = getattr(func, META_ATTR, None)
    return meta if isinstance(meta, FunctionMeta) else FunctionMeta()


def _update(func: F, **changes: Any) -> F:
    setattr(func, META_ATTR, replace(get_meta(func), **changes))
    return func


def endpoint(
    verb: str,
    path: str | Sequence[str],
    *,
    constraints: Mapping[str, str] | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Declare an explicit path-spec, overriding any naming convention.

    Usage::

        @endpoint("GET", "/:id/history", constraints={"id": r"\\d+"})
        def history(id: int): ...

    *verb* is validated when the dispatch table is compiled, so a
    malformed declaration fails at startup.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        return _update(
            func,
            verb=verb.upper() if isinstance(verb, str) else verb,
            path=path if isinstance(path, str) else tuple(path),
            constraints=dict(constraints or {}),
        )

    return decorator


def arg_resolvers(*resolvers: Callable[..., Any]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Attach resolvers tried before any other source for this function."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        return _update(func, arg_resolvers=(*resolvers, *get_meta(func).arg_resolvers))

    return decorator


def use_middleware(*middleware: Callable[..., Any]) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Override namespace and default middleware for this function.

    ``@use_middleware()`` with no arguments runs the function bare.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        return _update(func, middleware=tuple(middleware))

    return decorator
