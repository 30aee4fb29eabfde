"""PathSpec, RouteEntry and RouteMatch frozen dataclasses."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from perch.resolvers.chain import ResolverChain
    from perch.routing.scanner import FunctionDescriptor

VERBS: frozenset[str] = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "ALL"})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a path template.

    Literal: ``items``  (is_param=False)
    Param:   ``:id``    (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class PathSpec:
    """Verb, path template and parameter constraints for one endpoint.

    ``constraints`` holds a regex for every named parameter in
    ``segments`` once the spec is resolved. ``source`` records whether
    the spec came from the naming convention table or from explicit
    metadata.
    """

    verb: str
    segments: tuple[PathSegment, ...]
    constraints: Mapping[str, str] = field(default_factory=dict)
    source: Literal["convention", "explicit"] = "explicit"

    @property
    def path(self) -> str:
        """The template rendered as a string, e.g. ``/items/:id``."""
        return "/" + "/".join(seg.value for seg in self.segments)

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.is_param and seg.param_name)

    @property
    def shape(self) -> tuple[str | None, ...]:
        """Literal/parameter shape; parameter names are irrelevant to collisions."""
        return tuple(None if seg.is_param else seg.value for seg in self.segments)

    def overlaps(self, other: PathSpec) -> bool:
        """True when both specs would answer the same requests."""
        verbs_overlap = self.verb == other.verb or "ALL" in (self.verb, other.verb)
        return verbs_overlap and self.shape == other.shape

    def __str__(self) -> str:
        return f"{self.verb} {self.path}"


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One exposed endpoint in the dispatch table.

    Built by the compiler, never mutated. ``context`` is the mounted
    prefix (global plus namespace context) the path template starts with.
    """

    path_spec: PathSpec
    function: FunctionDescriptor
    middleware: tuple[Callable[..., Any], ...]
    resolvers: ResolverChain
    context: tuple[PathSegment, ...] = ()

    @property
    def name(self) -> str:
        return f"{self.function.module}.{self.function.name}"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    entry: RouteEntry
    route_params: dict[str, str]
