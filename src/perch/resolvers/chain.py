"""ResolverChain — ordered, immutable argument resolution.

Resolution order for one parameter (first non-``None`` value wins):

1. Function-specific resolvers (``@arg_resolvers``, then the namespace's)
2. For a tagged parameter: the tag's lookup, and nothing else
3. Reserved names: ``request``, ``params``, ``snake_params``, ``resource_uri``
4. Request params (query string and decoded body)
5. Route params captured from the path template
6. Headers, under the parameter name in header form
7. Globally injected resolvers from ``AppConfig.resolvers``

A required parameter that nothing resolves raises ``ResolutionError``;
an optional one receives its declared default.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Protocol

from perch.errors import ResolutionError
from perch.resolvers.builtin import (
    header_resolver,
    params_resolver,
    reserved_resolver,
    route_params_resolver,
)
from perch.resolvers.coercion import coerce

if TYPE_CHECKING:
    from perch.config import AppConfig
    from perch.http.request import RequestContext
    from perch.resolvers.tags import ParamTag
    from perch.routing.scanner import ParameterDescriptor

logger = logging.getLogger("perch.resolvers")

STANDARD_SOURCES: tuple[str, ...] = ("reserved", "params", "route_params", "headers")


class ArgResolver(Protocol):
    """Protocol for argument resolvers.

    Any callable of this shape works::

        def current_user(name, tag, request):
            if name == "user":
                return load_user(request.headers.get("authorization"))
            return None
    """

    def __call__(self, name: str, tag: ParamTag | None, request: RequestContext) -> Any: ...


@dataclass(frozen=True, slots=True)
class ResolverChain:
    """An ordered sequence of resolvers, shared read-only across requests.

    ``local`` holds function-specific resolvers, ``base`` the standard
    lookups followed by injected resolvers.
    """

    local: tuple[Callable[..., Any], ...] = ()
    base: tuple[Callable[..., Any], ...] = (
        reserved_resolver,
        params_resolver,
        route_params_resolver,
        header_resolver,
    )
    injected_count: int = 0

    @classmethod
    def from_config(cls, config: AppConfig) -> ResolverChain:
        """The base chain for an app: standard lookups plus injected resolvers."""
        chain = cls()
        return replace(chain, base=(*chain.base, *config.resolvers), injected_count=len(config.resolvers))

    def prefixed(self, resolvers: tuple[Callable[..., Any], ...]) -> ResolverChain:
        """Return a chain that tries *resolvers* before everything else."""
        if not resolvers:
            return self
        return replace(self, local=(*resolvers, *self.local))

    @property
    def searched(self) -> tuple[str, ...]:
        """Names of the sources an untagged lookup consults, in order."""
        sources: list[str] = []
        if self.local:
            sources.append("arg_resolvers")
        sources.extend(STANDARD_SOURCES)
        if self.injected_count:
            sources.append("resolvers")
        return tuple(sources)

    def resolve(self, param: ParameterDescriptor, request: RequestContext) -> Any:
        """Bind one endpoint parameter.

        Raises:
            ResolutionError: *param* is required and nothing resolved it.
        """
        name, tag = param.name, param.tag

        for resolver in self.local:
            value = resolver(name, tag, request)
            if value is not None:
                return value

        if tag is not None:
            value = tag.lookup(name, request)
            if value is not None:
                return coerce(value, param.annotation)
            if param.has_default:
                return param.default
            key_path = tag.context_key_path(name)
            logger.debug("No value for %r at %s", name, "/".join(key_path))
            raise ResolutionError(name, context_key_path=key_path, searched=self.searched)

        for resolver in self.base:
            value = resolver(name, tag, request)
            if value is not None:
                return coerce(value, param.annotation)

        if param.has_default:
            return param.default
        logger.debug("No value for %r in any of %s", name, ", ".join(self.searched))
        raise ResolutionError(name, searched=self.searched)
