"""Argument resolution — binds endpoint parameters to request data.

Resolvers are plain callables ``(name, tag, request) -> value | None``.
They are composed into an immutable ``ResolverChain`` at compile time;
function-specific resolvers are prefixed onto the shared chain.
"""

from perch.resolvers.builtin import (
    build_fn_resolver,
    build_map_resolver,
    request_key_resolver,
    resource_uri_resolver,
    snake_params_resolver,
)
from perch.resolvers.chain import ArgResolver, ResolverChain
from perch.resolvers.tags import FromRequest, Header, Param, ParamTag, PathParam

__all__ = [
    "ArgResolver",
    "FromRequest",
    "Header",
    "Param",
    "ParamTag",
    "PathParam",
    "ResolverChain",
    "build_fn_resolver",
    "build_map_resolver",
    "request_key_resolver",
    "resource_uri_resolver",
    "snake_params_resolver",
]
