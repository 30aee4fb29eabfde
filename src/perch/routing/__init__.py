"""Routing — namespace scanning and dispatch table compilation.

Endpoints are discovered and compiled into an immutable, ordered
dispatch table once, at startup. Nothing here runs per request except
``DispatchTable.match``.
"""

from perch.routing.route import PathSegment, PathSpec, RouteEntry, RouteMatch
from perch.routing.table import DispatchTable, NamespaceSpec, compile_dispatch_table

__all__ = [
    "DispatchTable",
    "NamespaceSpec",
    "PathSegment",
    "PathSpec",
    "RouteEntry",
    "RouteMatch",
    "compile_dispatch_table",
]
