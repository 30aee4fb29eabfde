"""Perch — module functions as web resources.

A module's public functions are mapped onto HTTP endpoints by naming
convention (``index``, ``show``, ``create`` ...) or explicit metadata,
and their parameters are bound from the request by an ordered chain of
argument resolvers.

Basic usage::

    # myapp/items.py
    def index(params):
        return list_items(**params)

    def show(id: int):
        return load_item(id)

    # myapp/main.py
    from perch import App, AppConfig

    app = App(AppConfig(context_path="api"), ("items", "myapp.items"))
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "DispatchTable",
    "Dispatcher",
    "FromRequest",
    "HTTPError",
    "Header",
    "Middleware",
    "NamespaceMeta",
    "NamespaceSpec",
    "Next",
    "NotFound",
    "Param",
    "PathParam",
    "PerchError",
    "Redirect",
    "RequestContext",
    "ResolutionError",
    "ResolverChain",
    "Response",
    "RouteConflictError",
    "arg_resolvers",
    "build_fn_resolver",
    "build_map_resolver",
    "compile_dispatch_table",
    "endpoint",
    "use_middleware",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "App": "perch.app",
    "AppConfig": "perch.config",
    "ConfigurationError": "perch.errors",
    "DispatchTable": "perch.routing.table",
    "Dispatcher": "perch.dispatcher",
    "FromRequest": "perch.resolvers.tags",
    "HTTPError": "perch.errors",
    "Header": "perch.resolvers.tags",
    "Middleware": "perch.middleware.protocol",
    "NamespaceMeta": "perch.decorators",
    "NamespaceSpec": "perch.routing.table",
    "Next": "perch.middleware.protocol",
    "NotFound": "perch.errors",
    "Param": "perch.resolvers.tags",
    "PathParam": "perch.resolvers.tags",
    "PerchError": "perch.errors",
    "Redirect": "perch.http.response",
    "RequestContext": "perch.http.request",
    "ResolutionError": "perch.errors",
    "ResolverChain": "perch.resolvers.chain",
    "Response": "perch.http.response",
    "RouteConflictError": "perch.errors",
    "arg_resolvers": "perch.decorators",
    "build_fn_resolver": "perch.resolvers.builtin",
    "build_map_resolver": "perch.resolvers.builtin",
    "compile_dispatch_table": "perch.routing.table",
    "endpoint": "perch.decorators",
    "use_middleware": "perch.decorators",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
