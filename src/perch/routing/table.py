"""Dispatch table compiler.

Turns a sequence of namespace mounts into one immutable, ordered table
of RouteEntries::

    table = compile_dispatch_table(
        [
            NamespaceSpec("myapp.items", context="items"),
            NamespaceSpec("myapp.users", context="users/:user_id", middleware=audit),
        ],
        AppConfig(context_path="api"),
    )

Order is namespace declaration order, then function declaration order.
All configuration errors surface here, before the first request.
"""

import importlib
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, TypeAlias

from perch.config import AppConfig
from perch.errors import ConfigurationError, RouteConflictError
from perch.resolvers.chain import ResolverChain
from perch.routing.pathspec import merge_constraints, parse_template, resolve_path_spec
from perch.routing.route import PathSegment, PathSpec, RouteEntry, RouteMatch
from perch.routing.router import Router
from perch.routing.scanner import FunctionDescriptor, namespace_meta, scan_namespace

logger = logging.getLogger("perch.routing")

MiddlewareSpec: TypeAlias = Callable[..., Any] | Sequence[Callable[..., Any]] | None


def normalize_middleware(middleware: MiddlewareSpec) -> tuple[Callable[..., Any], ...] | None:
    """``None`` stays ``None``; a single callable becomes a 1-tuple."""
    if middleware is None:
        return None
    return _callables(middleware, "middleware")


def normalize_resolvers(resolvers: MiddlewareSpec) -> tuple[Callable[..., Any], ...]:
    """Like ``normalize_middleware``, but ``None`` means no resolvers."""
    if resolvers is None:
        return ()
    return _callables(resolvers, "arg_resolvers")


def _callables(value: Any, what: str) -> tuple[Callable[..., Any], ...]:
    if callable(value):
        return (value,)
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        msg = f"{what} must be a callable or a sequence of callables, got {type(value).__name__}"
        raise ConfigurationError(msg)
    items = tuple(value)
    for item in items:
        if not callable(item):
            msg = f"{what} entries must be callable, got {item!r}"
            raise ConfigurationError(msg)
    return items


@dataclass(frozen=True, slots=True)
class NamespaceSpec:
    """One module mount: context prefix, module and optional middleware.

    *module* may be a module object or its dotted import name.
    """

    module: ModuleType | str
    context: str | tuple[str, ...] = ()
    middleware: MiddlewareSpec = None

    @classmethod
    def coerce(cls, spec: "NamespaceSpec | ModuleType | str | Sequence[Any]") -> "NamespaceSpec":
        """Accept a NamespaceSpec, a bare module, or a ``(context, module[, middleware])`` tuple."""
        if isinstance(spec, NamespaceSpec):
            return spec
        if isinstance(spec, (ModuleType, str)):
            return cls(spec)
        if isinstance(spec, Sequence) and 2 <= len(spec) <= 3:
            return cls(spec[1], context=spec[0], middleware=spec[2] if len(spec) == 3 else None)
        msg = f"Cannot interpret {spec!r} as a namespace mount; expected (context, module[, middleware])"
        raise ConfigurationError(msg)

    def load(self) -> ModuleType:
        """Return the module, importing it by name if needed."""
        if isinstance(self.module, ModuleType):
            return self.module
        try:
            return importlib.import_module(self.module)
        except ImportError as exc:
            msg = f"Cannot import namespace: {exc}"
            raise ConfigurationError(msg, module=self.module) from exc


@dataclass(frozen=True, slots=True)
class DispatchTable:
    """Ordered, read-only sequence of RouteEntries with a compiled matcher.

    Safe for concurrent reads; nothing mutates it after compilation.
    """

    entries: tuple[RouteEntry, ...]
    _router: Router = field(repr=False, compare=False, default_factory=Router)

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Match a request; ``None`` means pass through."""
        return self._router.match(method, path)


def compile_dispatch_table(
    namespaces: Iterable["NamespaceSpec | ModuleType | str | Sequence[Any]"],
    config: AppConfig | None = None,
) -> DispatchTable:
    """Compile namespace mounts into a DispatchTable.

    Raises:
        ConfigurationError: Malformed metadata, unbindable path
            parameters, or unimportable namespaces.
        RouteConflictError: Two endpoints overlap and
            ``config.allow_overlap`` is false.
    """
    config = config or AppConfig()
    global_context, global_inline = parse_template(config.context_path)
    base_chain = ResolverChain.from_config(config)
    default_middleware = normalize_middleware(config.default_middleware) or ()

    entries: list[RouteEntry] = []
    for raw_spec in namespaces:
        spec = NamespaceSpec.coerce(raw_spec)
        module = spec.load()
        compiled = _compile_namespace(spec, module, default_middleware, global_context, global_inline, base_chain)
        for entry in compiled:
            _check_conflicts(entry, entries, config)
            entries.append(entry)

    router = Router()
    for index, entry in enumerate(entries):
        router.add(index, entry)

    logger.debug("Compiled dispatch table with %d route(s)", len(entries))
    return DispatchTable(entries=tuple(entries), _router=router)


def _compile_namespace(
    spec: NamespaceSpec,
    module: ModuleType,
    default_middleware: tuple[Callable[..., Any], ...],
    global_context: tuple[PathSegment, ...],
    global_inline: dict[str, str],
    base_chain: ResolverChain,
) -> Iterator[RouteEntry]:
    ns_name = module.__name__
    ns_meta = namespace_meta(module)

    try:
        local_context, local_inline = parse_template(spec.context)
        context = (*global_context, *local_context)
        _check_unique_params(context, spec.context)
        context_names = [seg.param_name for seg in context if seg.param_name]
        context_constraints = merge_constraints(
            context_names, {**global_inline, **local_inline}, ns_meta.constraints
        )
        ns_middleware = normalize_middleware(spec.middleware)
        if ns_middleware is None:
            ns_middleware = normalize_middleware(ns_meta.middleware)
        ns_resolvers = normalize_resolvers(ns_meta.arg_resolvers)
    except ConfigurationError as exc:
        raise ConfigurationError(str(exc), module=ns_name) from exc

    for function in scan_namespace(module):
        path_spec = resolve_path_spec(function, ns_meta)
        if path_spec is None:
            continue

        segments = (*context, *path_spec.segments)
        try:
            _check_unique_params(segments, path_spec.path)
            _check_path_param_tags(function, segments)
        except ConfigurationError as exc:
            raise ConfigurationError(str(exc), module=ns_name, function=function.name) from exc

        if function.meta.middleware is not None:
            middleware = function.meta.middleware
        elif ns_middleware is not None:
            middleware = ns_middleware
        else:
            middleware = default_middleware

        yield RouteEntry(
            path_spec=PathSpec(
                verb=path_spec.verb,
                segments=segments,
                constraints={**context_constraints, **path_spec.constraints},
                source=path_spec.source,
            ),
            function=function,
            middleware=middleware,
            resolvers=base_chain.prefixed((*function.meta.arg_resolvers, *ns_resolvers)),
            context=context,
        )


def _check_unique_params(segments: Sequence[PathSegment], where: Any) -> None:
    seen: set[str] = set()
    for seg in segments:
        if seg.param_name is None:
            continue
        if seg.param_name in seen:
            msg = f"Path parameter {seg.param_name!r} appears twice once mounted ({where!r})"
            raise ConfigurationError(msg)
        seen.add(seg.param_name)


def _check_path_param_tags(function: FunctionDescriptor, segments: Sequence[PathSegment]) -> None:
    """Every ``PathParam``-tagged parameter must name a template parameter."""
    names = {seg.param_name for seg in segments if seg.param_name}
    for param in function.parameters:
        if param.tag is None or not param.tag.is_path_param:
            continue
        wanted = param.tag.context_key_path(param.name)[-1]
        if wanted not in names:
            msg = f"Parameter {param.name!r} is tagged as path parameter {wanted!r}, which is not in the path"
            raise ConfigurationError(msg)


def _check_conflicts(entry: RouteEntry, existing: Sequence[RouteEntry], config: AppConfig) -> None:
    for prior in existing:
        if not prior.path_spec.overlaps(entry.path_spec):
            continue
        if not config.allow_overlap:
            raise RouteConflictError(entry.path_spec.path, entry.path_spec.verb, prior.name, entry.name)
        logger.warning(
            "Route %s from %s overlaps %s from %s; the later declaration wins",
            entry.path_spec,
            entry.name,
            prior.path_spec,
            prior.name,
        )
