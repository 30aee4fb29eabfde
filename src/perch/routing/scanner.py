"""Namespace scanner — enumerates a module's endpoint candidates.

Public functions *defined* in the module (not imported into it) that
are endpoint candidates become ``FunctionDescriptor``s, in declaration
order. When the module defines ``__all__``, that list and its order are
used instead.
"""

import inspect
import logging
import typing
from collections.abc import Callable
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from perch._internal.types import Endpoint
from perch.decorators import META_ATTR, FunctionMeta, NamespaceMeta, get_meta
from perch.errors import ConfigurationError
from perch.resolvers.tags import ParamTag
from perch.routing.conventions import convention_for

logger = logging.getLogger("perch.routing")

_EMPTY = inspect.Parameter.empty


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """One endpoint parameter: name, optional tag, default and annotation."""

    name: str
    tag: ParamTag | None = None
    default: Any = _EMPTY
    annotation: Any = _EMPTY
    keyword_only: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not _EMPTY


@dataclass(frozen=True, slots=True)
class FunctionDescriptor:
    """An endpoint candidate found by scanning a namespace.

    Created once at scan time; immutable thereafter.
    """

    module: str
    name: str
    function: Endpoint
    parameters: tuple[ParameterDescriptor, ...]
    meta: FunctionMeta

    def parameter(self, name: str) -> ParameterDescriptor | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


def namespace_meta(module: ModuleType) -> NamespaceMeta:
    """Return the module's shared metadata (empty if none)."""
    meta = getattr(module, META_ATTR, None)
    if meta is None:
        return NamespaceMeta()
    if not isinstance(meta, NamespaceMeta):
        msg = f"{META_ATTR} must be a NamespaceMeta, got {type(meta).__name__}"
        raise ConfigurationError(msg, module=module.__name__)
    return meta


def scan_namespace(module: ModuleType) -> list[FunctionDescriptor]:
    """Describe the endpoint candidates of *module*, in declaration order.

    A candidate carries explicit ``@endpoint`` metadata or a conventional
    name. Other public functions are helpers; their signatures are never
    inspected.
    """
    descriptors: list[FunctionDescriptor] = []
    for name, func in _public_functions(module):
        if not get_meta(func).has_path_spec and convention_for(name) is None:
            logger.debug("Skipping %s.%s: no convention or explicit path", module.__name__, name)
            continue
        descriptors.append(describe_function(module.__name__, name, func))
    return descriptors


def describe_function(module: str, name: str, func: Endpoint) -> FunctionDescriptor:
    """Build a FunctionDescriptor from a function's signature and metadata."""
    return FunctionDescriptor(
        module=module,
        name=name,
        function=func,
        parameters=_describe_parameters(module, name, func),
        meta=get_meta(func),
    )


def _public_functions(module: ModuleType) -> list[tuple[str, Callable[..., Any]]]:
    exported = getattr(module, "__all__", None)
    if exported is not None:
        names = list(exported)
    else:
        names = [name for name in vars(module) if not name.startswith("_")]

    functions: list[tuple[str, Callable[..., Any]]] = []
    for name in names:
        obj = getattr(module, name, None)
        if not inspect.isfunction(obj):
            continue
        if exported is None and obj.__module__ != module.__name__:
            continue
        functions.append((name, obj))
    return functions


def _describe_parameters(module: str, name: str, func: Callable[..., Any]) -> tuple[ParameterDescriptor, ...]:
    try:
        hints = typing.get_type_hints(func, include_extras=True)
    except (NameError, TypeError) as exc:
        msg = f"cannot evaluate parameter annotations: {exc}"
        raise ConfigurationError(msg, module=module, function=name) from exc

    params: list[ParameterDescriptor] = []
    for param in inspect.signature(func).parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, _EMPTY)
        params.append(
            ParameterDescriptor(
                name=param.name,
                tag=_find_tag(annotation),
                default=param.default,
                annotation=annotation,
                keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
            )
        )
    return tuple(params)


def _find_tag(annotation: Any) -> ParamTag | None:
    """First ``ParamTag`` in an ``Annotated[...]`` annotation."""
    if typing.get_origin(annotation) is not typing.Annotated:
        return None
    for extra in annotation.__metadata__:
        if isinstance(extra, ParamTag):
            return extra
        if isinstance(extra, type) and issubclass(extra, ParamTag):
            return extra()
    return None
