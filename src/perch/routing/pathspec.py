"""PathSpec resolution — explicit metadata or naming convention.

Templates use ``:name`` for parameters, optionally with an inline
constraint: ``/:id{\\d+}/edit``. A template may also be given as a
sequence of segments: ``("items", ":id")``.
"""

import re
from collections.abc import Mapping, Sequence

from perch.decorators import NamespaceMeta
from perch.errors import ConfigurationError
from perch.routing.conventions import convention_for
from perch.routing.params import DEFAULT_PATTERN, expand_constraint
from perch.routing.route import VERBS, PathSegment, PathSpec
from perch.routing.scanner import FunctionDescriptor

_PARAM = re.compile(r"^:(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:\{(?P<constraint>.+)\})?$")


def parse_template(template: str | Sequence[str]) -> tuple[tuple[PathSegment, ...], dict[str, str]]:
    """Parse a path template into segments plus inline constraints.

    Examples::

        "/"                -> ()
        "/items/:id"       -> (PathSegment("items"), PathSegment(":id", True, "id"))
        "/:id{int}/edit"   -> (..., ...), {"id": "int"}

    Raises:
        ConfigurationError: On brace- or angle-style parameters, empty
            parameter names, or a parameter name used twice.
    """
    if isinstance(template, str):
        parts = template.strip("/").split("/")
    elif isinstance(template, Sequence):
        parts = [str(part).strip("/") for part in template]
    else:
        msg = f"Path template must be a string or a sequence of segments, got {type(template).__name__}"
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    inline: dict[str, str] = {}
    for part in parts:
        if not part:
            continue
        if part.startswith(":"):
            match = _PARAM.match(part)
            if match is None:
                msg = f"Malformed path parameter {part!r} in {template!r}"
                raise ConfigurationError(msg)
            name = match["name"]
            if any(seg.param_name == name for seg in segments):
                msg = f"Path parameter {name!r} appears twice in {template!r}"
                raise ConfigurationError(msg)
            if match["constraint"]:
                inline[name] = match["constraint"]
            segments.append(PathSegment(value=f":{name}", is_param=True, param_name=name))
        elif (part.startswith("{") and part.endswith("}")) or (part.startswith("<") and part.endswith(">")):
            msg = (
                f"Path segment {part!r} in {template!r} looks like a parameter. "
                "Perch path parameters are written ':name'."
            )
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments), inline


def merge_constraints(
    param_names: Sequence[str],
    local: Mapping[str, str],
    shared: Mapping[str, str],
) -> dict[str, str]:
    """Give every parameter a pattern: local beats shared beats the default."""
    merged: dict[str, str] = {}
    for name in param_names:
        constraint = local.get(name, shared.get(name, DEFAULT_PATTERN))
        try:
            merged[name] = expand_constraint(constraint)
        except (re.error, TypeError) as exc:
            msg = f"Invalid constraint {constraint!r} for path parameter {name!r}: {exc}"
            raise ConfigurationError(msg) from exc
    return merged


def resolve_path_spec(function: FunctionDescriptor, namespace: NamespaceMeta) -> PathSpec | None:
    """Resolve the PathSpec for one endpoint candidate.

    Returns ``None`` when the function is neither conventionally named
    nor explicitly declared.

    Raises:
        ConfigurationError: Malformed metadata, a constraint naming an
            unknown parameter, or a template parameter that no function
            parameter binds.
    """
    meta = function.meta
    try:
        if meta.has_path_spec:
            if meta.verb not in VERBS:
                msg = f"Unknown verb {meta.verb!r}; expected one of {', '.join(sorted(VERBS))}"
                raise ConfigurationError(msg)
            if meta.path is None:
                msg = "Explicit endpoint metadata is missing a path"
                raise ConfigurationError(msg)
            verb, template, source = meta.verb, meta.path, "explicit"
        else:
            convention = convention_for(function.name)
            if convention is None:
                return None
            (verb, template), source = convention, "convention"

        segments, inline = parse_template(template)
        param_names = [seg.param_name for seg in segments if seg.param_name]
        local = {**inline, **meta.constraints}

        unknown = sorted(set(local) - set(param_names))
        if unknown:
            msg = f"Constraints given for parameters not in the path template: {', '.join(unknown)}"
            raise ConfigurationError(msg)

        for name in param_names:
            if not _binds(function, name):
                msg = f"Path parameter {name!r} in {template!r} has no matching function parameter"
                raise ConfigurationError(msg)

        constraints = merge_constraints(param_names, local, namespace.constraints)
    except ConfigurationError as exc:
        if exc.function is not None:
            raise
        raise ConfigurationError(str(exc), module=function.module, function=function.name) from exc

    return PathSpec(verb=verb, segments=segments, constraints=constraints, source=source)


def _binds(function: FunctionDescriptor, route_param: str) -> bool:
    """Whether some function parameter receives *route_param*."""
    for param in function.parameters:
        tag = param.tag
        if tag is not None and tag.is_path_param and getattr(tag, "name", None) == route_param:
            return True
        if param.name == route_param and (tag is None or (tag.is_path_param and getattr(tag, "name", None) is None)):
            return True
    return False
