"""Naming-convention table.

Maps conventional endpoint function names to their default verb and
path template. A function absent from this table is only exposed when
it carries explicit ``@endpoint`` metadata.
"""

from types import MappingProxyType

CONVENTIONS: MappingProxyType[str, tuple[str, str]] = MappingProxyType(
    {
        "index": ("GET", "/"),
        "new": ("GET", "/new"),
        "create": ("POST", "/"),
        "show": ("GET", "/:id"),
        "edit": ("GET", "/:id/edit"),
        "update": ("PUT", "/:id"),
        "patch": ("PATCH", "/:id"),
        "destroy": ("DELETE", "/:id"),
    }
)


def convention_for(name: str) -> tuple[str, str] | None:
    """Return the ``(verb, path)`` default for *name*, or ``None``."""
    return CONVENTIONS.get(name)
