"""Path parameter constraints.

A constraint is either a regular expression or one of the named
aliases below. Parameters without a constraint match any single
path segment.
"""

import re

DEFAULT_PATTERN = r"[^/]+"

# Named constraint aliases usable in metadata: {"id": "int"}
ALIASES: dict[str, str] = {
    "str": DEFAULT_PATTERN,
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "slug": r"[a-z0-9]+(?:-[a-z0-9]+)*",
    "uuid": r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}",
}


def expand_constraint(constraint: str | re.Pattern[str]) -> str:
    """Return the regex source for *constraint*, expanding aliases.

    Raises ``re.error`` if the result is not a valid regular expression.
    """
    if isinstance(constraint, re.Pattern):
        return constraint.pattern
    pattern = ALIASES.get(constraint, constraint)
    re.compile(pattern)
    return pattern


def compile_constraint(pattern: str) -> re.Pattern[str]:
    """Compile a constraint so it must match a whole path segment."""
    return re.compile(f"(?:{pattern})\\Z")
