"""Compiled segment trie for dispatch-table matching.

Built once by the compiler and never modified afterwards, so concurrent
matching needs no locks. Literal segments are preferred over parameter
segments; parameters are tried in declaration order, each against its
own constraint.
"""

import re
from dataclasses import dataclass

from perch.routing.params import compile_constraint
from perch.routing.route import RouteEntry, RouteMatch


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("children", "entries_by_verb", "param_children")

    def __init__(self) -> None:
        # Literal segment children: "items" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter edges, in declaration order
        self.param_children: list[_ParamEdge] = []
        # Entries at this node keyed by verb, with their declaration index
        self.entries_by_verb: dict[str, tuple[int, RouteEntry]] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    pattern: str
    regex: re.Pattern[str]
    node: _TrieNode


class Router:
    """Segment trie over compiled RouteEntries.

    Usage::

        router = Router()
        for index, entry in enumerate(entries):
            router.add(index, entry)
        match = router.match("GET", "/items/42")
    """

    __slots__ = ("_root",)

    def __init__(self) -> None:
        self._root = _TrieNode()

    def add(self, index: int, entry: RouteEntry) -> None:
        """Add *entry*; a later index replaces an earlier one for the same verb."""
        spec = entry.path_spec
        node = self._root

        for seg in spec.segments:
            if seg.is_param and seg.param_name:
                pattern = spec.constraints[seg.param_name]
                edge = next(
                    (
                        e
                        for e in node.param_children
                        if e.param_name == seg.param_name and e.pattern == pattern
                    ),
                    None,
                )
                if edge is None:
                    edge = _ParamEdge(seg.param_name, pattern, compile_constraint(pattern), _TrieNode())
                    node.param_children.append(edge)
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        current = node.entries_by_verb.get(spec.verb)
        if current is None or current[0] < index:
            node.entries_by_verb[spec.verb] = (index, entry)

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Match a request method and path; ``None`` when nothing matches."""
        parts = [p for p in path.strip("/").split("/") if p]
        found = self._match_node(self._root, method.upper(), parts, 0, {})
        if found is None:
            return None
        _, entry, params = found
        return RouteMatch(entry=entry, route_params=params)

    def _match_node(
        self,
        node: _TrieNode,
        method: str,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[int, RouteEntry, dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        # All parts consumed — pick the entry for this verb (or ALL)
        if index == len(parts):
            candidates = [
                found
                for found in (node.entries_by_verb.get(method), node.entries_by_verb.get("ALL"))
                if found is not None
            ]
            if not candidates:
                return None
            position, entry = max(candidates, key=lambda found: found[0])
            return position, entry, params

        part = parts[index]

        # 1. Try literal child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], method, parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter children; overlapping templates resolve to the latest declaration
        results = []
        for edge in node.param_children:
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, method, parts, index + 1, new_params)
                if result is not None:
                    results.append(result)
        if not results:
            return None
        return max(results, key=lambda result: result[0])
