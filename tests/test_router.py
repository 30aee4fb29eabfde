"""Tests for perch.routing.router — the compiled segment trie."""

from perch.resolvers.chain import ResolverChain
from perch.routing.params import DEFAULT_PATTERN
from perch.routing.pathspec import parse_template
from perch.routing.route import PathSpec, RouteEntry
from perch.routing.router import Router
from perch.routing.scanner import describe_function


def _handler() -> str:
    return "ok"


def _entry(verb: str, template: str, **constraints: str) -> RouteEntry:
    segments, _ = parse_template(template)
    names = [seg.param_name for seg in segments if seg.param_name]
    spec = PathSpec(
        verb=verb,
        segments=segments,
        constraints={name: constraints.get(name, DEFAULT_PATTERN) for name in names},
    )
    return RouteEntry(
        path_spec=spec,
        function=describe_function("tests.router", "_handler", _handler),
        middleware=(),
        resolvers=ResolverChain(),
    )


def _router(*entries: RouteEntry) -> Router:
    router = Router()
    for index, entry in enumerate(entries):
        router.add(index, entry)
    return router


class TestStaticRoutes:
    def test_root(self) -> None:
        entry = _entry("GET", "/")
        match = _router(entry).match("GET", "/")
        assert match is not None
        assert match.entry is entry
        assert match.route_params == {}

    def test_nested_path(self) -> None:
        entry = _entry("GET", "/api/v2/items")
        assert _router(entry).match("GET", "/api/v2/items").entry is entry

    def test_trailing_slash_ignored(self) -> None:
        entry = _entry("GET", "/items")
        assert _router(entry).match("GET", "/items/") is not None

    def test_unknown_path(self) -> None:
        assert _router(_entry("GET", "/items")).match("GET", "/users") is None

    def test_partial_path(self) -> None:
        assert _router(_entry("GET", "/items/all")).match("GET", "/items") is None

    def test_wrong_verb(self) -> None:
        assert _router(_entry("GET", "/items")).match("POST", "/items") is None

    def test_method_is_case_insensitive(self) -> None:
        assert _router(_entry("GET", "/items")).match("get", "/items") is not None


class TestParameterRoutes:
    def test_captures_value(self) -> None:
        match = _router(_entry("GET", "/items/:id")).match("GET", "/items/42")
        assert match is not None
        assert match.route_params == {"id": "42"}

    def test_multiple_params(self) -> None:
        router = _router(_entry("GET", "/users/:user_id/items/:id"))
        match = router.match("GET", "/users/7/items/3")
        assert match.route_params == {"user_id": "7", "id": "3"}

    def test_constraint_rejects(self) -> None:
        router = _router(_entry("GET", "/items/:id", id=r"\d+"))
        assert router.match("GET", "/items/abc") is None
        assert router.match("GET", "/items/12").route_params == {"id": "12"}

    def test_constraint_must_match_whole_segment(self) -> None:
        router = _router(_entry("GET", "/items/:id", id=r"\d+"))
        assert router.match("GET", "/items/12abc") is None

    def test_literal_preferred_over_param(self) -> None:
        show = _entry("GET", "/items/:id")
        new = _entry("GET", "/items/new")
        router = _router(show, new)
        assert router.match("GET", "/items/new").entry is new
        assert router.match("GET", "/items/5").entry is show

    def test_falls_back_to_param_when_literal_branch_fails(self) -> None:
        edit = _entry("GET", "/items/:id/edit")
        new = _entry("GET", "/items/new")
        match = _router(new, edit).match("GET", "/items/new/edit")
        assert match is not None
        assert match.entry is edit
        assert match.route_params == {"id": "new"}

    def test_different_constraints_coexist(self) -> None:
        numeric = _entry("GET", "/items/:id", id=r"\d+")
        slugged = _entry("GET", "/items/:slug", slug=r"[a-z]+")
        router = _router(numeric, slugged)
        assert router.match("GET", "/items/5").entry is numeric
        assert router.match("GET", "/items/abc").entry is slugged


class TestLastDeclarationWins:
    def test_same_verb_same_path(self) -> None:
        first = _entry("GET", "/")
        second = _entry("GET", "/")
        assert _router(first, second).match("GET", "/").entry is second

    def test_overlapping_param_names(self) -> None:
        first = _entry("GET", "/:id")
        second = _entry("GET", "/:slug")
        match = _router(first, second).match("GET", "/x")
        assert match.entry is second
        assert match.route_params == {"slug": "x"}

    def test_all_declared_after_verb(self) -> None:
        get = _entry("GET", "/")
        anything = _entry("ALL", "/")
        router = _router(get, anything)
        assert router.match("GET", "/").entry is anything
        assert router.match("DELETE", "/").entry is anything

    def test_verb_declared_after_all(self) -> None:
        anything = _entry("ALL", "/")
        get = _entry("GET", "/")
        router = _router(anything, get)
        assert router.match("GET", "/").entry is get
        assert router.match("POST", "/").entry is anything
