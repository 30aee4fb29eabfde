"""Tests for perch.routing.table — dispatch table compilation."""

import logging
import types

import pytest

from perch.config import AppConfig
from perch.decorators import NamespaceMeta, endpoint
from perch.dispatcher import Dispatcher
from perch.errors import ConfigurationError, RouteConflictError
from perch.http.request import RequestContext
from perch.routing.table import NamespaceSpec, compile_dispatch_table, normalize_middleware
from sample_resources import (
    audited,
    bad_tag,
    bad_verb,
    catchall,
    conflicting,
    guarded,
    items,
    overrides,
    priced,
    simple,
    unbound_param,
    users,
)


def _routes(table) -> list[tuple[str, str]]:
    return [(entry.path_spec.verb, entry.path_spec.path) for entry in table]


class TestCompileBasics:
    def test_single_index(self) -> None:
        table = compile_dispatch_table([simple])
        assert len(table) == 1
        entry = table.entries[0]
        assert (entry.path_spec.verb, entry.path_spec.path) == ("GET", "/")
        assert entry.path_spec.source == "convention"
        assert entry.function.function is simple.index

    def test_empty(self) -> None:
        assert len(compile_dispatch_table([])) == 0

    def test_conventional_crud(self) -> None:
        table = compile_dispatch_table([NamespaceSpec(items, context="items")])
        assert _routes(table) == [
            ("GET", "/items"),
            ("GET", "/items/new"),
            ("POST", "/items"),
            ("GET", "/items/:id"),
            ("GET", "/items/:id/edit"),
            ("PUT", "/items/:id"),
            ("DELETE", "/items/:id"),
            ("GET", "/items/:id/history"),
        ]

    def test_unexposed_functions_skipped(self) -> None:
        names = {entry.function.name for entry in compile_dispatch_table([items])}
        assert "summarize" not in names
        assert "_private_helper" not in names

    def test_module_constraints_applied(self) -> None:
        table = compile_dispatch_table([items])
        show = next(e for e in table if e.function.name == "show")
        assert show.path_spec.constraints == {"id": r"\d+"}

    def test_explicit_overrides_convention(self) -> None:
        table = compile_dispatch_table([overrides])
        assert _routes(table) == [("GET", "/everything"), ("POST", "/:id/publish")]
        assert all(entry.path_spec.source == "explicit" for entry in table)
        assert table.entries[1].path_spec.constraints == {"id": "[a-z]+"}

    def test_import_by_name(self) -> None:
        table = compile_dispatch_table(["sample_resources.simple"])
        assert table.entries[0].function.function is simple.index

    def test_tuple_mount(self) -> None:
        table = compile_dispatch_table([("things", simple)])
        assert _routes(table) == [("GET", "/things")]

    def test_idempotent(self) -> None:
        mounts = [NamespaceSpec(items, context="items"), NamespaceSpec(simple, context="simple")]
        first = compile_dispatch_table(mounts)
        second = compile_dispatch_table(mounts)
        assert _routes(first) == _routes(second)
        assert [e.function.function for e in first] == [e.function.function for e in second]


class TestContexts:
    def test_two_prefixes_same_module(self) -> None:
        table = compile_dispatch_table(
            [NamespaceSpec(simple, context="a"), NamespaceSpec(simple, context="b")]
        )
        assert _routes(table) == [("GET", "/a"), ("GET", "/b")]
        assert table.match("GET", "/a").entry is table.entries[0]
        assert table.match("GET", "/b").entry is table.entries[1]

    def test_global_context_path(self) -> None:
        table = compile_dispatch_table(
            [NamespaceSpec(simple, context="items")], AppConfig(context_path="api/v1")
        )
        assert _routes(table) == [("GET", "/api/v1/items")]

    def test_parameterized_context(self) -> None:
        table = compile_dispatch_table([NamespaceSpec(users, context="users/:user_id")])
        assert _routes(table) == [("GET", "/users/:user_id"), ("GET", "/users/:user_id/:id")]
        index = table.entries[0]
        assert index.path_spec.constraints["user_id"] == r"\d+"
        assert [seg.value for seg in index.context] == ["users", ":user_id"]
        assert table.match("GET", "/users/abc") is None
        assert table.match("GET", "/users/7/3").route_params == {"user_id": "7", "id": "3"}

    def test_context_param_repeated_in_template(self) -> None:
        with pytest.raises(ConfigurationError, match="twice"):
            compile_dispatch_table([NamespaceSpec(items, context="items/:id")])


class TestConflicts:
    def test_conflict_raises(self) -> None:
        with pytest.raises(RouteConflictError) as exc_info:
            compile_dispatch_table([conflicting])
        exc = exc_info.value
        assert exc.verb == "GET"
        assert exc.path == "/"
        assert exc.first == "sample_resources.conflicting.index"
        assert exc.second == "sample_resources.conflicting.listing"

    def test_same_module_twice_conflicts(self) -> None:
        with pytest.raises(RouteConflictError):
            compile_dispatch_table([simple, simple])

    def test_param_names_irrelevant(self) -> None:
        module = types.ModuleType("slugged")

        @endpoint("GET", "/:slug")
        def lookup(slug):
            return slug

        module.lookup = lookup
        module.__all__ = ["lookup"]
        with pytest.raises(RouteConflictError):
            compile_dispatch_table([NamespaceSpec(items, context="x"), NamespaceSpec(module, context="x")])

    def test_different_verbs_do_not_conflict(self) -> None:
        table = compile_dispatch_table([NamespaceSpec(items, context="x"), NamespaceSpec(overrides, context="x")])
        assert ("POST", "/x/:id/publish") in _routes(table)

    def test_all_overlaps_every_verb(self) -> None:
        with pytest.raises(RouteConflictError):
            compile_dispatch_table([catchall])

    def test_allow_overlap_warns_and_last_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="perch.routing"):
            table = compile_dispatch_table([conflicting], AppConfig(allow_overlap=True))
        assert len(table) == 2
        assert table.match("GET", "/").entry.function.name == "listing"
        assert "later declaration wins" in caplog.text


class TestConfigurationErrors:
    def test_bad_verb(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            compile_dispatch_table([bad_verb])
        assert exc_info.value.module == "sample_resources.bad_verb"
        assert exc_info.value.function == "grab"

    def test_unbound_template_param(self) -> None:
        with pytest.raises(ConfigurationError, match="slug"):
            compile_dispatch_table([unbound_param])

    def test_path_param_tag_not_in_path(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            compile_dispatch_table([bad_tag])
        assert exc_info.value.function == "index"
        assert "'id'" in str(exc_info.value)

    def test_unimportable_namespace(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot import"):
            compile_dispatch_table(["sample_resources.does_not_exist"])

    def test_bad_mount(self) -> None:
        with pytest.raises(ConfigurationError, match="namespace mount"):
            compile_dispatch_table([42])


class TestMiddlewarePrecedence:
    def test_namespace_meta_middleware(self) -> None:
        table = compile_dispatch_table([guarded])
        index = next(e for e in table if e.function.name == "index")
        assert index.middleware == (guarded.tag_namespace,)

    def test_function_middleware_wins(self) -> None:
        table = compile_dispatch_table([guarded])
        special = next(e for e in table if e.function.name == "special")
        bare = next(e for e in table if e.function.name == "bare")
        assert special.middleware == (guarded.tag_function,)
        assert bare.middleware == ()

    def test_mount_middleware_beats_module_meta(self) -> None:
        def mount_mw(request, next):
            return next(request)

        table = compile_dispatch_table([NamespaceSpec(guarded, middleware=mount_mw)])
        index = next(e for e in table if e.function.name == "index")
        assert index.middleware == (mount_mw,)

    def test_default_middleware(self) -> None:
        def default_mw(request, next):
            return next(request)

        table = compile_dispatch_table([simple], AppConfig(default_middleware=(default_mw,)))
        assert table.entries[0].middleware == (default_mw,)

    def test_normalize_middleware(self) -> None:
        def mw(request, next):
            return next(request)

        assert normalize_middleware(None) is None
        assert normalize_middleware(mw) == (mw,)
        assert normalize_middleware([mw, mw]) == (mw, mw)
        assert normalize_middleware(()) == ()


class TestNamespaceMetaShapes:
    def test_single_middleware_callable(self) -> None:
        table = compile_dispatch_table([audited])
        assert table.entries[0].middleware == (audited.audit,)
        assert Dispatcher(table).dispatch(RequestContext.create("GET", "/")) == "audited(top)"

    def test_single_resolver_callable(self) -> None:
        entry = compile_dispatch_table([audited]).entries[0]
        assert entry.resolvers.local[0] is audited.shelf_resolver

    def test_single_default_middleware(self) -> None:
        def default_mw(request, next):
            return next(request)

        table = compile_dispatch_table([simple], AppConfig(default_middleware=default_mw))
        assert table.entries[0].middleware == (default_mw,)

    def test_non_callable_default_middleware(self) -> None:
        with pytest.raises(ConfigurationError, match="middleware"):
            compile_dispatch_table([], AppConfig(default_middleware="logging"))

    def test_non_callable_middleware(self) -> None:
        module = types.ModuleType("bad_middleware")
        module.__perch__ = NamespaceMeta(middleware=42)
        module.index = simple.index
        module.__all__ = ["index"]
        with pytest.raises(ConfigurationError) as exc_info:
            compile_dispatch_table([module])
        assert exc_info.value.module == "bad_middleware"
        assert "middleware" in str(exc_info.value)

    def test_non_callable_resolver_entry(self) -> None:
        module = types.ModuleType("bad_resolvers")
        module.__perch__ = NamespaceMeta(arg_resolvers=("store",))
        module.index = simple.index
        module.__all__ = ["index"]
        with pytest.raises(ConfigurationError) as exc_info:
            compile_dispatch_table([module])
        assert exc_info.value.module == "bad_resolvers"
        assert "arg_resolvers" in str(exc_info.value)


class TestHelperFunctions:
    def test_unevaluable_helper_annotation_ignored(self) -> None:
        table = compile_dispatch_table([priced])
        assert [entry.function.name for entry in table] == ["index"]
