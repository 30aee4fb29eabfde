"""Tests for perch.routing.scanner — namespace enumeration and parameter tags."""

import types
from typing import Annotated

import pytest

from perch.decorators import NamespaceMeta
from perch.errors import ConfigurationError
from perch.resolvers.tags import FromRequest, Header, PathParam
from perch.routing.scanner import describe_function, namespace_meta, scan_namespace
from sample_resources import items, priced, widgets


class TestScanNamespace:
    def test_declaration_order(self) -> None:
        names = [fn.name for fn in scan_namespace(items)]
        assert names == [
            "index",
            "new",
            "create",
            "show",
            "edit",
            "update",
            "destroy",
            "history",
        ]

    def test_helpers_are_not_candidates(self) -> None:
        assert "summarize" not in {fn.name for fn in scan_namespace(items)}

    def test_helper_annotations_never_evaluated(self) -> None:
        assert [fn.name for fn in scan_namespace(priced)] == ["index"]

    def test_skips_private_and_imported(self) -> None:
        names = {fn.name for fn in scan_namespace(items)}
        assert "_private_helper" not in names
        assert "join" not in names
        assert "path_join" not in names
        assert "endpoint" not in names

    def test_dunder_all_selects_and_orders(self) -> None:
        module = types.ModuleType("fake_all")

        def index():
            return None

        def show(id):
            return id

        module.index = index
        module.show = show
        module.__all__ = ["show", "index"]

        assert [fn.name for fn in scan_namespace(module)] == ["show", "index"]

    def test_module_name_recorded(self) -> None:
        assert {fn.module for fn in scan_namespace(widgets)} == {"sample_resources.widgets"}


class TestNamespaceMeta:
    def test_reads_dunder_perch(self) -> None:
        assert namespace_meta(items).constraints == {"id": "int"}

    def test_missing_is_empty(self) -> None:
        assert namespace_meta(types.ModuleType("bare")) == NamespaceMeta()

    def test_wrong_type(self) -> None:
        module = types.ModuleType("broken")
        module.__perch__ = {"constraints": {}}
        with pytest.raises(ConfigurationError, match="NamespaceMeta"):
            namespace_meta(module)


class TestDescribeFunction:
    def test_plain_parameters(self) -> None:
        def update(id, name="anonymous"):
            return id, name

        fn = describe_function("tests.fake", "update", update)
        assert [p.name for p in fn.parameters] == ["id", "name"]
        assert not fn.parameters[0].has_default
        assert fn.parameters[1].default == "anonymous"
        assert fn.parameter("name") is fn.parameters[1]
        assert fn.parameter("missing") is None

    def test_annotated_tags(self) -> None:
        def show(
            id: Annotated[int, PathParam()],
            agent: Annotated[str, Header("User-Agent")],
            method: Annotated[str, FromRequest],
        ):
            return id, agent, method

        fn = describe_function("tests.fake", "show", show)
        assert fn.parameters[0].tag == PathParam()
        assert fn.parameters[1].tag == Header("User-Agent")
        assert fn.parameters[2].tag == FromRequest()

    def test_plain_annotation_has_no_tag(self) -> None:
        def show(id: int):
            return id

        param = describe_function("tests.fake", "show", show).parameters[0]
        assert param.tag is None
        assert param.annotation is int

    def test_keyword_only(self) -> None:
        def create(name, *, store):
            return name, store

        fn = describe_function("tests.fake", "create", create)
        assert [p.keyword_only for p in fn.parameters] == [False, True]

    def test_variadics_ignored(self) -> None:
        def index(*args, **kwargs):
            return args, kwargs

        assert describe_function("tests.fake", "index", index).parameters == ()

    def test_unresolvable_annotation(self) -> None:
        def show(id: "NoSuchType"):  # noqa: F821
            return id

        with pytest.raises(ConfigurationError) as exc_info:
            describe_function("tests.fake", "show", show)
        assert exc_info.value.function == "show"
