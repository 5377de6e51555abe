"""Tests for the Operation descriptor."""

from typing import Any

import pytest
from calltrace.core.operation import Operation
from pydantic import ValidationError


class Outer:
    class Repos:
        def list_repos(self, owner: str, page: int = 1, sort=None): ...

        def ping(self): ...

        def lookup(self, name: "str", limit: "int", extra): ...

        def broken(self, value: "Missing"): ...  # noqa: F821


def test_for_method_describes_signature():
    operation = Operation.for_method(Outer.Repos, Outer.Repos.list_repos)

    assert operation.owner_module == __name__
    assert operation.owner_name == "Outer.Repos"
    assert operation.owner_simple_name == "Repos"
    assert operation.name == "list_repos"
    assert operation.parameter_names == ("owner", "page", "sort")
    assert operation.parameter_types == (str, int, Any)


def test_qualified_names():
    operation = Operation.for_method(Outer.Repos, Outer.Repos.list_repos)

    assert operation.qualified_owner == f"{__name__}.Outer.Repos"
    assert operation.qualified_name == f"{__name__}.Outer.Repos.list_repos"
    assert str(operation) == operation.qualified_name


def test_for_method_without_parameters():
    operation = Operation.for_method(Outer.Repos, Outer.Repos.ping)

    assert operation.parameter_names == ()
    assert operation.parameter_types == ()


def test_operation_is_immutable():
    operation = Operation.for_method(Outer.Repos, Outer.Repos.ping)

    with pytest.raises(ValidationError):
        operation.name = "other"  # type: ignore[misc]

    assert operation.name == "ping"


def test_operations_with_same_signature_are_equal():
    first = Operation.for_method(Outer.Repos, Outer.Repos.list_repos)
    second = Operation.for_method(Outer.Repos, Outer.Repos.list_repos)

    assert first == second
    assert hash(first) == hash(second)


def test_string_annotations_are_resolved():
    operation = Operation.for_method(Outer.Repos, Outer.Repos.lookup)

    assert operation.parameter_types == (str, int, Any)


def test_unresolvable_annotations_fall_back_to_any():
    operation = Operation.for_method(Outer.Repos, Outer.Repos.broken)

    assert operation.parameter_names == ("value",)
    assert operation.parameter_types == (Any,)
