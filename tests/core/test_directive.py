from __future__ import annotations

from typing import Annotated, Any

import pytest
from pydantic import BaseModel, Field, ValidationError

from failover.core.attributes import NoInput
from failover.core.directive import FailoverDirective, class_default_directive, resolve
from failover.core.errors import InvalidDirective


class Failover(BaseModel):
    error: Any = None


class WithDefault(BaseModel):
    r_str: str
    failover_to: Annotated[Any, NoInput] = "Failover"


class ChildOfDefault(WithDefault):
    pass


class WithBuilder(BaseModel):
    failover_to: Annotated[Any, NoInput] = Field(default_factory=lambda: {"class": ["A", "B"], "err_arg": None})


def test_string_is_shorthand_for_single_class() -> None:
    assert FailoverDirective.from_raw("Failover") == FailoverDirective.from_raw({"class": "Failover"})
    d = FailoverDirective.from_raw("Failover")
    assert d.candidates == ("Failover",)
    assert d.replacement_args is None
    assert d.error_key == "error"


def test_class_object_is_accepted() -> None:
    pending = resolve(Failover)
    assert pending.candidate is Failover
    assert pending.remaining is None


def test_resolve_pops_first_candidate_and_keeps_options() -> None:
    pending = resolve({"class": ["Sub1", "Failover"], "args": {"x": 1}, "err_arg": "why"})
    assert pending.candidate == "Sub1"
    assert pending.replacement_args == {"x": 1}
    assert pending.error_key == "why"
    assert pending.remaining.candidates == ("Failover",)
    assert pending.remaining.replacement_args == {"x": 1}
    assert pending.remaining.error_key == "why"
    # the reduced directive resolves to its own head
    assert resolve(pending.remaining).candidate == "Failover"


def test_explicit_none_err_arg_disables_injection() -> None:
    assert resolve({"class": "Failover", "err_arg": None}).error_key is None


def test_settings_error_key_applies_when_unspecified() -> None:
    assert resolve("Failover", error_key="problem").error_key == "problem"
    assert resolve({"class": "Failover", "err_arg": "mine"}, error_key="problem").error_key == "mine"


def test_caller_mapping_is_not_modified() -> None:
    raw = {"class": ["A", "B"]}
    resolve(raw)
    assert raw == {"class": ["A", "B"]}


def test_empty_candidates_resolve_to_none() -> None:
    assert resolve({"class": []}) is None
    assert resolve(None) is None


@pytest.mark.parametrize(
    "raw",
    [
        42,
        {"class": "A", "bogus": 1},
        {"class": 3.5},
        {"class": "A", "args": "not a mapping"},
    ],
)
def test_malformed_directives_raise(raw: Any) -> None:
    with pytest.raises(InvalidDirective):
        resolve(raw)


def test_class_level_default_is_used_without_explicit_directive() -> None:
    pending = resolve(None, WithDefault)
    assert pending.candidate == "Failover"


def test_explicit_directive_beats_class_default() -> None:
    pending = resolve("Other", WithDefault)
    assert pending.candidate == "Other"


def test_builder_default_is_evaluated() -> None:
    pending = resolve(None, WithBuilder)
    assert pending.candidate == "A"
    assert pending.error_key is None
    assert pending.remaining.candidates == ("B",)


def test_ancestor_default_requires_inherit() -> None:
    assert class_default_directive(ChildOfDefault) is None
    assert resolve(None, ChildOfDefault) is None
    assert class_default_directive(ChildOfDefault, inherit=True) == "Failover"
    assert resolve(None, ChildOfDefault, inherit=True).candidate == "Failover"


def test_directive_key_is_configurable() -> None:
    class Custom(BaseModel):
        fallback: Annotated[Any, NoInput] = "Failover"

    assert resolve(None, Custom) is None
    assert resolve(None, Custom, directive_key="fallback").candidate == "Failover"


def test_directive_is_immutable() -> None:
    d = FailoverDirective.from_raw("Failover")
    with pytest.raises(ValidationError):
        d.error_key = "other"  # type: ignore[misc]
