from __future__ import annotations

import dataclasses
from typing import Annotated, Any

import pytest
from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, Json, field_validator

from failover.core.attributes import NoInput
from failover.core.checker import check
from failover.core.errors import ConstraintViolation, MissingRequired


class Sub1(BaseModel):
    num: int | None = None
    r_str: str


class Built(BaseModel):
    items: list[int] = Field(default_factory=list)
    token: Annotated[str, NoInput] = "t"


@dataclasses.dataclass
class Plain:
    a: int
    b: int = 2


def test_missing_required_is_reported() -> None:
    err = check(Sub1, {"num": 123})
    assert isinstance(err, MissingRequired)
    assert err.class_name == "Sub1"
    assert err.attribute_name == "r_str"
    assert err.supplied_args == {"num": 123}


def test_constraint_violation_is_reported() -> None:
    err = check(Sub1, {"num": "123x", "r_str": "x"})
    assert isinstance(err, ConstraintViolation)
    assert err.attribute_name == "num"
    assert err.offending_value == "123x"
    assert "int" in str(err.constraint)


@pytest.mark.parametrize(
    "args",
    [
        {"r_str": "x"},
        {"num": 123, "r_str": "x"},
        {"num": None, "r_str": "x"},
        # coercible value passes through lax coercion
        {"num": "123", "r_str": "x"},
    ],
)
def test_valid_arguments_pass(args: dict[str, Any]) -> None:
    assert check(Sub1, args) is None


def test_first_problem_in_declaration_order_wins() -> None:
    # num comes before r_str, so the violation is reported, not the missing r_str
    err = check(Sub1, {"num": "nope"})
    assert isinstance(err, ConstraintViolation)
    assert err.attribute_name == "num"


def test_check_is_idempotent_and_does_not_mutate_args() -> None:
    args = {"num": "123"}
    first = check(Sub1, args)
    second = check(Sub1, args)
    assert type(first) is type(second)
    assert first.attribute_name == second.attribute_name
    assert args == {"num": "123"}


def test_default_and_builder_satisfy_absence() -> None:
    assert check(Built, {}) is None


def test_no_input_attribute_is_ignored() -> None:
    # token cannot be supplied; a bad value under its name is not checked
    assert check(Built, {"token": 12}) is None


def test_custom_initializer_skips_constraint() -> None:
    class Trimmed(BaseModel):
        n: int

        @field_validator("n", mode="before")
        @classmethod
        def _strip(cls, v: Any) -> Any:
            return str(v).strip()

    assert check(Trimmed, {"n": " 7 "}) is None


def test_stdlib_dataclass_checks_presence_only() -> None:
    assert isinstance(check(Plain, {}), MissingRequired)
    assert check(Plain, {"a": "not an int"}) is None


def test_class_without_metadata_always_passes() -> None:
    class Opaque:
        def __init__(self, **kwargs: Any) -> None:
            raise RuntimeError("never called by check")

    assert check(Opaque, {"anything": 1}) is None


class ByName(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    x: int = Field(alias="X")


class Choices(BaseModel):
    x: int = Field(validation_alias=AliasChoices("x", "ex"))


class Scaled(BaseModel):
    n: Annotated[int, Field(le=5), AfterValidator(lambda v: v * 10)]


class Payload(BaseModel):
    data: Json[list[int]]


class Parent(BaseModel):
    r_str: str


class Child(Parent):
    r_str: str | None = None


@pytest.mark.parametrize(
    ("target", "args"),
    [
        (ByName, {"x": 1}),
        (ByName, {"X": 1}),
        (Choices, {"x": 1}),
        (Choices, {"ex": 1}),
        (Scaled, {"n": 3}),
        (Payload, {"data": "[1, 2]"}),
        (Child, {}),
    ],
)
def test_no_failure_predicted_when_constructor_accepts(target: type, args: dict[str, Any]) -> None:
    target(**args)
    assert check(target, args) is None


def test_alias_keys_still_report_missing() -> None:
    err = check(Choices, {"y": 1})
    assert isinstance(err, MissingRequired)
    assert err.attribute_name == "x"


def test_value_under_alternate_key_is_validated() -> None:
    err = check(ByName, {"x": "nope"})
    assert isinstance(err, ConstraintViolation)
    assert err.attribute_name == "x"


def test_metadata_bound_and_json_are_checked_once() -> None:
    assert isinstance(check(Scaled, {"n": 6}), ConstraintViolation)
    assert isinstance(check(Payload, {"data": "not json"}), ConstraintViolation)


def test_redeclared_field_overrides_ancestor_requirement() -> None:
    assert isinstance(check(Parent, {}), MissingRequired)
    assert check(Child, {}) is None
