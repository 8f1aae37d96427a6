from __future__ import annotations

import pytest

from failover.core.errors import (
    ClassNotFound,
    ConstraintError,
    ConstraintViolation,
    ConstructionRaised,
    FailoverDepthError,
    FailoverError,
    InvalidDirective,
    MissingRequired,
    RebindError,
)


def test_missing_required_message_and_fields() -> None:
    supplied = {"num": 123}
    err = MissingRequired("Sub1", "r_str", supplied)
    assert str(err) == "Attribute (r_str) is required for Sub1"
    assert err.kind == "missing_required"
    assert err.source == "predicted"
    # supplied args are copied, later mutation of the caller's dict is not visible
    supplied["num"] = 0
    assert err.supplied_args == {"num": 123}


def test_constraint_violation_as_dict() -> None:
    err = ConstraintViolation("num", "123x", "int | None", "Input should be a valid integer")
    data = err.as_dict()
    assert data["kind"] == "constraint_violation"
    assert data["source"] == "predicted"
    assert data["attribute_name"] == "num"
    assert data["offending_value"] == "123x"
    assert data["constraint"] == "int | None"
    assert data["message"] == "Input should be a valid integer"
    assert "does not pass the type constraint" in str(err)


def test_construction_raised_wraps_original() -> None:
    boom = RuntimeError("boom")
    err = ConstructionRaised(boom)
    assert err.wrapped_error is boom
    assert err.source == "raised"
    assert str(err) == "RuntimeError: boom"
    assert err.as_dict()["error_type"] == "RuntimeError"


@pytest.mark.parametrize(
    "err",
    [
        MissingRequired("A", "x", {}),
        ConstraintViolation("x", 1, "str", "bad"),
        ConstructionRaised(KeyError("k")),
    ],
)
def test_constraint_errors_are_value_errors(err: ConstraintError) -> None:
    assert isinstance(err, ValueError)
    assert isinstance(err, FailoverError)
    with pytest.raises(ConstraintError):
        raise err


def test_fatal_errors_keep_builtin_bases() -> None:
    assert issubclass(ClassNotFound, ImportError)
    assert issubclass(InvalidDirective, TypeError)
    assert issubclass(RebindError, TypeError)
    assert issubclass(FailoverDepthError, RecursionError)
    assert not issubclass(ClassNotFound, ConstraintError)


def test_class_not_found_message() -> None:
    err = ClassNotFound("NoSuchClass", "not registered")
    assert err.ref == "NoSuchClass"
    assert str(err) == "unable to load class 'NoSuchClass': not registered"
    assert str(ClassNotFound(42)) == "unable to load class 42"
