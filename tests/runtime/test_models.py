from __future__ import annotations

from typing import Annotated, Any

import pytest
from pydantic import BaseModel, Field, PrivateAttr, ValidationError, model_validator

from failover.core.attributes import NoInput
from failover.core.errors import (
    ConstraintViolation,
    ConstructionRaised,
    MissingRequired,
    RebindError,
)
from failover.runtime.config import FailoverSettings
from failover.runtime.loader import ClassLoader
from failover.runtime.models import FailoverModel, MonadicModel

loader = ClassLoader(import_paths=False)


class Base(FailoverModel):
    failover_loader = loader
    failover_settings = FailoverSettings()


@loader.register
class Failover(Base):
    error: Any = None


class Sub1(Base):
    num: int | None = None
    r_str: str


class Handler(Base):
    page: int
    failover_to: Annotated[Any, NoInput] = Field(default="Failover", exclude=True)


def test_constructor_fails_over() -> None:
    obj = Sub1(num=123, failover_to="Failover")
    assert type(obj) is Failover
    assert isinstance(obj.error, MissingRequired)


def test_constructor_success_returns_own_class() -> None:
    obj = Sub1(num=1, r_str="x")
    assert type(obj) is Sub1
    assert obj.model_dump() == {"num": 1, "r_str": "x"}


def test_constructor_raises_without_directive() -> None:
    with pytest.raises(MissingRequired):
        Sub1(num=1)


def test_class_level_default_on_model() -> None:
    obj = Handler(page="x")
    assert type(obj) is Failover
    assert isinstance(obj.error, ConstraintViolation)
    assert Handler(page=3).model_dump() == {"page": 3}


def test_model_validate_is_not_intercepted() -> None:
    with pytest.raises(ValidationError):
        Sub1.model_validate({"num": 1, "failover_to": "Failover"})


class Shape(MonadicModel):
    rebind_loader = ClassLoader(import_paths=False)

    sides: int = 0


@Shape.rebind_loader.register
class Square(Shape):
    side: float
    _area: float | None = PrivateAttr(default=None)

    def area(self) -> float:
        if self._area is None:
            self._area = self.side**2
        return self._area


@Shape.rebind_loader.register
class Triangle(Shape):
    base: float
    height: float


@Shape.rebind_loader.register
class Fragile(Shape):
    side: float

    @model_validator(mode="after")
    def _reject(self) -> Fragile:
        raise ValueError("fragile")


class Loose(MonadicModel):
    pass


def test_monadic_rebinds_to_first_valid_candidate() -> None:
    s = Shape(**{"as": ["Square"], "sides": 4, "side": 2.0})
    assert type(s) is Square
    assert s.sides == 4
    assert s.area() == 4.0
    assert s.as_class == ["Square"]
    assert s.class_error is None
    assert s.has_class_error is False


def test_monadic_predicted_failure_keeps_class() -> None:
    s = Shape(**{"as": ["Square"], "sides": 4})
    assert type(s) is Shape
    assert isinstance(s.class_error, MissingRequired)
    assert s.class_error.attribute_name == "side"
    assert s.has_class_error is True


def test_monadic_chain_tries_next_candidate() -> None:
    s = Shape(**{"as": ["Square", "Triangle"], "sides": 3, "base": 1.0, "height": 2.0})
    assert type(s) is Triangle
    assert s.class_error is None


def test_monadic_rollback_on_raising_candidate() -> None:
    s = Shape(**{"as": ["Fragile"], "sides": 4, "side": 1.0})
    assert type(s) is Shape
    assert s.sides == 4
    assert isinstance(s.class_error, ConstructionRaised)
    assert "side" not in s.__dict__


def test_monadic_without_candidates_is_plain() -> None:
    s = Shape(sides=5)
    assert type(s) is Shape
    assert s.class_error is None


def test_monadic_rejects_non_subclass() -> None:
    with pytest.raises(RebindError):
        Loose(**{"as": [Square]})


def test_clear_class_error() -> None:
    s = Shape(**{"as": ["Square"]})
    assert s.has_class_error
    s.clear_class_error()
    assert s.class_error is None


def test_plain_base_model_is_untouched() -> None:
    class Plain(BaseModel):
        r_str: str

    with pytest.raises(ValidationError):
        Plain(failover_to="Failover")
