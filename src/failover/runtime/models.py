"""
Pydantic base classes wiring failover into ordinary construction.

FailoverModel
- ``Model(**data)`` goes through the ConstructionSupervisor, so it may return an
  instance of a failover class instead of ``Model``.
- Class variables ``failover_loader`` / ``failover_settings`` select the loader and
  settings (defaults: default_loader, get_settings()).
- ``model_validate`` and ``model_construct`` are not intercepted.

MonadicModel
- Accepts ``as``: ordered candidate subclasses. After normal initialization the
  instance is rebound in place to the first candidate whose checks and hooks pass.
- ``class_error`` holds the last failed attempt's error (cleared at the start of each
  initialization and when a candidate succeeds).

Examples
```python
from typing import Annotated, Any
from pydantic import Field
from failover.core.attributes import NoInput
from failover.runtime.loader import register
from failover.runtime.models import FailoverModel, MonadicModel

@register
class ErrorPage(FailoverModel):
    error: Any = None

class Handler(FailoverModel):
    page: int
    failover_to: Annotated[Any, NoInput] = Field(default="ErrorPage", exclude=True)

Handler(page="x")            # ErrorPage(error=ConstraintViolation(...))

class Shape(MonadicModel):
    sides: int = 0

@register
class Square(Shape):
    side: float

s = Shape(**{"as": ["Square"], "sides": 4, "side": 2.0})
type(s).__name__             # 'Square'
```
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, Field, PrivateAttr

from failover.core.constants import REBIND_KEY
from failover.core.errors import ConstraintError

from .config import FailoverSettings
from .loader import ClassLoader
from .rebind import rebind_chain, rebinding
from .supervisor import ConstructionSupervisor

__all__ = [
    "FailoverMeta",
    "FailoverModel",
    "MonadicModel",
]

_ModelMetaclass = type(BaseModel)


class FailoverMeta(_ModelMetaclass):
    """Pydantic model metaclass that routes keyword construction through the supervisor."""

    def __call__(cls, *args: Any, **data: Any) -> Any:
        if args:
            return super().__call__(*args, **data)
        supervisor = ConstructionSupervisor(
            loader=getattr(cls, "failover_loader", None),
            settings=getattr(cls, "failover_settings", None),
        )
        return supervisor.construct(cls, data)

    def failover_instantiate(cls, args: dict[str, Any]) -> Any:
        """Construct without supervision (the real constructor)."""
        return super().__call__(**args)


class FailoverModel(BaseModel, metaclass=FailoverMeta):
    """Base model whose constructor fails over to other classes on invalid arguments."""

    failover_loader: ClassVar[ClassLoader | None] = None
    failover_settings: ClassVar[FailoverSettings | None] = None


class MonadicModel(BaseModel):
    """
    Base model that turns itself into one of the subclasses listed under ``as``.

    Attributes:
        as_class (list[str | type]): Candidate subclasses (constructor key ``as``).
        class_error (ConstraintError | None): Error of the last failed candidate.
    """

    rebind_loader: ClassVar[ClassLoader | None] = None

    as_class: list[str | type[Any]] = Field(default_factory=list, alias=REBIND_KEY)

    _class_error: ConstraintError | None = PrivateAttr(default=None)

    def __init__(self, /, **data: Any) -> None:
        super().__init__(**data)
        self.clear_class_error()
        if rebinding() or not self.as_class:
            return
        # ``as`` is passed on; the rebound instance keeps its candidate list
        rebind_chain(self, list(self.as_class), data, loader=type(self).rebind_loader)

    @property
    def class_error(self) -> ConstraintError | None:
        return self._class_error

    @property
    def has_class_error(self) -> bool:
        return self._class_error is not None

    def clear_class_error(self) -> None:
        self._class_error = None

    def _set_class_error(self, error: ConstraintError) -> None:
        self._class_error = error
