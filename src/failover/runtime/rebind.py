"""
In-place failover: change the runtime class of an existing instance to a subclass.

``rebind(instance, candidate, args)``:
1. ``candidate`` must be a subclass of the instance's current class (RebindError).
2. Predicted failure: record the error on the instance, leave its class alone.
3. Snapshot the instance state, switch ``__class__``, run the candidate's initializer
   with ``args`` (for pydantic models: in-place revalidation plus ``model_post_init`` and
   after-validators, the post-construction hooks).
4. Initializer raises: restore the original class and state, record the error.

The instance is never left visible in a half-initialized subclass state.

Notes
- Errors are recorded with ``instance._set_class_error(error)`` when the instance has
  it (MonadicModel), else as the ``class_error`` attribute.
- ``rebind_chain`` tries candidates in order and stops at the first success. Only the
  last failed attempt's error is kept.
- Side effects performed by a failing initializer are not undone.
"""

from __future__ import annotations

import contextvars
import copy
import logging
from collections.abc import Iterable
from contextlib import contextmanager
from typing import Any

from pydantic_core import PydanticUndefined

from failover.core.checker import check
from failover.core.errors import ConstraintError, ConstructionRaised, RebindError
from failover.core.typing import ArgMap, ClassRef

from .loader import ClassLoader, default_loader

__all__ = [
    "rebind",
    "rebind_chain",
    "rebinding",
]

logger = logging.getLogger(__name__)

# Instance state pydantic keeps outside __dict__.
_PYDANTIC_STATE = ("__pydantic_fields_set__", "__pydantic_extra__", "__pydantic_private__")

_REBINDING: contextvars.ContextVar[bool] = contextvars.ContextVar("failover_rebinding", default=False)


def rebinding() -> bool:
    """True while a candidate initializer is running inside ``rebind``."""
    return _REBINDING.get()


@contextmanager
def _rebinding_scope():
    token = _REBINDING.set(True)
    try:
        yield
    finally:
        _REBINDING.reset(token)


def _snapshot(instance: Any) -> dict[str, Any]:
    state: dict[str, Any] = {}
    try:
        state["__dict__"] = dict(object.__getattribute__(instance, "__dict__"))
    except AttributeError:
        pass
    for name in _PYDANTIC_STATE:
        try:
            value = object.__getattribute__(instance, name)
        except AttributeError:
            continue
        state[name] = copy.copy(value)
    return state


def _restore(instance: Any, cls: type, state: dict[str, Any]) -> None:
    object.__setattr__(instance, "__class__", cls)
    for name, value in state.items():
        object.__setattr__(instance, name, value)


def _fill_private_defaults(instance: Any) -> None:
    # Private attributes the candidate adds are not initialized by in-place revalidation.
    private = getattr(instance, "__pydantic_private__", None)
    declared = getattr(type(instance), "__private_attributes__", None)
    if not isinstance(private, dict) or not declared:
        return
    for name, attr in declared.items():
        if name in private:
            continue
        default = attr.get_default()
        if default is not PydanticUndefined:
            private[name] = default


def _record(instance: Any, error: ConstraintError) -> None:
    setter = getattr(instance, "_set_class_error", None)
    if callable(setter):
        setter(error)
    else:
        object.__setattr__(instance, "class_error", error)


def rebind(instance: Any, candidate: type, args: ArgMap) -> bool:
    """
    Try to turn ``instance`` into an instance of ``candidate`` in place.

    Args:
        instance (Any): Object whose class may change.
        candidate (type): Subclass of the instance's current class.
        args (ArgMap): Arguments for the candidate's initializer.

    Returns:
        bool: True if the instance now is a ``candidate``; False if the attempt failed
        and the error was recorded on the instance.

    Raises:
        RebindError: If ``candidate`` is not a subclass of the instance's class.
    """
    base = type(instance)
    if not isinstance(candidate, type) or not issubclass(candidate, base):
        raise RebindError(f"{getattr(candidate, '__name__', candidate)!s} is not a {base.__name__}")

    error = check(candidate, args)
    if error is not None:
        logger.debug("predicted failure rebinding %s to %s: %s", base.__name__, candidate.__name__, error)
        _record(instance, error)
        return False

    state = _snapshot(instance)
    object.__setattr__(instance, "__class__", candidate)
    try:
        _fill_private_defaults(instance)
        with _rebinding_scope():
            candidate.__init__(instance, **dict(args))
    except Exception as exc:
        _restore(instance, base, state)
        logger.debug("rebinding %s to %s raised: %s", base.__name__, candidate.__name__, exc)
        _record(instance, ConstructionRaised(exc))
        return False

    logger.info("rebound %s instance to %s", base.__name__, candidate.__name__)
    return True


def rebind_chain(
    instance: Any,
    candidates: Iterable[ClassRef],
    args: ArgMap,
    *,
    loader: ClassLoader | None = None,
) -> bool:
    """
    Try ``candidates`` in order until one rebind succeeds.

    Args:
        instance (Any): Object whose class may change.
        candidates (Iterable[ClassRef]): Candidate subclasses (classes or references).
        args (ArgMap): Arguments for each candidate's initializer.
        loader (ClassLoader | None): Loader for candidate references.

    Returns:
        bool: True on the first success; False when all candidates failed (the instance
        keeps its class and the last error).

    Raises:
        ClassNotFound: A candidate could not be loaded.
        RebindError: A candidate is not a subclass of the instance's class.
    """
    loader = loader or default_loader
    for ref in candidates:
        if rebind(instance, loader.load(ref), args):
            return True
    return False
