"""
Pre-construction constraint checker.

Predicts whether constructing a class from an argument mapping will fail, using only
the class's attribute descriptors. Nothing is allocated and no constructor code runs,
so side effects of real construction never happen for a predicted failure.

Rules (descriptor declaration order, first problem wins):
- skip attributes with no input key or with a custom initializer;
- any accepted key supplied (first match wins) and a constraint exists: coerce (if
  declared) and validate; failure is a ConstraintViolation;
- no accepted key supplied: required with neither default nor builder is a MissingRequired.

A class without attribute metadata always passes; real construction decides.

Examples:
    >>> from pydantic import BaseModel
    >>> from failover.core.checker import check
    >>> class Sub1(BaseModel):
    ...     num: int | None = None
    ...     r_str: str
    >>> check(Sub1, {"num": 123}).attribute_name
    'r_str'
    >>> check(Sub1, {"num": "123x", "r_str": "x"}).kind
    'constraint_violation'
    >>> check(Sub1, {"r_str": "x"}) is None
    True
"""

from __future__ import annotations

import logging
from typing import Any

from .attributes import TypeConstraint, describe_attributes
from .errors import ConstraintError, ConstraintViolation, MissingRequired, PrecheckUnavailable
from .typing import ArgMap

__all__ = ["check"]

logger = logging.getLogger(__name__)


def check(target: type, args: ArgMap) -> ConstraintError | None:
    """
    Predict a construction failure of ``target`` from ``args``.

    Args:
        target (type): Class to be constructed.
        args (ArgMap): Constructor arguments.

    Returns:
        ConstraintError | None: MissingRequired or ConstraintViolation for the first
        problem found, or None when no failure is predicted.
    """
    try:
        attributes = describe_attributes(target)
    except PrecheckUnavailable as exc:
        logger.debug("precheck skipped: %s", exc)
        return None

    for attr in attributes:
        keys = attr.input_keys
        if not keys or attr.has_custom_initializer:
            continue
        key = next((k for k in keys if k in args), None)
        if key is not None:
            if attr.constraint is None:
                continue
            value = args[key]
            message = _validate(attr.constraint, value)
            if message is not None:
                return ConstraintViolation(attr.name, value, attr.constraint, message)
        elif attr.required and not attr.synthesized:
            return MissingRequired(target.__name__, attr.name, args)
    return None


def _validate(constraint: Any, value: Any) -> str | None:
    # pydantic's lax mode coerces and validates in a single pass
    if isinstance(constraint, TypeConstraint):
        return constraint.validate(value)
    if getattr(constraint, "has_coercion", False):
        value = constraint.coerce(value)
    return constraint.validate(value)
