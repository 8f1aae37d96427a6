"""
Exception types raised by the constraint checker, the resolver, and the runtime.

Provides typed exceptions for failover failures:
- ConstraintError variants describing a single failed construction attempt:
    - MissingRequired for an absent required attribute (predicted).
    - ConstraintViolation for a value rejected by a type constraint (predicted).
    - ConstructionRaised for an exception raised by the real constructor (raised).
- ClassNotFound when a failover candidate cannot be loaded (always fatal).
- InvalidDirective for a malformed ``failover_to`` value.
- PrecheckUnavailable when a class exposes no attribute metadata.
- RebindError when an in-place type change violates its precondition.
- FailoverDepthError when a chain exceeds the configured depth bound.

Notes:
    - Constraint errors are exceptions so they can be raised to the caller when a
      chain is exhausted, and plain values so they can be injected into the next
      candidate's arguments.
    - ``source`` separates errors predicted from metadata ("predicted") from errors
      raised by the constructor ("raised").
    - This module uses only the Python standard library and has no side effects.

Examples:
    >>> from failover.core.errors import MissingRequired
    >>> err = MissingRequired("Sub1", "r_str", {"num": 123})
    >>> err.as_dict()["attribute_name"]
    'r_str'
    >>> err.source
    'predicted'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, Literal

__all__ = [
    "ErrorSource",
    "FailoverError",
    "ConstraintError",
    "MissingRequired",
    "ConstraintViolation",
    "ConstructionRaised",
    "ClassNotFound",
    "InvalidDirective",
    "PrecheckUnavailable",
    "RebindError",
    "FailoverDepthError",
]

ErrorSource = Literal["predicted", "raised"]


class FailoverError(Exception):
    """Base class for all errors raised by this package."""


class ConstraintError(FailoverError, ValueError):
    """
    One failed construction attempt.

    Exactly one ConstraintError describes a failed attempt; the checker reports the
    first problem in attribute declaration order and never aggregates.

    Attributes:
        kind (str): Variant tag (lower_snake).
        source (ErrorSource): "predicted" for metadata checks, "raised" for
            exceptions from real construction.
    """

    kind: ClassVar[str] = "constraint_error"
    source: ClassVar[ErrorSource] = "predicted"

    def as_dict(self) -> dict[str, Any]:
        """Return a plain mapping view (variant tag, source and fields)."""
        return {"kind": self.kind, "source": self.source, "message": str(self)}


class MissingRequired(ConstraintError):
    """
    A required attribute was not supplied and has neither default nor builder.

    Attributes:
        class_name (str): Name of the class being constructed.
        attribute_name (str): Name of the missing attribute.
        supplied_args (dict[str, Any]): Copy of the arguments that were supplied.
    """

    kind = "missing_required"
    source = "predicted"

    def __init__(self, class_name: str, attribute_name: str, supplied_args: Mapping[str, Any]):
        self.class_name = class_name
        self.attribute_name = attribute_name
        self.supplied_args = dict(supplied_args)
        super().__init__(f"Attribute ({attribute_name}) is required for {class_name}")

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data.update(
            class_name=self.class_name,
            attribute_name=self.attribute_name,
            supplied_args=dict(self.supplied_args),
        )
        return data


class ConstraintViolation(ConstraintError):
    """
    A supplied value failed its attribute's type constraint.

    Attributes:
        attribute_name (str): Name of the offending attribute.
        offending_value (Any): The value as supplied (before coercion).
        constraint (Any): Constraint object that rejected the value.
        message (str): Validation message from the constraint.
    """

    kind = "constraint_violation"
    source = "predicted"

    def __init__(self, attribute_name: str, offending_value: Any, constraint: Any, message: str):
        self.attribute_name = attribute_name
        self.offending_value = offending_value
        self.constraint = constraint
        self.message = message
        super().__init__(
            f"Attribute ({attribute_name}) does not pass the type constraint "
            f"because: {message} (value: {offending_value!r})"
        )

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data.update(
            attribute_name=self.attribute_name,
            offending_value=self.offending_value,
            constraint=str(self.constraint),
            message=self.message,
        )
        return data


class ConstructionRaised(ConstraintError):
    """
    The real constructor raised an error the checker did not predict.

    Attributes:
        wrapped_error (BaseException): The exception raised by the constructor.
    """

    kind = "construction_raised"
    source = "raised"

    def __init__(self, wrapped_error: BaseException):
        self.wrapped_error = wrapped_error
        super().__init__(f"{type(wrapped_error).__name__}: {wrapped_error}")

    def as_dict(self) -> dict[str, Any]:
        data = super().as_dict()
        data.update(
            error_type=type(self.wrapped_error).__name__,
            wrapped_error=self.wrapped_error,
        )
        return data


class ClassNotFound(FailoverError, ImportError):
    """A failover candidate could not be loaded. Never skipped silently."""

    def __init__(self, ref: Any, reason: str | None = None):
        self.ref = ref
        detail = f": {reason}" if reason else ""
        super().__init__(f"unable to load class {ref!r}{detail}")


class InvalidDirective(FailoverError, TypeError):
    """A ``failover_to`` value is neither a class reference nor a valid directive mapping."""


class PrecheckUnavailable(FailoverError):
    """The class exposes no attribute metadata; real construction is trusted instead."""


class RebindError(FailoverError, TypeError):
    """An in-place type change was requested to a class that is not a subclass."""


class FailoverDepthError(FailoverError, RecursionError):
    """A failover chain exceeded the configured maximum depth (likely a default cycle)."""
