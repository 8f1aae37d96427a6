"""
Failover directives and the resolver that reduces them one candidate at a time.

Wire contract (the ``failover_to`` constructor argument):
- a class reference (registered name, dotted path, or class object), or
- a mapping with keys:
    - ``class``: a class reference or an ordered list of them;
    - ``args``: optional replacement argument mapping for the next candidate;
    - ``err_arg``: argument name the error is injected under (default "error");
      an explicit None disables injection.

``failover_to="Failover"`` is equivalent to ``failover_to={"class": "Failover"}``.

Resolution
- An explicit directive always beats the class-level default. The class-level default
  is the default/builder value of the target's own attribute named like the directive
  key; ancestors' defaults are used only when ``inherit=True``.
- The first candidate is popped for the current attempt. If candidates remain, the
  reduced directive (same args/err_arg) is forwarded as the next class's own directive.

Notes:
    - Directives are immutable; the caller's mapping is never modified.
    - Zero-IO; stdlib + pydantic only.

Examples:
    >>> from failover.core.directive import resolve
    >>> pending = resolve({"class": ["Sub1", "Failover"], "err_arg": "why"})
    >>> pending.candidate, pending.error_key
    ('Sub1', 'why')
    >>> pending.remaining.candidates
    ('Failover',)
    >>> resolve("Failover").remaining is None
    True
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .attributes import describe_attributes
from .constants import DIRECTIVE_KEY, ERROR_KEY
from .errors import InvalidDirective, PrecheckUnavailable
from .typing import ClassRef

__all__ = [
    "FailoverDirective",
    "PendingCandidate",
    "class_default_directive",
    "resolve",
]


class FailoverDirective(BaseModel):
    """
    Normalized failover directive.

    Attributes:
        candidates (tuple[str | type, ...]): Ordered candidate classes (wire key ``class``).
        replacement_args (dict[str, Any] | None): Arguments for the next candidate
            instead of the current ones (wire key ``args``).
        error_key (str | None): Argument the error is injected under (wire key
            ``err_arg``); None disables injection.

    Raises:
        pydantic.ValidationError: If ``class`` is not a class reference or a list of them.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    candidates: tuple[str | type[Any], ...] = Field(default=(), alias="class")
    replacement_args: dict[str, Any] | None = Field(default=None, alias="args")
    error_key: str | None = Field(default=ERROR_KEY, alias="err_arg")

    @field_validator("candidates", mode="before")
    @classmethod
    def _normalize_candidates(cls, v: Any) -> Any:
        """Accept a single class reference as a one-element list."""
        if v is None:
            return ()
        if isinstance(v, (str, type)):
            return (v,)
        return v

    @classmethod
    def from_raw(cls, raw: Any, *, error_key: str | None = ERROR_KEY) -> FailoverDirective:
        """
        Build a directive from a wire value.

        Args:
            raw (Any): Class reference, directive mapping, or FailoverDirective.
            error_key (str | None): Default error key when the mapping has no ``err_arg``.

        Returns:
            FailoverDirective: Normalized directive.

        Raises:
            InvalidDirective: If ``raw`` is not a valid directive.
        """
        if isinstance(raw, FailoverDirective):
            return raw
        if isinstance(raw, (str, type)):
            data: dict[str, Any] = {"class": raw, "err_arg": error_key}
        elif isinstance(raw, Mapping):
            data = dict(raw)
            if "err_arg" not in data and "error_key" not in data:
                data["err_arg"] = error_key
        else:
            raise InvalidDirective(f"failover directive must be a class reference or a mapping, got {raw!r}")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidDirective(str(e)) from e

    def reduced(self) -> FailoverDirective | None:
        """Return the directive without its first candidate, or None if nothing remains."""
        if len(self.candidates) <= 1:
            return None
        return self.model_copy(update={"candidates": self.candidates[1:]})


@dataclass(frozen=True)
class PendingCandidate:
    """
    A directive reduced by one step.

    Attributes:
        candidate (ClassRef): Class to attempt next.
        replacement_args (dict[str, Any] | None): Arguments to use instead of the current ones.
        error_key (str | None): Argument the captured error is injected under.
        remaining (FailoverDirective | None): Directive to forward to the candidate, or None.
    """

    candidate: ClassRef
    replacement_args: dict[str, Any] | None
    error_key: str | None
    remaining: FailoverDirective | None = None


def class_default_directive(
    target: type,
    *,
    directive_key: str = DIRECTIVE_KEY,
    inherit: bool = False,
) -> Any:
    """
    Return the class-level default directive of ``target``, or None.

    Args:
        target (type): Class whose own attribute named ``directive_key`` is consulted.
        directive_key (str): Attribute name of the default.
        inherit (bool): Also accept a default declared on an ancestor class.

    Returns:
        Any: Raw directive produced by the attribute's default/builder, or None.
    """
    try:
        attributes = describe_attributes(target)
    except PrecheckUnavailable:
        return None
    for attr in attributes:
        if attr.name != directive_key or attr.default is None:
            continue
        if not inherit and attr.owner is not None and attr.owner is not target:
            return None
        return attr.default()
    return None


def resolve(
    raw: Any,
    target: type | None = None,
    *,
    directive_key: str = DIRECTIVE_KEY,
    error_key: str | None = ERROR_KEY,
    inherit: bool = False,
) -> PendingCandidate | None:
    """
    Reduce a raw directive (or the class-level default) to the next pending candidate.

    Args:
        raw (Any): Explicit directive from the constructor arguments, or None.
        target (type | None): Class being constructed; supplies the class-level default.
        directive_key (str): Name of the class-level default attribute.
        error_key (str | None): Default error key for directives that do not name one.
        inherit (bool): Accept class-level defaults declared on ancestors.

    Returns:
        PendingCandidate | None: Next candidate, or None when no failover is available.

    Raises:
        InvalidDirective: If the directive is malformed.
    """
    if raw is None and target is not None:
        raw = class_default_directive(target, directive_key=directive_key, inherit=inherit)
    if raw is None:
        return None
    directive = FailoverDirective.from_raw(raw, error_key=error_key)
    if not directive.candidates:
        return None
    return PendingCandidate(
        candidate=directive.candidates[0],
        replacement_args=directive.replacement_args,
        error_key=directive.error_key,
        remaining=directive.reduced(),
    )
