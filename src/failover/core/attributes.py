"""
Attribute capability surface: read-only descriptors of a class's constructible attributes.

Responsibilities
- Define AttributeDescriptor, the per-attribute view the checker and resolver query.
- Define TypeConstraint, a coerce/validate wrapper around a pydantic TypeAdapter.
- Build the descriptor table for a class once (weakly cached) from whichever capability the
  class exposes:
    1. a ``__failover_attributes__()`` classmethod returning descriptors;
    2. pydantic models and pydantic dataclasses (``__pydantic_fields__``);
    3. stdlib dataclasses (no type constraints, stdlib does not validate).
  Anything else raises PrecheckUnavailable.

Pydantic mapping
- input keys: every key pydantic accepts. The validation alias (each string or
  single-key path of an ``AliasChoices``), else ``alias``, else the field name; plus
  the field name under ``populate_by_name``/``validate_by_name``. A nested
  ``AliasPath`` makes presence uncheckable, so the field counts as custom. No keys
  when the field is ``init=False`` (pydantic dataclasses) or is annotated with the
  NoInput marker.
- has_default / has_builder: explicit default / ``default_factory``.
- has_custom_initializer: the field is targeted by a ``before``/``wrap``/``plain``
  field validator (decorator or Annotated form), or the model has a ``before``/``wrap``
  model validator. Those transform raw input, so the outcome cannot be predicted.
- constraint: the field annotation plus its metadata, validated in one pass; lax mode
  (coercing) unless the model config sets ``strict``.

Notes
- Zero-IO; stdlib + pydantic only.
- Descriptor order is pydantic's field order: ancestors first, an overriding
  field keeps its ancestor's position.

Examples
```python
from typing import Annotated, Any
from pydantic import BaseModel, Field
from failover.core.attributes import NoInput, describe_attributes

class Sub1(BaseModel):
    num: int | None = None
    r_str: str
    failover_to: Annotated[Any, NoInput] = Field(default_factory=lambda: "Failover")

[(a.name, a.input_key, a.required) for a in describe_attributes(Sub1)]
# [('num', 'num', False), ('r_str', 'r_str', True), ('failover_to', None, False)]
```
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import weakref
from collections.abc import Callable, Mapping
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    AliasPath,
    BeforeValidator,
    ConfigDict,
    PlainValidator,
    PydanticUserError,
    TypeAdapter,
    ValidationError,
    WrapValidator,
)

from .errors import PrecheckUnavailable

__all__ = [
    "NoInput",
    "TypeConstraint",
    "AttributeDescriptor",
    "describe_attributes",
]

_RAW_VALUE_MODES = frozenset({"before", "wrap", "plain"})
_RAW_VALUE_VALIDATORS = (BeforeValidator, WrapValidator, PlainValidator)


class NoInput:
    """
    Annotated marker for attributes that cannot be supplied as constructor arguments.

    Examples:
        >>> from typing import Annotated, Any
        >>> hint = Annotated[Any, NoInput]
    """


def _is_no_input(marker: Any) -> bool:
    return marker is NoInput or isinstance(marker, NoInput)


def _display_type(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return repr(annotation)


class TypeConstraint:
    """
    Type constraint of one attribute, backed by a pydantic TypeAdapter.

    Attributes:
        name (str): Human-readable type name (e.g. "int | None").
        has_coercion (bool): Whether validation runs in lax mode (coercing) or strict mode.

    Notes:
        The adapter is built on first use; an annotation pydantic cannot build a
        schema for yields no adapter, and every value is then accepted (real
        construction decides).
    """

    def __init__(
        self,
        annotation: Any,
        metadata: tuple[Any, ...] = (),
        *,
        has_coercion: bool = True,
        arbitrary_types_allowed: bool = False,
    ):
        self.annotation = annotation
        self.metadata = tuple(m for m in metadata if not _is_no_input(m))
        self.has_coercion = has_coercion
        self.arbitrary_types_allowed = arbitrary_types_allowed
        self.name = _display_type(annotation)

    @functools.cached_property
    def adapter(self) -> TypeAdapter[Any] | None:
        hint = Annotated[(self.annotation, *self.metadata)] if self.metadata else self.annotation
        config = ConfigDict(arbitrary_types_allowed=True) if self.arbitrary_types_allowed else None
        try:
            return TypeAdapter(hint, config=config)
        except (PydanticUserError, NameError):
            return None

    def coerce(self, value: Any) -> Any:
        """Return the lax-validated value, or the value unchanged when coercion fails."""
        if not self.has_coercion or self.adapter is None:
            return value
        try:
            return self.adapter.validate_python(value)
        except ValidationError:
            return value

    def validate(self, value: Any) -> str | None:
        """
        Return a validation message if ``value`` is rejected, else None.

        One pydantic pass over the raw value: lax mode coerces and validates together
        (metadata bounds and after-validators run once), strict mode when coercion is
        not declared.
        """
        if self.adapter is None:
            return None
        try:
            self.adapter.validate_python(value, strict=not self.has_coercion)
        except ValidationError as exc:
            errors = exc.errors(include_url=False)
            return errors[0]["msg"] if errors else str(exc)
        return None

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"TypeConstraint({self.name})"


@dataclasses.dataclass(frozen=True)
class AttributeDescriptor:
    """
    Read-only view of one constructible attribute.

    Attributes:
        name (str): Attribute name.
        input_key (str | None): Primary constructor argument key; None if the
            attribute cannot be supplied externally.
        required (bool): Whether the attribute must be present.
        has_default (bool): A default value exists.
        has_builder (bool): A builder (default factory) exists.
        has_custom_initializer (bool): The class transforms the raw value itself;
            the checker skips constraint validation.
        constraint (TypeConstraint | None): Optional type constraint.
        alternate_keys (tuple[str, ...]): Other argument keys accepted for the attribute.
        owner_ref (weakref.ref | None): Weak reference to the declaring class.
        default (Callable[[], Any] | None): Synthesizes the default/builder value.
    """

    name: str
    input_key: str | None
    required: bool = False
    has_default: bool = False
    has_builder: bool = False
    has_custom_initializer: bool = False
    constraint: Any = None
    alternate_keys: tuple[str, ...] = ()
    owner_ref: weakref.ref[type] | None = dataclasses.field(default=None, repr=False, compare=False)
    default: Callable[[], Any] | None = dataclasses.field(default=None, repr=False, compare=False)

    @property
    def input_keys(self) -> tuple[str, ...]:
        """Every argument key the attribute can be supplied under (empty if none)."""
        if self.input_key is None:
            return ()
        return (self.input_key, *self.alternate_keys)

    @property
    def owner(self) -> type | None:
        """Class that declares the attribute (None if unknown or collected)."""
        return self.owner_ref() if self.owner_ref is not None else None

    @property
    def synthesized(self) -> bool:
        """True when absence is not an error because the value is synthesized later."""
        return self.has_default or self.has_builder


def _declaring_class(cls: type, name: str) -> weakref.ref[type]:
    for klass in cls.__mro__:
        try:
            annotations = inspect.get_annotations(klass)
        except NameError:
            continue
        if name in annotations:
            return weakref.ref(klass)
    return weakref.ref(cls)


def _input_keys(name: str, field: Any, config: Mapping[str, Any]) -> tuple[tuple[str, ...], bool]:
    """Return the argument keys pydantic accepts for a field, and whether presence is checkable."""
    by_name = bool(config.get("populate_by_name") or config.get("validate_by_name"))
    by_alias = config.get("validate_by_alias", True) is not False
    alias = field.validation_alias if field.validation_alias is not None else field.alias
    if alias is None:
        return (name,), True

    keys: list[str] = []
    checkable = True
    if by_alias:
        choices = alias.choices if isinstance(alias, AliasChoices) else [alias]
        for choice in choices:
            if isinstance(choice, str):
                keys.append(choice)
            elif isinstance(choice, AliasPath) and len(choice.path) == 1 and isinstance(choice.path[0], str):
                keys.append(choice.path[0])
            else:
                # nested path: presence depends on the shape of another argument
                checkable = False
    if by_name or not by_alias:
        keys.append(name)
    return tuple(dict.fromkeys(keys)), checkable


def _pydantic_attributes(cls: type, fields: Mapping[str, Any]) -> tuple[AttributeDescriptor, ...]:
    config = getattr(cls, "model_config", None) or getattr(cls, "__pydantic_config__", None) or {}
    strict = bool(config.get("strict", False))
    arbitrary = bool(config.get("arbitrary_types_allowed", False))

    transformed: set[str] = set()
    whole_input = False
    decorators = getattr(cls, "__pydantic_decorators__", None)
    if decorators is not None:
        for dec in decorators.field_validators.values():
            if dec.info.mode in _RAW_VALUE_MODES:
                transformed.update(dec.info.fields)
        whole_input = any(dec.info.mode in ("before", "wrap") for dec in decorators.model_validators.values())

    out: list[AttributeDescriptor] = []
    for name, field in fields.items():
        metadata = tuple(field.metadata)
        custom = (
            whole_input
            or name in transformed
            or "*" in transformed
            or any(isinstance(m, _RAW_VALUE_VALIDATORS) for m in metadata)
        )
        no_input = field.init is False or any(_is_no_input(m) for m in metadata)
        keys, checkable = ((), True) if no_input else _input_keys(name, field, config)
        custom = custom or not checkable
        has_builder = field.default_factory is not None
        required = field.is_required()
        constraint = None
        if field.annotation is not None and field.annotation is not Any:
            constraint = TypeConstraint(
                field.annotation,
                metadata,
                has_coercion=not strict,
                arbitrary_types_allowed=arbitrary,
            )
        out.append(
            AttributeDescriptor(
                name=name,
                input_key=keys[0] if keys else None,
                required=required,
                has_default=not required and not has_builder,
                has_builder=has_builder,
                has_custom_initializer=custom,
                constraint=constraint,
                alternate_keys=keys[1:],
                owner_ref=_declaring_class(cls, name),
                default=None if required else functools.partial(field.get_default, call_default_factory=True),
            )
        )
    return tuple(out)


def _dataclass_attributes(cls: type) -> tuple[AttributeDescriptor, ...]:
    out: list[AttributeDescriptor] = []
    for f in dataclasses.fields(cls):
        has_default = f.default is not dataclasses.MISSING
        has_builder = f.default_factory is not dataclasses.MISSING
        default: Callable[[], Any] | None = None
        if has_builder:
            default = f.default_factory
        elif has_default:
            default = lambda value=f.default: value  # noqa: E731
        out.append(
            AttributeDescriptor(
                name=f.name,
                input_key=f.name if f.init else None,
                required=not (has_default or has_builder),
                has_default=has_default,
                has_builder=has_builder,
                owner_ref=_declaring_class(cls, f.name),
                default=default,
            )
        )
    return tuple(out)


_DESCRIPTORS: weakref.WeakKeyDictionary[type, tuple[AttributeDescriptor, ...]] = weakref.WeakKeyDictionary()


def describe_attributes(cls: type) -> tuple[AttributeDescriptor, ...]:
    """
    Return the attribute descriptors of ``cls`` in declaration order.

    Args:
        cls (type): Target class.

    Returns:
        tuple[AttributeDescriptor, ...]: Descriptor table (built once per class and
        dropped when the class is garbage collected).

    Raises:
        PrecheckUnavailable: If ``cls`` exposes no attribute metadata.
    """
    if not isinstance(cls, type):
        raise PrecheckUnavailable(f"{cls!r} is not a class")
    try:
        return _DESCRIPTORS[cls]
    except KeyError:
        pass
    table = _build_attributes(cls)
    _DESCRIPTORS[cls] = table
    return table


def _build_attributes(cls: type) -> tuple[AttributeDescriptor, ...]:
    hook = getattr(cls, "__failover_attributes__", None)
    if callable(hook):
        return tuple(hook())
    fields = getattr(cls, "__pydantic_fields__", None)
    if isinstance(fields, dict):
        return _pydantic_attributes(cls, fields)
    if dataclasses.is_dataclass(cls):
        return _dataclass_attributes(cls)
    raise PrecheckUnavailable(f"{cls.__qualname__} exposes no attribute metadata")
