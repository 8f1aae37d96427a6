"""
Construction supervisor: build an instance, or fail over to the next candidate class.

One construction frame:
1. Resolve the directive from the explicit ``failover_to`` argument or the class-level
   default (eagerly, before anything is constructed).
2. Run the constraint checker. A predicted failure skips real construction, so the
   constructor's side effects never run for arguments known to be bad.
3. Construct. Any exception is wrapped as ConstructionRaised.
4. No candidate: raise the first error of the chain. Raised errors keep their identity
   (the constructor's own exception object is re-raised, not a wrapper).
5. Remap arguments: replacement args (verbatim) or the current args; inject the error
   under the directive's error key; forward the reduced directive under ``failover_to``.
6. Load the candidate. ClassNotFound is fatal.
7. Recurse with the next class.

Notes
- Chains are bounded by the candidate lists and by FailoverSettings.max_depth.
- A candidate listed twice is attempted twice.
- The supervisor holds no state between calls; loader and settings are read-only here.

Examples
```python
from pydantic import BaseModel
from failover.runtime.loader import ClassLoader
from failover.runtime.supervisor import construct

loader = ClassLoader()

@loader.register
class Failover(BaseModel):
    error: object = None

class Sub1(BaseModel):
    num: int | None = None
    r_str: str

obj = construct(Sub1, {"num": 123, "failover_to": "Failover"}, loader=loader)
type(obj).__name__         # 'Failover'
obj.error.attribute_name   # 'r_str'
```
"""

from __future__ import annotations

import logging
from typing import Any

from failover.core.attributes import describe_attributes
from failover.core.checker import check
from failover.core.directive import PendingCandidate, resolve
from failover.core.errors import (
    ConstraintError,
    ConstructionRaised,
    FailoverDepthError,
    PrecheckUnavailable,
)
from failover.core.typing import ArgMap

from .config import FailoverSettings, get_settings
from .loader import ClassLoader, default_loader

__all__ = [
    "ConstructionSupervisor",
    "construct",
    "remap_args",
]

logger = logging.getLogger(__name__)


def remap_args(
    args: ArgMap,
    pending: PendingCandidate,
    error: ConstraintError,
    *,
    directive_key: str,
) -> dict[str, Any]:
    """
    Build the argument mapping for the next candidate.

    Args:
        args (ArgMap): Arguments of the failed attempt.
        pending (PendingCandidate): Candidate about to be attempted.
        error (ConstraintError): Error captured from the failed attempt.
        directive_key (str): Reserved directive argument name.

    Returns:
        dict[str, Any]: New mapping; ``args`` is not modified.

    Notes:
        Reused arguments lose their directive so a spent directive is never re-applied;
        replacement arguments are used verbatim.
    """
    if pending.replacement_args is not None:
        next_args = dict(pending.replacement_args)
    else:
        next_args = dict(args)
        next_args.pop(directive_key, None)
    if pending.error_key is not None:
        next_args[pending.error_key] = error
    if pending.remaining is not None:
        next_args[directive_key] = pending.remaining
    return next_args


class ConstructionSupervisor:
    """
    Construct instances with failover.

    Args:
        loader (ClassLoader | None): Loader for candidate references (default: the
            module-level default_loader).
        settings (FailoverSettings | None): Runtime settings (default: get_settings()).
    """

    def __init__(self, loader: ClassLoader | None = None, settings: FailoverSettings | None = None):
        self.loader = loader or default_loader
        self.settings = settings or get_settings()

    def construct(self, target: type, args: ArgMap | None = None) -> Any:
        """
        Construct ``target`` from ``args``, failing over as directed.

        Args:
            target (type): Class to construct.
            args (ArgMap | None): Constructor arguments, possibly holding ``failover_to``.

        Returns:
            Any: An instance of ``target`` or of the first candidate that succeeded.

        Raises:
            ConstraintError: Predicted failure with no candidate left (first error of the chain).
            Exception: The constructor's own exception when no candidate is left.
            ClassNotFound: A candidate could not be loaded.
            InvalidDirective: A directive is malformed.
            FailoverDepthError: The chain exceeded ``max_depth``.
        """
        return self._construct(target, dict(args or {}), origin=None, depth=0)

    def _construct(self, target: type, args: dict[str, Any], origin: BaseException | None, depth: int) -> Any:
        key = self.settings.directive_key
        pending = resolve(
            args.get(key),
            target,
            directive_key=key,
            error_key=self.settings.error_key,
            inherit=self.settings.inherit_class_default,
        )
        ctor_args = self._constructor_args(target, args)

        failure: BaseException
        error = check(target, ctor_args) if self.settings.precheck else None
        if error is None:
            try:
                return self._instantiate(target, ctor_args)
            except Exception as exc:
                failure = exc
                error = ConstructionRaised(exc)
        else:
            logger.debug("predicted failure constructing %s: %s", target.__name__, error)
            failure = error

        first = failure if origin is None else origin
        if pending is None:
            if depth:
                logger.warning(
                    "failover chain exhausted at %s after %d hop(s): %s", target.__name__, depth, failure
                )
            raise first
        if depth >= self.settings.max_depth:
            raise FailoverDepthError(
                f"failover from {target.__name__} exceeded max_depth={self.settings.max_depth}"
            ) from first

        next_cls = self.loader.load(
            pending.candidate, import_paths=None if self.settings.import_paths else False
        )
        next_args = remap_args(args, pending, error, directive_key=key)
        logger.info("failing over from %s to %s (%s)", target.__name__, next_cls.__name__, error.kind)
        return self._construct(next_cls, next_args, first, depth + 1)

    def _constructor_args(self, target: type, args: dict[str, Any]) -> dict[str, Any]:
        key = self.settings.directive_key
        if key not in args or _accepts_input(target, key):
            return dict(args)
        return {k: v for k, v in args.items() if k != key}

    @staticmethod
    def _instantiate(target: type, args: dict[str, Any]) -> Any:
        # Classes whose metaclass routes calls through a supervisor expose a direct path.
        build = getattr(type(target), "failover_instantiate", None)
        if build is not None:
            return build(target, args)
        return target(**args)


def _accepts_input(target: type, key: str) -> bool:
    try:
        attributes = describe_attributes(target)
    except PrecheckUnavailable:
        return False
    return any(key in attr.input_keys for attr in attributes)


def construct(
    target: type,
    args: ArgMap | None = None,
    *,
    loader: ClassLoader | None = None,
    settings: FailoverSettings | None = None,
) -> Any:
    """
    Construct ``target`` from ``args`` with failover (functional form).

    Args:
        target (type): Class to construct.
        args (ArgMap | None): Constructor arguments, possibly holding ``failover_to``.
        loader (ClassLoader | None): Loader for candidate references.
        settings (FailoverSettings | None): Runtime settings.

    Returns:
        Any: An instance of ``target`` or of the first candidate that succeeded.
    """
    return ConstructionSupervisor(loader=loader, settings=settings).construct(target, args)
