"""
Lightweight typing aliases used across the core and runtime.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from failover.core.typing import ArgMap, ClassRef
    >>> def describe(ref: ClassRef) -> str:
    ...     return ref if isinstance(ref, str) else ref.__name__
    >>> describe("Failover")
    'Failover'
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeAlias

__all__ = [
    "ArgMap",
    "ClassRef",
]

# Constructor arguments as supplied by callers (string keys).
ArgMap: TypeAlias = Mapping[str, Any]

# A class object, a registered name, or an importable dotted path.
ClassRef: TypeAlias = str | type
