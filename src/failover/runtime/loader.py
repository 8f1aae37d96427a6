"""
Dynamic class loading for failover candidates.

ClassLoader maps class references to classes:
- class objects are returned as-is;
- names are looked up in the loader's registry (populated with ``register``);
- otherwise, when imports are allowed, ``pkg.mod:Class`` or ``pkg.mod.Class`` is
  imported and the result cached under the reference.

A reference that cannot be loaded raises ClassNotFound; the supervisor never skips a
broken candidate.

Examples
```python
from pydantic import BaseModel
from failover.runtime.loader import ClassLoader

loader = ClassLoader()

@loader.register
class Failover(BaseModel):
    error: object = None

loader.load("Failover") is Failover        # True
loader.load("collections:OrderedDict")     # imported and cached
```
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from failover.core.errors import ClassNotFound
from failover.core.typing import ClassRef

__all__ = [
    "ClassLoader",
    "default_loader",
    "register",
]

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)


class ClassLoader:
    """
    Registry-backed class loader with a cache of imported classes.

    Args:
        registry (Mapping[str, type] | None): Initial name → class entries.
        import_paths (bool): Import unregistered dotted references.
    """

    def __init__(self, registry: Mapping[str, type] | None = None, *, import_paths: bool = True):
        self._classes: dict[str, type] = dict(registry or {})
        self.import_paths = import_paths

    def register(self, cls: T | None = None, *, name: str | None = None) -> Any:
        """
        Register a class under its name (or ``name``). Usable as a decorator.

        Examples:
            >>> loader = ClassLoader()
            >>> @loader.register
            ... class Failover:
            ...     pass
            >>> @loader.register(name="ErrorPage")
            ... class Page:
            ...     pass
            >>> sorted(loader.names())
            ['ErrorPage', 'Failover']
        """

        def _register(klass: T) -> T:
            self._classes[name or klass.__name__] = klass
            return klass

        if cls is None:
            return _register
        return _register(cls)

    def names(self) -> list[str]:
        """Return registered and cached references."""
        return list(self._classes)

    def load(self, ref: ClassRef, *, import_paths: bool | None = None) -> type:
        """
        Resolve ``ref`` to a class.

        Args:
            ref (ClassRef): Class object, registered name, or dotted path.
            import_paths (bool | None): Override the loader's own import setting.

        Returns:
            type: The loaded class.

        Raises:
            ClassNotFound: If the reference cannot be resolved to a class.
        """
        if isinstance(ref, type):
            return ref
        if not isinstance(ref, str) or not ref:
            raise ClassNotFound(ref, "not a class reference")
        try:
            return self._classes[ref]
        except KeyError:
            pass
        if not (self.import_paths if import_paths is None else import_paths):
            raise ClassNotFound(ref, "not registered")
        cls = self._import(ref)
        self._classes[ref] = cls
        logger.debug("loaded failover class %s", ref)
        return cls

    def _import(self, ref: str) -> type:
        if ":" in ref:
            module_name, _, qualname = ref.partition(":")
        elif "." in ref:
            module_name, _, qualname = ref.rpartition(".")
        else:
            raise ClassNotFound(ref, "not registered")
        try:
            obj: Any = importlib.import_module(module_name)
            for part in qualname.split("."):
                obj = getattr(obj, part)
        except (ImportError, AttributeError) as exc:
            raise ClassNotFound(ref, str(exc)) from exc
        if not isinstance(obj, type):
            raise ClassNotFound(ref, f"{type(obj).__name__} is not a class")
        return obj


default_loader = ClassLoader()

register: Callable[..., Any] = default_loader.register
