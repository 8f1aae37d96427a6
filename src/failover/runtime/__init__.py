"""
failover.runtime: construction with failover, in-place rebinding, class loading, settings.

## Responsibilities
- Construct classes from argument mappings and fail over to candidate classes when
  construction is predicted to fail or does fail (ConstructionSupervisor / construct).
- Rebind an existing instance to a candidate subclass in place, with rollback (rebind).
- Load candidate classes from a registry or importable dotted paths (ClassLoader).
- Carry runtime configuration with env > TOML > defaults precedence (FailoverSettings).
- Integrate with pydantic construction (FailoverModel, MonadicModel).

## Public API
- construct, ConstructionSupervisor, remap_args
- rebind, rebind_chain
- ClassLoader, default_loader, register
- FailoverSettings, get_settings, reset_settings
- FailoverModel, MonadicModel

## Import DAG discipline
- Depends on stdlib, pydantic and failover.core.*; failover.core never imports runtime.

## Examples
```python
from failover.runtime import FailoverModel, register

@register
class Failover(FailoverModel):
    error: object = None

class Sub1(FailoverModel):
    num: int | None = None
    r_str: str

obj = Sub1(num=123, failover_to="Failover")
type(obj).__name__   # 'Failover'
```
"""

from __future__ import annotations

from .config import FailoverSettings, get_settings, reset_settings
from .loader import ClassLoader, default_loader, register
from .models import FailoverMeta, FailoverModel, MonadicModel
from .rebind import rebind, rebind_chain
from .supervisor import ConstructionSupervisor, construct, remap_args

__all__ = [
    "ClassLoader",
    "ConstructionSupervisor",
    "FailoverMeta",
    "FailoverModel",
    "FailoverSettings",
    "MonadicModel",
    "construct",
    "default_loader",
    "get_settings",
    "rebind",
    "rebind_chain",
    "register",
    "remap_args",
    "reset_settings",
]
