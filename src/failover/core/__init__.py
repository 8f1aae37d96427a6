"""
Core package aggregator for failover contracts (attributes, checker, directives, errors).

## Contracts (single source of truth)
- Attributes: AttributeDescriptor / TypeConstraint and the cached per-class descriptor table.
- Checker: `check(cls, args)` predicts a construction failure without constructing.
- Directives: FailoverDirective (wire form of `failover_to`), PendingCandidate, `resolve`.
- Errors: MissingRequired / ConstraintViolation / ConstructionRaised and fatal errors.
- Constants/Typing: reserved argument names, depth bound, aliases.

## Notes
- Zero-IO policy: stdlib + pydantic only; no class loading, no configuration files.
- Predicted errors carry `source == "predicted"`; errors from real construction are
  wrapped as ConstructionRaised with `source == "raised"`.
- The checker reports the first problem in declaration order; errors are never merged.

## Downstream usage
- failover.runtime.supervisor: runs `check`, then real construction, then `resolve` for
  the next candidate.
- failover.runtime.rebind: runs `check` before changing an instance's class in place.
- Failover classes: receive a ConstraintError under the directive's error key and may
  inspect `kind`, `source` and `as_dict()`.

## Examples
```python
from pydantic import BaseModel
from failover.core.checker import check
from failover.core.directive import resolve

class Sub1(BaseModel):
    num: int | None = None
    r_str: str

err = check(Sub1, {"num": 123})
err.kind, err.attribute_name  # ('missing_required', 'r_str')

pending = resolve({"class": ["Sub1", "Failover"]})
pending.candidate, pending.remaining.candidates  # ('Sub1', ('Failover',))
```
"""
