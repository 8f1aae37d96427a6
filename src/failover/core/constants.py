"""
Failover defaults shared by the core and the runtime.

Defines the reserved argument names and bounds consumed by the resolver, the
supervisor and the settings layer. This module is zero-IO and uses only the
Python standard library.

Notes:
    - Runtime settings (failover.runtime.config.FailoverSettings) take their
      defaults from here; change defaults in this module only.
"""

from __future__ import annotations

__all__ = [
    "DIRECTIVE_KEY",
    "ERROR_KEY",
    "REBIND_KEY",
    "MAX_DEPTH",
]

# Reserved constructor argument carrying the failover directive.
DIRECTIVE_KEY: str = "failover_to"

# Argument the captured error is injected under when the directive does not say otherwise.
ERROR_KEY: str = "error"

# Constructor argument listing candidate subclasses for in-place rebinding.
REBIND_KEY: str = "as"

# Upper bound on nested failover hops. Candidate lists are finite, but class-level
# defaults can point at each other.
MAX_DEPTH: int = 32
