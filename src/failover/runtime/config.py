"""
Configuration for the failover runtime.

Defines FailoverSettings, a frozen dataclass carrying runtime configuration for the
supervisor, the resolver and the loader. Defaults are sourced from
failover.core.constants (the single source of truth).

Source of truth
- failover.core.constants.DIRECTIVE_KEY, ERROR_KEY, MAX_DEPTH

Import DAG discipline
- Depends only on stdlib and failover.core.constants.

Notes
- Precedence: environment > TOML > defaults (see FailoverSettings.load).
- get_settings() caches the loaded settings for the process; reset_settings() clears it.
"""

from __future__ import annotations

import functools
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from failover.core.constants import DIRECTIVE_KEY as CORE_DIRECTIVE_KEY
from failover.core.constants import ERROR_KEY as CORE_ERROR_KEY
from failover.core.constants import MAX_DEPTH as CORE_MAX_DEPTH

__all__ = [
    "FailoverSettings",
    "get_settings",
    "reset_settings",
]


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return False


@dataclass(frozen=True)
class FailoverSettings:
    """
    Runtime settings for constructor failover.

    Attributes:
        directive_key (str): Reserved constructor argument carrying the directive, and
            the attribute name of a class-level default.
        error_key (str | None): Default argument the error is injected under when a
            directive does not name one; None disables injection by default.
        inherit_class_default (bool): Use a class-level default declared on an ancestor
            when the target class does not declare its own.
        max_depth (int): Maximum number of failover hops in one construction call (>=1).
        precheck (bool): Run the constraint checker before real construction. When
            False, only exceptions from real construction trigger failover.
        import_paths (bool): Let the loader import dotted paths that are not registered.

    Examples:
        >>> from failover.runtime.config import FailoverSettings
        >>> FailoverSettings(error_key="why").error_key
        'why'
    """

    directive_key: str = CORE_DIRECTIVE_KEY
    error_key: str | None = CORE_ERROR_KEY
    inherit_class_default: bool = False
    max_depth: int = CORE_MAX_DEPTH
    precheck: bool = True
    import_paths: bool = True

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"FailoverSettings max_depth must be >= 1, got {self.max_depth}")

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: FailoverSettings, cfg: dict[str, Any] | None) -> FailoverSettings:
        """Apply a loose config mapping onto FailoverSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        if "directive_key" in cfg and isinstance(cfg["directive_key"], str) and cfg["directive_key"]:
            s = replace(s, directive_key=cfg["directive_key"])

        # error_key: empty string or "none" disables injection by default
        if "error_key" in cfg:
            v = cfg["error_key"]
            if v is None or (isinstance(v, str) and v.strip().lower() in {"", "none"}):
                s = replace(s, error_key=None)
            elif isinstance(v, str):
                s = replace(s, error_key=v.strip())

        if "inherit_class_default" in cfg:
            s = replace(s, inherit_class_default=_bool(cfg["inherit_class_default"]))

        if "max_depth" in cfg:
            try:
                depth = int(cfg["max_depth"])
            except (TypeError, ValueError):
                depth = s.max_depth
            if depth >= 1:
                s = replace(s, max_depth=depth)

        if "precheck" in cfg:
            s = replace(s, precheck=_bool(cfg["precheck"]))

        if "import_paths" in cfg:
            s = replace(s, import_paths=_bool(cfg["import_paths"]))

        return s

    @classmethod
    def from_env(cls, base: FailoverSettings | None = None, prefix: str = "FAILOVER_") -> FailoverSettings:
        """
        Build FailoverSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - FAILOVER_DIRECTIVE_KEY
            - FAILOVER_ERROR_KEY ("none" disables injection by default)
            - FAILOVER_INHERIT_CLASS_DEFAULT (1/0/true/false/yes/no/on/off)
            - FAILOVER_MAX_DEPTH
            - FAILOVER_PRECHECK
            - FAILOVER_IMPORT_PATHS
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in (
            "directive_key",
            "error_key",
            "inherit_class_default",
            "max_depth",
            "precheck",
            "import_paths",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> FailoverSettings:
        """
        Build FailoverSettings from a TOML file.

        Search order when `path` is None:
            1) ./failover.toml (with either a top-level [failover] table or direct keys)
            2) ./pyproject.toml under [tool.failover]

        Returns defaults if no file is present or no file parses.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "failover.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("failover") if isinstance(tool, dict) else None
            elif isinstance(data.get("failover"), dict):
                cfg = data["failover"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> FailoverSettings:
        """
        Load FailoverSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (failover.toml, pyproject.toml).

        Returns:
            FailoverSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s


@functools.cache
def get_settings() -> FailoverSettings:
    """Return the process-wide settings, loading them on first use."""
    return FailoverSettings.load()


def reset_settings() -> None:
    """Forget the cached settings so the next get_settings() reloads them."""
    get_settings.cache_clear()
