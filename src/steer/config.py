"""Unified configuration registry with TOML-backed persistence.

Provides a ``@configurable`` decorator that registers dataclass config
models into a registry, and a ``load()`` function that merges
code defaults → global TOML → local TOML into a populated instance.

Config files:
    ~/.config/steer/config.toml     global (user-wide)
    .steer/config.toml              local  (project-specific)

Loaded instances are plain values: callers pass them into the steering
pipeline explicitly rather than reading them back from module state.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
import tomllib
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger("steer.config")

_REGISTRY: dict[str, type] = {}


# ---------------------------------------------------------------------------
# Decorator
# ---------------------------------------------------------------------------

def configurable(section: str):
    """Class decorator — register a dataclass as a configurable section."""

    def decorator(cls: type[T]) -> type[T]:
        _REGISTRY[section] = cls
        return cls

    return decorator


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

def _global_path() -> pathlib.Path:
    return pathlib.Path.home() / ".config" / "steer" / "config.toml"


def _local_path(root: pathlib.Path) -> pathlib.Path:
    return root / ".steer" / "config.toml"


def _find_root(root: pathlib.Path | None = None) -> pathlib.Path:
    """Locate the project root (repo root or cwd)."""
    if root is not None:
        return root
    import steer.repo

    return steer.repo.project_root(pathlib.Path.cwd())


# ---------------------------------------------------------------------------
# TOML I/O
# ---------------------------------------------------------------------------

def _load_toml(path: pathlib.Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text())
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}


def _section(path: pathlib.Path, section: str) -> dict[str, Any]:
    table = _load_toml(path).get(section, {})
    if not isinstance(table, dict):
        logger.warning("Ignoring [%s] in %s: not a table", section, path)
        return {}
    return table


def _write_toml(path: pathlib.Path, data: dict[str, Any]) -> None:
    import tomli_w

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(tomli_w.dumps(data).encode())


# ---------------------------------------------------------------------------
# Type coercion
# ---------------------------------------------------------------------------

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _coerce(value: str, target_type: type) -> Any:
    """Coerce a CLI string to *target_type*."""
    if target_type is bool:
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Not a boolean: {value!r}")
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return value


def _check_type(value: Any, target_type: type) -> Any:
    """Return *value* as *target_type*, or raise ``ValueError``.

    TOML already yields typed values, so only strings are coerced.  An
    int is accepted for a float field; a bool is never accepted as a
    number.
    """
    if isinstance(value, str):
        return _coerce(value, target_type)
    if target_type is bool:
        if isinstance(value, bool):
            return value
    elif target_type is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif target_type is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif isinstance(value, target_type):
        return value
    raise ValueError(f"expected {target_type.__name__}, got {type(value).__name__}")


def _field_type(cls: type, field_name: str) -> type:
    """Return the concrete type for a dataclass field."""
    for f in dataclasses.fields(cls):
        if f.name == field_name:
            t = f.type
            # String annotations under ``from __future__ import annotations``
            if isinstance(t, str):
                mapping = {"int": int, "float": float, "bool": bool, "str": str}
                return mapping.get(t, str)
            return t
    raise KeyError(field_name)


# ---------------------------------------------------------------------------
# Core API
# ---------------------------------------------------------------------------

def list_sections() -> dict[str, type]:
    """Return a copy of the registry."""
    return dict(_REGISTRY)


def load(section: str, root: pathlib.Path | None = None) -> Any:
    """Load a config section, merging defaults → global → local.

    Values are checked against the dataclass field types.  A string is
    coerced the same way ``steer config set`` does it; a value that still
    has the wrong type is logged and the field keeps its default, so a
    bad config file never stops a session.
    """
    cls = _REGISTRY.get(section)
    if cls is None:
        raise KeyError(f"Unknown config section: {section}")

    root = _find_root(root)

    global_data = _section(_global_path(), section)
    local_data = _section(_local_path(root), section)

    # Local overrides global, global overrides defaults
    merged = {**global_data, **local_data}

    valid_fields = {f.name for f in dataclasses.fields(cls)}
    kwargs = {}
    for k, v in merged.items():
        if k not in valid_fields:
            logger.debug("Ignoring unknown config key %s.%s", section, k)
            continue
        try:
            kwargs[k] = _check_type(v, _field_type(cls, k))
        except ValueError as exc:
            logger.warning("Ignoring invalid config value %s.%s = %r: %s", section, k, v, exc)

    return cls(**kwargs)


def get_effective(
    section: str,
    key: str,
    root: pathlib.Path | None = None,
) -> Any:
    """Get the effective value for a single config key."""
    instance = load(section, root)
    return getattr(instance, key)


def set_value(
    section: str,
    key: str,
    value: Any,
    *,
    scope: str = "local",
    root: pathlib.Path | None = None,
) -> None:
    """Write a config value to the appropriate TOML file."""
    cls = _REGISTRY.get(section)
    if cls is None:
        raise KeyError(f"Unknown config section: {section}")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    if key not in valid_fields:
        raise KeyError(f"Unknown key: {section}.{key}")

    value = _check_type(value, _field_type(cls, key))

    root = _find_root(root)
    path = _global_path() if scope == "global" else _local_path(root)
    data = _load_toml(path)
    data.setdefault(section, {})[key] = value
    _write_toml(path, data)


def reset_value(
    section: str,
    key: str,
    *,
    scope: str = "local",
    root: pathlib.Path | None = None,
) -> None:
    """Remove a config override from the TOML file."""
    root = _find_root(root)
    path = _global_path() if scope == "global" else _local_path(root)
    data = _load_toml(path)
    sec = data.get(section, {})
    if key in sec:
        del sec[key]
        if not sec:
            del data[section]
        _write_toml(path, data)
