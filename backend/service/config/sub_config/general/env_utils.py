"""
Environment helpers for config sections.

``read_env_defaults`` seeds a dataclass from environment variables,
converting each raw string to the declared field type.
``env_sync`` builds an ``apply_change`` hook that mirrors a field
back into the process environment.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field
from logging import getLogger
from typing import Any, Callable, Dict

logger = getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _convert(raw: str, target: Any, field_name: str) -> Any:
    # Field types are strings under ``from __future__ import annotations``
    type_name = target if isinstance(target, str) else getattr(target, "__name__", str(target))
    if type_name == "bool":
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean for {field_name}: {raw!r}")
    if type_name == "int":
        return int(raw)
    if type_name == "float":
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Dict[str, str],
    dataclass_fields: Dict[str, Field],
) -> Dict[str, Any]:
    """Collect constructor kwargs from environment variables.

    Only fields present in both ``env_map`` and the environment are
    returned; everything else keeps its dataclass default. Values that
    fail to convert are skipped with a warning.
    """
    values: Dict[str, Any] = {}
    for field_name, env_name in env_map.items():
        raw = os.environ.get(env_name)
        if raw is None:
            continue
        dc_field = dataclass_fields.get(field_name)
        if dc_field is None:
            continue
        try:
            values[field_name] = _convert(raw, dc_field.type, field_name)
        except ValueError as e:
            default = dc_field.default if dc_field.default is not MISSING else None
            logger.warning(f"Ignoring {env_name}={raw!r}: {e} (keeping {default!r})")
    return values


def env_sync(env_name: str) -> Callable[[Any], None]:
    """Return a hook that writes a changed value to ``os.environ``."""

    def _apply(value: Any) -> None:
        if value is None:
            os.environ.pop(env_name, None)
        elif isinstance(value, bool):
            os.environ[env_name] = "true" if value else "false"
        else:
            os.environ[env_name] = str(value)

    return _apply
