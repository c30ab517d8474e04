"""
Configuration Package.

Dataclass-based settings with environment defaults and
field metadata for settings screens.
"""

from service.config.base import (
    BaseConfig,
    ConfigField,
    FieldType,
    get_config,
    get_config_registry,
    register_config,
)

__all__ = [
    "BaseConfig",
    "ConfigField",
    "FieldType",
    "get_config",
    "get_config_registry",
    "register_config",
]
