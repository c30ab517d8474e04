"""
Config Base — shared building blocks for every settings section.

Each section is a ``@dataclass`` subclass of ``BaseConfig`` decorated
with ``@register_config``. Sections describe their own fields via
``get_fields_metadata()`` so a settings UI can render them without
knowing the section type.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from logging import getLogger
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

logger = getLogger(__name__)

C = TypeVar("C", bound="BaseConfig")


class FieldType(str, Enum):
    """Input widget used for a config field."""
    STRING = "string"
    PASSWORD = "password"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    PATH = "path"


@dataclass
class ConfigField:
    """Display and validation metadata for one config field."""
    name: str
    field_type: FieldType
    label: str
    description: str = ""
    required: bool = False
    default: Any = None
    placeholder: str = ""
    options: List[Dict[str, str]] = field(default_factory=list)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    group: str = "general"
    secure: bool = False
    apply_change: Optional[Callable[[Any], None]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.field_type.value,
            "label": self.label,
            "description": self.description,
            "required": self.required,
            "default": self.default,
            "placeholder": self.placeholder,
            "options": self.options,
            "min": self.min_value,
            "max": self.max_value,
            "group": self.group,
            "secure": self.secure,
        }


@dataclass
class BaseConfig:
    """Base class for a settings section."""

    @classmethod
    def get_default_instance(cls: Type[C]) -> C:
        return cls()

    @classmethod
    def get_config_name(cls) -> str:
        raise NotImplementedError

    @classmethod
    def get_display_name(cls) -> str:
        return cls.get_config_name()

    @classmethod
    def get_description(cls) -> str:
        return ""

    @classmethod
    def get_category(cls) -> str:
        return "general"

    @classmethod
    def get_icon(cls) -> str:
        return "settings"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return []

    def validate(self) -> List[str]:
        """Check required fields and numeric bounds.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []
        for meta in self.get_fields_metadata():
            value = getattr(self, meta.name, None)
            if meta.required and (value is None or value == ""):
                errors.append(f"{meta.label} is required.")
                continue
            if meta.field_type == FieldType.NUMBER and isinstance(value, (int, float)):
                if meta.min_value is not None and value < meta.min_value:
                    errors.append(f"{meta.label} must be >= {meta.min_value}.")
                if meta.max_value is not None and value > meta.max_value:
                    errors.append(f"{meta.label} must be <= {meta.max_value}.")
        return errors

    def update(self, values: Dict[str, Any]) -> None:
        """Apply changed values and run each field's ``apply_change`` hook."""
        fields_by_name = {f.name: f for f in self.get_fields_metadata()}
        for name, value in values.items():
            if not hasattr(self, name):
                logger.warning(f"Ignoring unknown field '{name}' for config '{self.get_config_name()}'")
                continue
            setattr(self, name, value)
            meta = fields_by_name.get(name)
            if meta and meta.apply_change:
                meta.apply_change(value)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def get_schema(cls) -> Dict[str, Any]:
        """Serialize section metadata for the frontend."""
        return {
            "name": cls.get_config_name(),
            "display_name": cls.get_display_name(),
            "description": cls.get_description(),
            "category": cls.get_category(),
            "icon": cls.get_icon(),
            "fields": [f.to_dict() for f in cls.get_fields_metadata()],
        }


# ── Registry ──

_config_classes: Dict[str, Type[BaseConfig]] = {}
_config_instances: Dict[str, BaseConfig] = {}


def register_config(cls: Type[C]) -> Type[C]:
    """Class decorator: register a config section by its config name."""
    _config_classes[cls.get_config_name()] = cls
    return cls


def get_config_registry() -> Dict[str, Type[BaseConfig]]:
    """Return all registered config section classes."""
    return dict(_config_classes)


def get_config(config_cls: Type[C]) -> C:
    """Return the process-wide instance of a config section."""
    name = config_cls.get_config_name()
    instance = _config_instances.get(name)
    if instance is None:
        instance = config_cls.get_default_instance()
        _config_instances[name] = instance
    return instance  # type: ignore[return-value]


def reset_configs() -> None:
    """Drop cached instances so the next ``get_config`` re-reads the environment."""
    _config_instances.clear()
