"""
Node Base — categories, config-field schema, and the node registry.

Every node placed on the workflow canvas references a ``NodeDefinition``
by its dot-namespaced ``node_type`` (e.g. ``trigger.order.created``).
Definitions are plain data declared in the category modules
(``trigger_nodes``, ``condition_nodes``, ``action_nodes``) and indexed
once into an immutable ``NodeRegistry``.

Category drives all structural behaviour: handle counts, branch
handles, and the fallback used for node types this build does not know.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from logging import getLogger
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

logger = getLogger(__name__)


# ============================================================================
# Categories & handles
# ============================================================================


class NodeCategory(str, Enum):
    """Closed set of node categories."""
    TRIGGER = "trigger"
    CONDITION = "condition"
    ACTION = "action"


CATEGORY_ORDER: Tuple[NodeCategory, ...] = (
    NodeCategory.TRIGGER,
    NodeCategory.CONDITION,
    NodeCategory.ACTION,
)

TRUE_HANDLE = "true"
FALSE_HANDLE = "false"

# ``None`` is the unnamed default handle.
DEFAULT_HANDLE: Optional[str] = None


@dataclass(frozen=True)
class HandleRules:
    """Connection points a node of one category exposes."""
    input_count: int
    output_handles: Tuple[Optional[str], ...]

    @property
    def has_input(self) -> bool:
        return self.input_count > 0

    @property
    def is_branching(self) -> bool:
        return len(self.output_handles) > 1


def handle_rules(category: NodeCategory) -> HandleRules:
    """Handle layout for a category."""
    if category == NodeCategory.TRIGGER:
        return HandleRules(input_count=0, output_handles=(DEFAULT_HANDLE,))
    if category == NodeCategory.CONDITION:
        return HandleRules(input_count=1, output_handles=(TRUE_HANDLE, FALSE_HANDLE))
    if category == NodeCategory.ACTION:
        return HandleRules(input_count=1, output_handles=(DEFAULT_HANDLE,))
    raise ValueError(f"Unknown node category: {category!r}")


def category_color(category: NodeCategory) -> str:
    if category == NodeCategory.TRIGGER:
        return "#10B981"
    if category == NodeCategory.CONDITION:
        return "#F59E0B"
    if category == NodeCategory.ACTION:
        return "#3B82F6"
    raise ValueError(f"Unknown node category: {category!r}")


# ============================================================================
# Category inference for unregistered types
# ============================================================================

# Leading namespace segments that denote an event source.
TRIGGER_SEGMENTS = frozenset({
    "trigger", "order", "payment", "event", "device",
    "schedule", "webhook", "stock", "product", "printer",
})
CONDITION_SEGMENTS = frozenset({"condition"})

_NODE_TYPE_PATTERN = re.compile(r"^[a-z0-9_]+(\.[a-z0-9_]+)+$")


def is_valid_node_type(node_type: Any) -> bool:
    """True if ``node_type`` follows the dot-namespaced lowercase grammar."""
    return isinstance(node_type, str) and bool(_NODE_TYPE_PATTERN.match(node_type))


def infer_category(node_type: str) -> Optional[NodeCategory]:
    """Infer a category from the leading namespace segment.

    Returns ``None`` when ``node_type`` is not a dot-namespaced type
    string at all; such a type has no inferable category.
    """
    if not is_valid_node_type(node_type):
        return None
    head = node_type.split(".", 1)[0]
    if head in TRIGGER_SEGMENTS:
        return NodeCategory.TRIGGER
    if head in CONDITION_SEGMENTS:
        return NodeCategory.CONDITION
    return NodeCategory.ACTION


# ============================================================================
# Config field schema
# ============================================================================


class FieldKind(str, Enum):
    """Control rendered for a node config field."""
    TEXT = "text"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    BOOLEAN = "boolean"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class SelectOption:
    value: str
    label: str


@dataclass(frozen=True)
class NodeConfigField:
    """One user-editable value in a node's ``config`` map."""
    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    options: Tuple[SelectOption, ...] = ()
    default_value: Any = None
    placeholder: str = ""

    @property
    def option_values(self) -> Tuple[str, ...]:
        return tuple(o.value for o in self.options)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "label": self.label,
            "type": self.kind.value,
            "required": self.required,
        }
        if self.options:
            data["options"] = [{"value": o.value, "label": o.label} for o in self.options]
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.placeholder:
            data["placeholder"] = self.placeholder
        return data


def options(*pairs: Tuple[str, str]) -> Tuple[SelectOption, ...]:
    """Shorthand for building select options from ``(value, label)`` pairs."""
    return tuple(SelectOption(value=value, label=label) for value, label in pairs)


# ============================================================================
# Node definitions
# ============================================================================


@dataclass(frozen=True)
class NodeDefinition:
    """Static metadata for one node type."""
    node_type: str
    category: NodeCategory
    label: str
    description: str = ""
    icon: str = "zap"
    subcategory: str = ""
    config_fields: Tuple[NodeConfigField, ...] = ()
    known: bool = True

    @property
    def color(self) -> str:
        return category_color(self.category)

    @property
    def handles(self) -> HandleRules:
        return handle_rules(self.category)

    def get_field(self, name: str) -> Optional[NodeConfigField]:
        for f in self.config_fields:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the node palette."""
        rules = self.handles
        return {
            "type": self.node_type,
            "category": self.category.value,
            "subcategory": self.subcategory,
            "label": self.label,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
            "inputs": rules.input_count,
            "outputs": len(rules.output_handles),
            "configFields": [f.to_dict() for f in self.config_fields],
        }


def fallback_definition(node_type: str) -> NodeDefinition:
    """Placeholder definition for a type the registry does not know.

    The label and description are the bare type string and there are no
    config fields. Types that cannot be inferred fall back to ACTION so
    legacy data still renders.
    """
    category = infer_category(node_type) or NodeCategory.ACTION
    return NodeDefinition(
        node_type=node_type,
        category=category,
        label=node_type,
        description=node_type,
        known=False,
    )


# ============================================================================
# Registry
# ============================================================================


class NodeRegistry:
    """Read-only index of node definitions, built once."""

    def __init__(self, definitions: Iterable[NodeDefinition]) -> None:
        index: Dict[str, NodeDefinition] = {}
        for definition in definitions:
            if definition.node_type in index:
                raise ValueError(f"Duplicate node type: {definition.node_type}")
            index[definition.node_type] = definition
        self._index: Mapping[str, NodeDefinition] = MappingProxyType(index)

    def lookup(self, node_type: str) -> Optional[NodeDefinition]:
        """Registered definition for ``node_type``, or ``None``."""
        return self._index.get(node_type)

    def resolve(self, node_type: str) -> NodeDefinition:
        """Registered definition, or a fallback for unknown types."""
        return self.lookup(node_type) or fallback_definition(node_type)

    def resolve_category(self, node_type: str) -> NodeCategory:
        return self.resolve(node_type).category

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._index

    def __len__(self) -> int:
        return len(self._index)

    def list_all(self) -> List[NodeDefinition]:
        return list(self._index.values())

    def list_by_category(self, category: NodeCategory) -> List[NodeDefinition]:
        return [d for d in self._index.values() if d.category == category]

    def subcategories(self, category: NodeCategory) -> List[str]:
        """Distinct subcategories of a category, in declaration order."""
        seen: List[str] = []
        for d in self.list_by_category(category):
            if d.subcategory not in seen:
                seen.append(d.subcategory)
        return seen


_registry: Optional[NodeRegistry] = None


def get_node_registry() -> NodeRegistry:
    """Return the global NodeRegistry, building it on first use."""
    global _registry
    if _registry is None:
        from service.workflow.nodes import ALL_NODE_DEFINITIONS
        _registry = NodeRegistry(ALL_NODE_DEFINITIONS)
        logger.info(f"Workflow node registry built: {len(_registry)} node types")
    return _registry
