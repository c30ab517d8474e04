"""
Node Config Panel — dynamic per-node-type configuration form.

For the selected canvas node, resolves its ``NodeDefinition`` and
produces one control per config field. Changes go through ``change``,
which coerces the raw input to the field's declared kind before
merging it into the node's config. Values in ``config`` therefore
always match their field's kind once written through the panel.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Dict, List, Optional, Tuple, Union

from service.workflow.nodes.base import FieldKind, NodeCategory, NodeConfigField, NodeDefinition
from service.workflow.workflow_canvas import WorkflowCanvas
from service.workflow.workflow_codec import CanvasNode

logger = getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "on", "yes"}
_FALSE_STRINGS = {"false", "0", "off", "no", ""}

EMPTY_NO_SELECTION = "no_selection"
EMPTY_NO_FIELDS = "no_fields"


class FieldValidationError(ValueError):
    """Raw input could not be coerced to the field's kind."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"{field_name}: {message}")
        self.field_name = field_name
        self.message = message


def _coerce_number(f: NodeConfigField, raw: Any) -> Union[int, float]:
    if isinstance(raw, bool):
        raise FieldValidationError(f.name, "Expected a number")
    if isinstance(raw, (int, float)):
        number = raw
    else:
        text = str(raw).strip().replace(",", ".") if raw is not None else ""
        if not text:
            raise FieldValidationError(f.name, "Expected a number")
        try:
            number = float(text)
        except ValueError:
            raise FieldValidationError(f.name, f"Expected a number, got {raw!r}")
    if isinstance(number, float):
        if not math.isfinite(number):
            raise FieldValidationError(f.name, "Expected a finite number")
        if number.is_integer():
            return int(number)
    return number


def _coerce_boolean(f: NodeConfigField, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0
    lowered = str(raw).strip().lower() if raw is not None else ""
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise FieldValidationError(f.name, f"Expected true or false, got {raw!r}")


def _coerce_select(f: NodeConfigField, raw: Any) -> str:
    value = "" if raw is None else str(raw)
    # "" is the unselected placeholder entry
    if value and value not in f.option_values:
        raise FieldValidationError(f.name, f"{value!r} is not one of {list(f.option_values)}")
    return value


def coerce_value(f: NodeConfigField, raw: Any) -> Any:
    """Convert raw control input to the value stored for ``f``."""
    if f.kind == FieldKind.NUMBER:
        return _coerce_number(f, raw)
    if f.kind == FieldKind.BOOLEAN:
        return _coerce_boolean(f, raw)
    if f.kind == FieldKind.SELECT:
        return _coerce_select(f, raw)
    if f.kind in (FieldKind.TEXT, FieldKind.TEXTAREA, FieldKind.EXPRESSION):
        return "" if raw is None else str(raw)
    raise ValueError(f"Unknown field kind: {f.kind!r}")


def effective_value(f: NodeConfigField, config: Dict[str, Any]) -> Any:
    """Stored value, else the field default, else the empty value."""
    value = config.get(f.name)
    if value is None:
        value = f.default_value
    if value is None:
        value = False if f.kind == FieldKind.BOOLEAN else ""
    return value


@dataclass
class FieldControl:
    """One rendered form control."""
    name: str
    label: str
    kind: FieldKind
    value: Any
    required: bool = False
    placeholder: str = ""
    options: List[Dict[str, str]] = field(default_factory=list)
    hint: str = ""


@dataclass
class PanelView:
    """What the panel shows for the current selection."""
    empty_state: Optional[str] = None
    message: str = ""
    node_id: Optional[str] = None
    category: Optional[NodeCategory] = None
    title: str = ""
    description: str = ""
    controls: List[FieldControl] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.empty_state is not None


_EXPRESSION_HINT = "Example: order.total > 50 && order.source === 'pos'"


def _category_caption(category: NodeCategory) -> str:
    if category == NodeCategory.TRIGGER:
        return "Trigger"
    if category == NodeCategory.CONDITION:
        return "Condition"
    if category == NodeCategory.ACTION:
        return "Action"
    raise ValueError(f"Unknown node category: {category!r}")


class NodeConfigPanel:
    """Controller behind the configuration side panel."""

    def __init__(self, canvas: WorkflowCanvas) -> None:
        self._canvas = canvas

    def _selection(self) -> Tuple[Optional[CanvasNode], Optional[NodeDefinition]]:
        node = self._canvas.selected_node
        if node is None:
            return None, None
        return node, self._canvas.registry.resolve(node.type)

    def render(self) -> PanelView:
        node, definition = self._selection()
        if node is None or definition is None:
            return PanelView(
                empty_state=EMPTY_NO_SELECTION,
                message="Select a node to configure it.",
            )
        view = PanelView(
            node_id=node.id,
            category=node.category,
            title=definition.label,
            description=f"{_category_caption(node.category)} · {definition.description}",
        )
        if not definition.config_fields:
            view.empty_state = EMPTY_NO_FIELDS
            view.message = "This node needs no further configuration."
            return view
        for f in definition.config_fields:
            view.controls.append(FieldControl(
                name=f.name,
                label=f.label,
                kind=f.kind,
                value=effective_value(f, node.config),
                required=f.required,
                placeholder=f.placeholder,
                options=[{"value": o.value, "label": o.label} for o in f.options],
                hint=_EXPRESSION_HINT if f.kind == FieldKind.EXPRESSION else "",
            ))
        return view

    def change(self, field_name: str, raw_value: Any) -> Any:
        """Coerce ``raw_value`` and merge it into the selected node's config.

        Returns the stored value.

        Raises:
            LookupError: No node selected, or the field is not defined
                for the node's type.
            FieldValidationError: The input does not fit the field kind.
        """
        node, definition = self._selection()
        if node is None or definition is None:
            raise LookupError("No node selected")
        f = definition.get_field(field_name)
        if f is None:
            raise LookupError(f"Node type {node.type} has no field {field_name!r}")
        value = coerce_value(f, raw_value)
        self._canvas.update_node_config(node.id, {f.name: value})
        logger.debug(f"Config {node.id}.{f.name} = {value!r}")
        return value

    def missing_required(self) -> List[str]:
        """Names of required fields whose effective value is empty."""
        node, definition = self._selection()
        if node is None or definition is None:
            return []
        return [
            f.name for f in definition.config_fields
            if f.required and effective_value(f, node.config) in ("", None)
        ]

    def delete_selected(self) -> bool:
        node = self._canvas.selected_node
        if node is None:
            return False
        return self._canvas.delete_node(node.id)

    def close(self) -> None:
        self._canvas.clear_selection()
