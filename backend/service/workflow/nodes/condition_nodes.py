"""
Condition Nodes — branch on the triggering event.

Every condition exposes a ``"true"`` and a ``"false"`` output handle.
The execution engine evaluates the node's ``expression`` field against
the event context and follows the matching branch.
"""

from __future__ import annotations

from typing import List

from service.workflow.nodes.base import (
    FieldKind,
    NodeCategory,
    NodeConfigField,
    NodeDefinition,
    options,
)

_C = NodeCategory.CONDITION

CONDITION_NODES: List[NodeDefinition] = [
    NodeDefinition(
        node_type="condition.expression",
        category=_C,
        subcategory="logic",
        label="Custom Condition",
        description="Evaluate a free-form expression",
        icon="code",
        config_fields=(
            NodeConfigField(
                name="expression",
                label="Expression",
                kind=FieldKind.EXPRESSION,
                required=True,
                placeholder="order.total > 50 && order.source === 'pos'",
            ),
        ),
    ),
    NodeDefinition(
        node_type="condition.order.total_gt",
        category=_C,
        subcategory="order",
        label="Order Total Above",
        description="Order total is greater than an amount",
        icon="currency_euro",
        config_fields=(
            NodeConfigField(
                name="amount",
                label="Amount",
                kind=FieldKind.NUMBER,
                required=True,
                placeholder="50",
            ),
            NodeConfigField(
                name="expression",
                label="Expression",
                kind=FieldKind.EXPRESSION,
                default_value="order.total > amount",
            ),
        ),
    ),
    NodeDefinition(
        node_type="condition.order.source",
        category=_C,
        subcategory="order",
        label="Order Source Is",
        description="Order came from a specific channel",
        icon="filter",
        config_fields=(
            NodeConfigField(
                name="source",
                label="Source",
                kind=FieldKind.SELECT,
                required=True,
                options=options(("pos", "POS"), ("online", "Online shop"), ("kiosk", "Kiosk")),
            ),
            NodeConfigField(
                name="expression",
                label="Expression",
                kind=FieldKind.EXPRESSION,
                default_value="order.source === source",
            ),
        ),
    ),
    NodeDefinition(
        node_type="condition.product.category",
        category=_C,
        subcategory="product",
        label="Contains Category",
        description="Order contains a product of a category",
        icon="tag",
        config_fields=(
            NodeConfigField(
                name="category_id",
                label="Category ID",
                required=True,
            ),
            NodeConfigField(
                name="expression",
                label="Expression",
                kind=FieldKind.EXPRESSION,
                default_value="order.items.some(i => i.categoryId === category_id)",
            ),
        ),
    ),
    NodeDefinition(
        node_type="condition.time.between",
        category=_C,
        subcategory="time",
        label="Time Window",
        description="Current time is inside a window",
        icon="clock",
        config_fields=(
            NodeConfigField(name="from", label="From", required=True, placeholder="08:00"),
            NodeConfigField(name="to", label="To", required=True, placeholder="22:00"),
            NodeConfigField(
                name="expression",
                label="Expression",
                kind=FieldKind.EXPRESSION,
                default_value="now.time >= from && now.time <= to",
            ),
        ),
    ),
]
