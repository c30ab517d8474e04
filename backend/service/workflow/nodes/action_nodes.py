"""
Action Nodes — side effects performed when a branch is reached.

Actions have one input and one default output so they chain linearly.
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

_A = NodeCategory.ACTION

ACTION_NODES: List[NodeDefinition] = [
    # ── Printer ──
    NodeDefinition(
        node_type="action.printer.print_receipt",
        category=_A,
        subcategory="printer",
        label="Print Receipt",
        description="Print the order receipt",
        icon="printer",
        config_fields=(
            NodeConfigField(name="printer_id", label="Printer ID", placeholder="Default printer"),
            NodeConfigField(name="copies", label="Copies", kind=FieldKind.NUMBER, default_value=1),
        ),
    ),
    NodeDefinition(
        node_type="action.printer.print_kitchen_ticket",
        category=_A,
        subcategory="printer",
        label="Print Kitchen Ticket",
        description="Send order items to a kitchen printer",
        icon="printer",
        config_fields=(
            NodeConfigField(name="printer_id", label="Printer ID", required=True),
            NodeConfigField(name="group_by_category", label="Group by Category",
                            kind=FieldKind.BOOLEAN, default_value=True),
        ),
    ),

    # ── Notifications ──
    NodeDefinition(
        node_type="action.notification.email",
        category=_A,
        subcategory="notification",
        label="Send Email",
        description="Send an email notification",
        icon="mail",
        config_fields=(
            NodeConfigField(name="to", label="Recipient", required=True, placeholder="team@example.com"),
            NodeConfigField(name="subject", label="Subject", required=True),
            NodeConfigField(name="body", label="Message", kind=FieldKind.TEXTAREA),
        ),
    ),
    NodeDefinition(
        node_type="action.notification.push",
        category=_A,
        subcategory="notification",
        label="Push Notification",
        description="Notify members of the organization",
        icon="bell",
        config_fields=(
            NodeConfigField(
                name="audience",
                label="Audience",
                kind=FieldKind.SELECT,
                options=options(("admins", "Admins"), ("staff", "All staff")),
                default_value="admins",
            ),
            NodeConfigField(name="message", label="Message", kind=FieldKind.TEXTAREA, required=True),
        ),
    ),

    # ── Orders & Stock ──
    NodeDefinition(
        node_type="action.order.set_status",
        category=_A,
        subcategory="order",
        label="Set Order Status",
        description="Move the order to another status",
        icon="refresh",
        config_fields=(
            NodeConfigField(
                name="status",
                label="Status",
                kind=FieldKind.SELECT,
                required=True,
                options=options(
                    ("preparing", "Preparing"),
                    ("ready", "Ready"),
                    ("completed", "Completed"),
                ),
            ),
        ),
    ),
    NodeDefinition(
        node_type="action.stock.adjust",
        category=_A,
        subcategory="stock",
        label="Adjust Stock",
        description="Change a product's stock level",
        icon="package",
        config_fields=(
            NodeConfigField(name="product_id", label="Product ID", required=True),
            NodeConfigField(name="delta", label="Change", kind=FieldKind.NUMBER, required=True),
        ),
    ),

    # ── Devices ──
    NodeDefinition(
        node_type="action.device.broadcast",
        category=_A,
        subcategory="device",
        label="Broadcast to Devices",
        description="Show a message on all linked devices",
        icon="broadcast",
        config_fields=(
            NodeConfigField(name="message", label="Message", required=True),
        ),
    ),

    # ── Integrations & Flow ──
    NodeDefinition(
        node_type="action.webhook.call",
        category=_A,
        subcategory="integration",
        label="Call Webhook",
        description="Send the event payload to an external URL",
        icon="link",
        config_fields=(
            NodeConfigField(name="url", label="URL", required=True, placeholder="https://"),
            NodeConfigField(
                name="method",
                label="Method",
                kind=FieldKind.SELECT,
                options=options(("POST", "POST"), ("PUT", "PUT")),
                default_value="POST",
            ),
            NodeConfigField(name="include_payload", label="Include Event Payload",
                            kind=FieldKind.BOOLEAN, default_value=True),
        ),
    ),
    NodeDefinition(
        node_type="action.flow.delay",
        category=_A,
        subcategory="flow",
        label="Wait",
        description="Pause before the next step",
        icon="hourglass",
        config_fields=(
            NodeConfigField(name="seconds", label="Seconds", kind=FieldKind.NUMBER,
                            required=True, default_value=60),
        ),
    ),
    NodeDefinition(
        node_type="action.flow.log",
        category=_A,
        subcategory="flow",
        label="Write Log Entry",
        description="Record a line in the workflow run log",
    ),
]
