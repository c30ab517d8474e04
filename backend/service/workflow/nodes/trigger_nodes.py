"""
Trigger Nodes — events that start a workflow.

A trigger has no input handle and one default output. The first
trigger on the canvas determines the workflow's ``triggerType``.
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

MANUAL_TRIGGER_TYPE = "trigger.manual"

_T = NodeCategory.TRIGGER

_ORDER_SOURCE = NodeConfigField(
    name="source",
    label="Order Source",
    kind=FieldKind.SELECT,
    options=options(("", "Any"), ("pos", "POS"), ("online", "Online shop"), ("kiosk", "Kiosk")),
    default_value="",
)

TRIGGER_NODES: List[NodeDefinition] = [
    # ── Manual ──
    NodeDefinition(
        node_type=MANUAL_TRIGGER_TYPE,
        category=_T,
        subcategory="manual",
        label="Manual Start",
        description="Run the workflow on demand",
        icon="play",
    ),

    # ── Orders ──
    NodeDefinition(
        node_type="trigger.order.created",
        category=_T,
        subcategory="order",
        label="Order Created",
        description="A new order was placed",
        icon="shopping_cart",
        config_fields=(_ORDER_SOURCE,),
    ),
    NodeDefinition(
        node_type="trigger.order.paid",
        category=_T,
        subcategory="order",
        label="Order Paid",
        description="An order was paid in full",
        icon="receipt_check",
        config_fields=(_ORDER_SOURCE,),
    ),
    NodeDefinition(
        node_type="trigger.order.cancelled",
        category=_T,
        subcategory="order",
        label="Order Cancelled",
        description="An order was cancelled or voided",
        icon="x_circle",
    ),

    # ── Payments ──
    NodeDefinition(
        node_type="trigger.payment.completed",
        category=_T,
        subcategory="payment",
        label="Payment Completed",
        description="A payment was captured successfully",
        icon="credit_card",
        config_fields=(
            NodeConfigField(
                name="method",
                label="Payment Method",
                kind=FieldKind.SELECT,
                options=options(("", "Any"), ("cash", "Cash"), ("card", "Card"), ("voucher", "Voucher")),
                default_value="",
            ),
        ),
    ),
    NodeDefinition(
        node_type="trigger.payment.failed",
        category=_T,
        subcategory="payment",
        label="Payment Failed",
        description="A payment attempt was declined",
        icon="alert_triangle",
    ),

    # ── Events ──
    NodeDefinition(
        node_type="trigger.event.started",
        category=_T,
        subcategory="event",
        label="Event Started",
        description="An event switched to running",
        icon="calendar",
    ),
    NodeDefinition(
        node_type="trigger.event.ended",
        category=_T,
        subcategory="event",
        label="Event Ended",
        description="An event was closed",
        icon="calendar_check",
    ),

    # ── Devices ──
    NodeDefinition(
        node_type="trigger.device.offline",
        category=_T,
        subcategory="device",
        label="Device Offline",
        description="A device stopped sending heartbeats",
        icon="wifi_off",
        config_fields=(
            NodeConfigField(
                name="grace_minutes",
                label="Grace Period (minutes)",
                kind=FieldKind.NUMBER,
                default_value=5,
            ),
        ),
    ),
    NodeDefinition(
        node_type="trigger.device.online",
        category=_T,
        subcategory="device",
        label="Device Online",
        description="A device reconnected",
        icon="wifi",
    ),

    # ── Stock ──
    NodeDefinition(
        node_type="trigger.stock.low",
        category=_T,
        subcategory="stock",
        label="Low Stock",
        description="A product's stock fell below its threshold",
        icon="package",
        config_fields=(
            NodeConfigField(
                name="threshold",
                label="Threshold",
                kind=FieldKind.NUMBER,
                required=True,
                default_value=10,
            ),
        ),
    ),

    # ── Schedule & Webhook ──
    NodeDefinition(
        node_type="trigger.schedule.cron",
        category=_T,
        subcategory="schedule",
        label="Schedule",
        description="Run on a recurring schedule",
        icon="clock",
        config_fields=(
            NodeConfigField(
                name="cron",
                label="Cron Expression",
                required=True,
                placeholder="0 8 * * *",
            ),
            NodeConfigField(
                name="timezone",
                label="Timezone",
                placeholder="Europe/Berlin",
                default_value="Europe/Berlin",
            ),
        ),
    ),
    NodeDefinition(
        node_type="trigger.webhook.received",
        category=_T,
        subcategory="webhook",
        label="Webhook Received",
        description="An external system called the workflow's webhook URL",
        icon="link",
        config_fields=(
            NodeConfigField(
                name="secret",
                label="Shared Secret",
                placeholder="Optional signing secret",
            ),
        ),
    ),
]
