"""
Pre-built System Workflows.

Factory functions returning ready-made ``WorkflowDefinition`` objects
flagged ``is_system``. They are installed (inactive) into an
organization's store so admins can study or activate them; the
dashboard refuses to delete or deactivate them.
"""

from __future__ import annotations

from logging import getLogger
from typing import Callable, Dict, List, Optional

from service.config import get_config
from service.config.sub_config.general.workflow_config import WorkflowEditorConfig
from service.workflow.nodes.base import TRUE_HANDLE
from service.workflow.workflow_model import (
    Position,
    WorkflowDefinition,
    WorkflowEdge,
    WorkflowNode,
)
from service.workflow.workflow_store import WorkflowStore

logger = getLogger(__name__)


class _GraphBuilder:
    def __init__(self) -> None:
        self.nodes: List[WorkflowNode] = []
        self.edges: List[WorkflowEdge] = []

    def add(self, ntype: str, nid: str, x: float, y: float, cfg: Optional[Dict] = None) -> None:
        self.nodes.append(WorkflowNode(
            id=nid, type=ntype, position=Position(x=x, y=y), config=cfg or {},
        ))

    def edge(self, src: str, tgt: str, handle: Optional[str] = None) -> None:
        self.edges.append(WorkflowEdge(
            id=f"edge_{src}_{handle + '_' if handle else ''}{tgt}",
            source=src, target=tgt, source_handle=handle,
        ))


# ============================================================================
# Print receipt on payment
# ============================================================================


def create_receipt_template() -> WorkflowDefinition:
    """Print a receipt for every completed POS payment.

    Topology::
        payment.completed → order.source == pos ─true→ print_receipt
    """
    g = _GraphBuilder()
    g.add("trigger.payment.completed", "trigger", 240, 80)
    g.add("condition.order.source", "is_pos", 240, 230, {"source": "pos"})
    g.add("action.printer.print_receipt", "print", 120, 400, {"copies": 1})

    g.edge("trigger", "is_pos")
    g.edge("is_pos", "print", TRUE_HANDLE)

    return WorkflowDefinition(
        id="system-print-receipt",
        name="Print receipt on payment",
        description="Prints a receipt when a POS payment completes.",
        trigger_type="trigger.payment.completed",
        nodes=g.nodes,
        edges=g.edges,
        is_system=True,
    )


# ============================================================================
# Low stock alert
# ============================================================================


def create_low_stock_template() -> WorkflowDefinition:
    """Notify admins when a product runs low.

    Topology::
        stock.low → push notification → email
    """
    g = _GraphBuilder()
    g.add("trigger.stock.low", "trigger", 240, 80, {"threshold": 10})
    g.add("action.notification.push", "push", 240, 230,
          {"audience": "admins", "message": "Stock is running low"})
    g.add("action.notification.email", "mail", 240, 380,
          {"to": "", "subject": "Low stock"})

    g.edge("trigger", "push")
    g.edge("push", "mail")

    return WorkflowDefinition(
        id="system-low-stock",
        name="Low stock alert",
        description="Alerts admins when a product falls below its threshold.",
        trigger_type="trigger.stock.low",
        nodes=g.nodes,
        edges=g.edges,
        is_system=True,
    )


SYSTEM_TEMPLATES: List[Callable[[], WorkflowDefinition]] = [
    create_receipt_template,
    create_low_stock_template,
]


async def seed_templates(
    store: WorkflowStore,
    organization_id: str,
    enabled: Optional[bool] = None,
) -> List[WorkflowDefinition]:
    """Install system workflows the organization does not have yet.

    ``enabled`` defaults to ``WorkflowEditorConfig.seed_system_templates``.
    """
    if enabled is None:
        enabled = get_config(WorkflowEditorConfig).seed_system_templates
    if not enabled:
        return []
    installed: List[WorkflowDefinition] = []
    for factory in SYSTEM_TEMPLATES:
        template = factory()
        if store.exists(organization_id, template.id):
            continue
        installed.append(await store.install(organization_id, template))
    if installed:
        logger.info(f"Seeded {len(installed)} system workflow(s) for org {organization_id}")
    return installed
