"""
Workflow Actions — operations on persisted workflows from the list view.

System workflows (``is_system``) are provided by the platform and may
not be deleted or deactivated from the dashboard. That is a UI policy
enforced here, not a structural rule of the graph.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, Optional

from service.workflow.workflow_backend import ActivationRejected, WorkflowBackend
from service.workflow.workflow_model import WorkflowDefinition, WorkflowRun

logger = getLogger(__name__)


class SystemWorkflowProtected(PermissionError):
    """Destructive action attempted on a system workflow."""

    def __init__(self, workflow: WorkflowDefinition, action: str) -> None:
        super().__init__(f"System workflow '{workflow.name}' cannot be {action}")
        self.workflow_id = workflow.id
        self.action = action


async def activate_workflow(
    backend: WorkflowBackend, organization_id: str, workflow: WorkflowDefinition,
) -> WorkflowDefinition:
    """Activate a persisted workflow.

    Raises:
        ActivationRejected: The backend refused (e.g. the workflow has no nodes).
    """
    try:
        return await backend.activate(organization_id, workflow.id)
    except ActivationRejected as e:
        logger.warning(f"Activation of {workflow.id} rejected: {e.message}")
        raise


async def deactivate_workflow(
    backend: WorkflowBackend, organization_id: str, workflow: WorkflowDefinition,
) -> WorkflowDefinition:
    if workflow.is_system:
        raise SystemWorkflowProtected(workflow, "deactivated")
    return await backend.deactivate(organization_id, workflow.id)


async def toggle_active(
    backend: WorkflowBackend, organization_id: str, workflow: WorkflowDefinition,
) -> WorkflowDefinition:
    """Flip a workflow between active and inactive."""
    if workflow.is_active:
        return await deactivate_workflow(backend, organization_id, workflow)
    return await activate_workflow(backend, organization_id, workflow)


async def delete_workflow(
    backend: WorkflowBackend, organization_id: str, workflow: WorkflowDefinition,
) -> None:
    if workflow.is_system:
        raise SystemWorkflowProtected(workflow, "deleted")
    await backend.delete(organization_id, workflow.id)
    logger.info(f"Workflow {workflow.id} deleted by dashboard")


async def request_test_run(
    backend: WorkflowBackend,
    organization_id: str,
    workflow: WorkflowDefinition,
    test_data: Optional[Dict[str, Any]] = None,
) -> WorkflowRun:
    """Request a test run of a persisted workflow.

    Raises:
        ValueError: The workflow has no nodes; there is nothing to run.
    """
    if not workflow.nodes:
        raise ValueError(f"Workflow '{workflow.name}' has no nodes to test")
    run = await backend.test_run(organization_id, workflow.id, test_data)
    logger.info(f"Test run {run.id} requested for workflow {workflow.id} ({run.status.value})")
    return run
