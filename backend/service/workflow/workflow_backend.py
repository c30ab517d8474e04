"""
Workflow Backend — the persistence contract the editor talks to.

Two implementations ship with the package: ``WorkflowStore``
(JSON files, local development and tests) and ``WorkflowApiClient``
(the dashboard REST API). Both enforce the same rules:

* ``activate`` / ``deactivate`` are idempotent.
* ``activate`` on a workflow without nodes raises ``ActivationRejected``.
* ``test_run`` asks the execution engine for a test run of the
  persisted workflow with optional trigger data; ``list_runs`` returns
  its run history. Neither executes anything locally.
* Writes are last-write-wins. Two sessions editing the same workflow
  overwrite each other; nothing here detects or merges that.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from service.workflow.workflow_model import (
    CreateWorkflowData,
    UpdateWorkflowData,
    WorkflowDefinition,
    WorkflowRun,
)


class WorkflowBackendError(Exception):
    """A backend call failed (transport error or server rejection)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class WorkflowNotFound(WorkflowBackendError):
    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Workflow not found: {workflow_id}", status_code=404)
        self.workflow_id = workflow_id


class ActivationRejected(WorkflowBackendError):
    """The backend refused to activate a structurally invalid workflow."""


@runtime_checkable
class WorkflowBackend(Protocol):
    async def list_all(self, organization_id: str) -> List[WorkflowDefinition]: ...

    async def get(self, organization_id: str, workflow_id: str) -> WorkflowDefinition: ...

    async def create(self, organization_id: str, data: CreateWorkflowData) -> WorkflowDefinition: ...

    async def update(
        self, organization_id: str, workflow_id: str, data: UpdateWorkflowData,
    ) -> WorkflowDefinition: ...

    async def delete(self, organization_id: str, workflow_id: str) -> None: ...

    async def activate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition: ...

    async def deactivate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition: ...

    async def test_run(
        self, organization_id: str, workflow_id: str,
        test_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowRun: ...

    async def list_runs(self, organization_id: str, workflow_id: str) -> List[WorkflowRun]: ...
