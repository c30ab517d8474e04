# tests/conftest.py

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from service.config.base import reset_configs
from service.workflow.nodes.base import NodeRegistry, get_node_registry
from service.workflow.workflow_backend import (
    ActivationRejected,
    WorkflowBackendError,
    WorkflowNotFound,
)
from service.workflow.workflow_model import (
    CreateWorkflowData,
    UpdateWorkflowData,
    WorkflowDefinition,
    WorkflowRun,
)
from service.workflow.workflow_store import WorkflowStore


class RecordingBackend:
    """In-memory backend that records calls and can fail or block on demand."""

    def __init__(self) -> None:
        self.workflows: Dict[str, WorkflowDefinition] = {}
        self.calls: List[Tuple[str, Any]] = []
        self.fail_with: Optional[WorkflowBackendError] = None
        self.gate: Optional[asyncio.Event] = None
        self.runs: List[WorkflowRun] = []
        self._counter = 0

    async def _enter(self, name: str, payload: Any) -> None:
        self.calls.append((name, payload))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    async def list_all(self, organization_id: str) -> List[WorkflowDefinition]:
        await self._enter("list_all", organization_id)
        return list(self.workflows.values())

    async def get(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        await self._enter("get", workflow_id)
        if workflow_id not in self.workflows:
            raise WorkflowNotFound(workflow_id)
        return self.workflows[workflow_id]

    async def create(self, organization_id: str, data: CreateWorkflowData) -> WorkflowDefinition:
        await self._enter("create", data)
        self._counter += 1
        wf = WorkflowDefinition(
            id=f"wf-{self._counter}",
            organization_id=organization_id,
            name=data.name,
            description=data.description,
            trigger_type=data.trigger_type,
            nodes=data.nodes,
            edges=data.edges,
            is_active=data.is_active,
        )
        self.workflows[wf.id] = wf
        return wf

    async def update(
        self, organization_id: str, workflow_id: str, data: UpdateWorkflowData,
    ) -> WorkflowDefinition:
        await self._enter("update", (workflow_id, data))
        current = self.workflows[workflow_id]
        wf = current.model_copy(update={
            "name": data.name,
            "description": data.description,
            "trigger_type": data.trigger_type,
            "nodes": data.nodes,
            "edges": data.edges,
        })
        self.workflows[workflow_id] = wf
        return wf

    async def delete(self, organization_id: str, workflow_id: str) -> None:
        await self._enter("delete", workflow_id)
        self.workflows.pop(workflow_id, None)

    async def activate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        await self._enter("activate", workflow_id)
        wf = self.workflows[workflow_id]
        if not wf.nodes:
            raise ActivationRejected("no nodes", status_code=400)
        wf = wf.model_copy(update={"is_active": True})
        self.workflows[workflow_id] = wf
        return wf

    async def deactivate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        await self._enter("deactivate", workflow_id)
        wf = self.workflows[workflow_id].model_copy(update={"is_active": False})
        self.workflows[workflow_id] = wf
        return wf

    async def test_run(
        self, organization_id: str, workflow_id: str,
        test_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowRun:
        await self._enter("test_run", (workflow_id, test_data))
        wf = self.workflows[workflow_id]
        run = WorkflowRun(
            id=f"run-{len(self.runs) + 1}",
            workflow_id=workflow_id,
            trigger_event=wf.trigger_type,
            trigger_data=test_data or {},
            started_at="2026-01-01T00:00:00+00:00",
        )
        self.runs.append(run)
        return run

    async def list_runs(self, organization_id: str, workflow_id: str) -> List[WorkflowRun]:
        await self._enter("list_runs", workflow_id)
        return [r for r in self.runs if r.workflow_id == workflow_id]


@pytest.fixture(autouse=True)
def _fresh_configs(monkeypatch):
    for name in (
        "DASHBOARD_API_URL", "DASHBOARD_API_TOKEN", "DASHBOARD_API_TIMEOUT",
        "WORKFLOW_STORAGE_DIR", "WORKFLOW_SEED_TEMPLATES", "WORKFLOW_SESSION_LOG_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_configs()
    yield
    reset_configs()


@pytest.fixture
def registry() -> NodeRegistry:
    return get_node_registry()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def store(tmp_path) -> WorkflowStore:
    return WorkflowStore(storage_dir=tmp_path / "workflows")
