"""
Workflow Store — JSON-file persistence for workflow definitions.

Stores each workflow as an individual JSON file under
``<storage_dir>/<organization_id>/<workflow_id>.json`` in the same
camelCase shape the REST API returns. Implements the
``WorkflowBackend`` contract; calls are serialized via an asyncio lock.

Deletion is soft: the file stays with ``deletedAt`` set and is hidden
from ``get`` and ``list_all``.

Test runs are recorded as pending under ``<organization_id>/runs/``;
there is no execution engine behind the file store.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import datetime, timezone
from logging import getLogger
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from service.workflow.workflow_backend import ActivationRejected, WorkflowNotFound
from service.workflow.workflow_model import (
    CreateWorkflowData,
    UpdateWorkflowData,
    WorkflowDefinition,
    WorkflowRun,
    dump_payload,
)

logger = getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _safe(part: str) -> str:
    # Sanitize ID for filesystem
    return "".join(c for c in part if c.isalnum() or c in "-_")


class WorkflowStore:
    """Persist and load WorkflowDefinition objects as JSON files."""

    def __init__(self, storage_dir: Optional[Path] = None) -> None:
        if storage_dir is None:
            from service.config import get_config
            from service.config.sub_config.general.workflow_config import WorkflowEditorConfig
            storage_dir = Path(get_config(WorkflowEditorConfig).storage_dir)
        self._dir = Path(storage_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        logger.info(f"WorkflowStore initialized at {self._dir}")

    # ── WorkflowBackend ──

    async def list_all(self, organization_id: str) -> List[WorkflowDefinition]:
        """List all non-deleted workflows of an organization."""
        async with self._lock:
            workflows: List[WorkflowDefinition] = []
            org_dir = self._org_dir(organization_id)
            if not org_dir.exists():
                return workflows
            for path in sorted(org_dir.glob("*.json")):
                try:
                    raw = json.loads(path.read_text(encoding="utf-8"))
                    if raw.get("deletedAt"):
                        continue
                    workflows.append(WorkflowDefinition.model_validate(raw))
                except Exception as e:
                    logger.warning(f"Skipping malformed workflow file {path.name}: {e}")
            return workflows

    async def get(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        async with self._lock:
            return WorkflowDefinition.model_validate(self._read(organization_id, workflow_id))

    async def create(self, organization_id: str, data: CreateWorkflowData) -> WorkflowDefinition:
        async with self._lock:
            now = _now()
            raw = dump_payload(data)
            raw.update({
                "id": str(uuid.uuid4()),
                "organizationId": organization_id,
                "isSystem": False,
                "triggerConfig": {},
                "createdAt": now,
                "updatedAt": now,
            })
            self._write(organization_id, raw)
            logger.info(f"Workflow created: {data.name} ({raw['id']})")
            return WorkflowDefinition.model_validate(raw)

    async def update(
        self, organization_id: str, workflow_id: str, data: UpdateWorkflowData,
    ) -> WorkflowDefinition:
        async with self._lock:
            raw = self._read(organization_id, workflow_id)
            raw.update(dump_payload(data))
            raw["updatedAt"] = _now()
            self._write(organization_id, raw)
            logger.info(f"Workflow updated: {data.name} ({workflow_id})")
            return WorkflowDefinition.model_validate(raw)

    async def delete(self, organization_id: str, workflow_id: str) -> None:
        async with self._lock:
            raw = self._read(organization_id, workflow_id)
            raw["deletedAt"] = _now()
            raw["isActive"] = False
            self._write(organization_id, raw)
            logger.info(f"Workflow deleted: {workflow_id}")

    async def activate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        async with self._lock:
            raw = self._read(organization_id, workflow_id)
            if not raw.get("nodes"):
                raise ActivationRejected(
                    f"Workflow {workflow_id} has no nodes and cannot be activated",
                    status_code=400,
                )
            return self._set_active(organization_id, raw, True)

    async def deactivate(self, organization_id: str, workflow_id: str) -> WorkflowDefinition:
        async with self._lock:
            raw = self._read(organization_id, workflow_id)
            return self._set_active(organization_id, raw, False)

    async def test_run(
        self, organization_id: str, workflow_id: str,
        test_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowRun:
        """Queue a test run. Nothing executes here; the run stays pending."""
        async with self._lock:
            raw = self._read(organization_id, workflow_id)
            run = WorkflowRun(
                id=str(uuid.uuid4()),
                workflow_id=workflow_id,
                trigger_event=raw.get("triggerType") or "",
                trigger_data=dict(test_data or {}),
                started_at=_now(),
            )
            runs = self._read_runs(organization_id, workflow_id)
            runs.append(run.to_json_dict())
            self._write_runs(organization_id, workflow_id, runs)
            logger.info(f"Test run queued for workflow {workflow_id}: {run.id}")
            return run

    async def list_runs(self, organization_id: str, workflow_id: str) -> List[WorkflowRun]:
        """Run history, newest first."""
        async with self._lock:
            self._read(organization_id, workflow_id)
            runs: List[WorkflowRun] = []
            for index, raw in enumerate(self._read_runs(organization_id, workflow_id)):
                try:
                    runs.append(WorkflowRun.model_validate(raw))
                except ValidationError as e:
                    logger.warning(f"Skipping malformed run {index} of workflow {workflow_id}: {e}")
            return list(reversed(runs))

    # ── Extras ──

    async def install(self, organization_id: str, workflow: WorkflowDefinition) -> WorkflowDefinition:
        """Write a complete definition as-is (used for system templates)."""
        async with self._lock:
            raw = workflow.to_json_dict()
            raw["organizationId"] = organization_id
            raw["createdAt"] = raw.get("createdAt") or _now()
            raw["updatedAt"] = _now()
            self._write(organization_id, raw)
            logger.info(f"Workflow installed: {workflow.name} ({workflow.id})")
            return WorkflowDefinition.model_validate(raw)

    def exists(self, organization_id: str, workflow_id: str) -> bool:
        return self._path_for(organization_id, workflow_id).exists()

    # ── Internals ──

    def _set_active(self, organization_id: str, raw: Dict[str, Any], active: bool) -> WorkflowDefinition:
        if raw.get("isActive") != active:
            raw["isActive"] = active
            raw["updatedAt"] = _now()
            self._write(organization_id, raw)
            logger.info(f"Workflow {'activated' if active else 'deactivated'}: {raw['id']}")
        return WorkflowDefinition.model_validate(raw)

    def _read(self, organization_id: str, workflow_id: str) -> Dict[str, Any]:
        path = self._path_for(organization_id, workflow_id)
        if not path.exists():
            raise WorkflowNotFound(workflow_id)
        raw = json.loads(path.read_text(encoding="utf-8"))
        if raw.get("deletedAt"):
            raise WorkflowNotFound(workflow_id)
        return raw

    def _write(self, organization_id: str, raw: Dict[str, Any]) -> None:
        path = self._path_for(organization_id, raw["id"])
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(raw, indent=2, ensure_ascii=False), encoding="utf-8")

    def _runs_path(self, organization_id: str, workflow_id: str) -> Path:
        return self._org_dir(organization_id) / "runs" / f"{_safe(workflow_id)}.json"

    def _read_runs(self, organization_id: str, workflow_id: str) -> List[Dict[str, Any]]:
        path = self._runs_path(organization_id, workflow_id)
        if not path.exists():
            return []
        runs = json.loads(path.read_text(encoding="utf-8"))
        return runs if isinstance(runs, list) else []

    def _write_runs(self, organization_id: str, workflow_id: str, runs: List[Dict[str, Any]]) -> None:
        path = self._runs_path(organization_id, workflow_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(runs, indent=2, ensure_ascii=False), encoding="utf-8")

    def _org_dir(self, organization_id: str) -> Path:
        return self._dir / _safe(organization_id)

    def _path_for(self, organization_id: str, workflow_id: str) -> Path:
        return self._org_dir(organization_id) / f"{_safe(workflow_id)}.json"


# ── Singleton ──

_store_instance: Optional[WorkflowStore] = None


def get_workflow_store() -> WorkflowStore:
    """Return the global WorkflowStore singleton."""
    global _store_instance
    if _store_instance is None:
        _store_instance = WorkflowStore()
    return _store_instance
