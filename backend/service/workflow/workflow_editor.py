"""
Workflow Editor — one editing session and its save pipeline.

A session owns a ``WorkflowCanvas``, a ``NodeConfigPanel`` bound to it,
and the name/description form fields. ``save`` validates, derives the
trigger type, encodes the canvas and issues ``create`` or ``update``.

Only one save may be in flight per session. A failed save leaves the
canvas and form fields exactly as they were; a successful save closes
the session and discards its in-memory graph. There is no autosave.

Two sessions editing the same persisted workflow are not reconciled:
the backend keeps whichever save arrives last.
"""

from __future__ import annotations

import uuid
from logging import getLogger
from typing import Any, Dict, Iterable, List, Optional

from service.logging.session_logger import (
    SessionEventType,
    SessionLogger,
    get_session_logger,
    remove_session_logger,
)
from service.workflow.config_panel import NodeConfigPanel
from service.workflow.nodes.base import NodeCategory, NodeRegistry, get_node_registry
from service.workflow.nodes.trigger_nodes import MANUAL_TRIGGER_TYPE
from service.workflow.workflow_backend import WorkflowBackend, WorkflowBackendError
from service.workflow.workflow_canvas import WorkflowCanvas
from service.workflow.workflow_codec import CanvasNode
from service.workflow.workflow_inspector import inspect_workflow
from service.workflow.workflow_model import (
    CreateWorkflowData,
    UpdateWorkflowData,
    WorkflowDefinition,
)

logger = getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class SaveValidationFailed(ValueError):
    """Form or graph is not saveable. No request was sent.

    ``errors`` maps a form field (``name``, ``nodes``) to its message.
    """

    def __init__(self, errors: Dict[str, str]) -> None:
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class SaveRequestFailed(Exception):
    """The backend rejected or never received the save. Editor state is intact."""

    retryable = True

    def __init__(self, cause: WorkflowBackendError) -> None:
        super().__init__(f"Saving the workflow failed: {cause.message}")
        self.cause = cause
        self.status_code = cause.status_code


class SaveInProgress(RuntimeError):
    """A save for this session is already running."""


class EditorClosed(RuntimeError):
    """The session was closed by a successful save or by ``discard``."""


# ============================================================================
# Derivation & validation
# ============================================================================


def derive_trigger_type(nodes: Iterable[CanvasNode]) -> str:
    """Type of the first trigger node in list order, else the manual sentinel."""
    for node in nodes:
        if node.category == NodeCategory.TRIGGER:
            return node.type
    return MANUAL_TRIGGER_TYPE


def validate_for_save(name: str, nodes: List[CanvasNode]) -> Dict[str, str]:
    """Field-scoped save preconditions. Empty dict = saveable."""
    errors: Dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Name is required."
    if not nodes:
        errors["nodes"] = "Add at least one node."
    return errors


# ============================================================================
# Editor session
# ============================================================================


class WorkflowEditor:
    """State of one workflow editing session.

    Usage::

        editor = await WorkflowEditor.open(backend, org_id)
        trigger = editor.canvas.add_node("trigger.order.created", (100, 100))
        ...
        editor.name = "Auto-print big orders"
        saved = await editor.save()
    """

    def __init__(
        self,
        backend: WorkflowBackend,
        organization_id: str,
        workflow: Optional[WorkflowDefinition] = None,
        registry: Optional[NodeRegistry] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or f"wf-edit-{uuid.uuid4().hex[:8]}"
        self._backend = backend
        self.organization_id = organization_id
        self._session_logger: Optional[SessionLogger] = get_session_logger(
            self.session_id, create_if_missing=True,
        )
        self.canvas = WorkflowCanvas(
            registry=registry or get_node_registry(),
            session_logger=self._session_logger,
        )
        self.panel = NodeConfigPanel(self.canvas)
        self.workflow_id: Optional[str] = None
        self.is_system = False
        self.name = ""
        self.description = ""
        self.is_saving = False
        self.closed = False
        self.last_error: Optional[Exception] = None

        if workflow is not None:
            self.workflow_id = workflow.id
            self.is_system = workflow.is_system
            self.name = workflow.name or ""
            self.description = workflow.description or ""
            self.canvas.load(workflow.nodes, workflow.edges)

        self._log(
            SessionEventType.SESSION_OPENED,
            f"editing {self.workflow_id or 'new workflow'} for org {organization_id}",
            workflow_id=self.workflow_id,
        )

    @classmethod
    async def open(
        cls,
        backend: WorkflowBackend,
        organization_id: str,
        workflow_id: Optional[str] = None,
        registry: Optional[NodeRegistry] = None,
    ) -> "WorkflowEditor":
        """Start a session: empty for a new workflow, else seeded from ``get``."""
        workflow = None
        if workflow_id:
            workflow = await backend.get(organization_id, workflow_id)
        return cls(backend, organization_id, workflow=workflow, registry=registry)

    # ── Properties ──

    @property
    def is_new(self) -> bool:
        return self.workflow_id is None

    @property
    def can_save(self) -> bool:
        """Whether the save control is enabled."""
        return (
            not self.closed
            and not self.is_saving
            and not validate_for_save(self.name, self.canvas.nodes)
        )

    @property
    def trigger_type(self) -> str:
        return derive_trigger_type(self.canvas.nodes)

    @property
    def session_logger(self) -> Optional[SessionLogger]:
        return self._session_logger

    # ── Save pipeline ──

    def build_payload(self) -> Any:
        """Create or update payload for the current canvas."""
        nodes, edges = self.canvas.to_persisted()
        if self.is_new:
            return CreateWorkflowData(
                name=self.name.strip(),
                description=self.description,
                trigger_type=self.trigger_type,
                nodes=nodes,
                edges=edges,
                is_active=False,
            )
        return UpdateWorkflowData(
            name=self.name.strip(),
            description=self.description or None,
            trigger_type=self.trigger_type,
            nodes=nodes,
            edges=edges,
        )

    async def save(self) -> WorkflowDefinition:
        """Validate and persist the session.

        Raises:
            EditorClosed: The session is already closed.
            SaveInProgress: Another save of this session is running.
            SaveValidationFailed: Name empty or no nodes; nothing sent.
            SaveRequestFailed: The backend call failed; state is unchanged.
        """
        if self.closed:
            raise EditorClosed(f"Session {self.session_id} is closed")
        if self.is_saving:
            raise SaveInProgress(f"Session {self.session_id} is already saving")

        errors = validate_for_save(self.name, self.canvas.nodes)
        if errors:
            self.last_error = SaveValidationFailed(errors)
            self._log(SessionEventType.VALIDATION_FAILED, str(self.last_error), errors=errors)
            raise self.last_error

        payload = self.build_payload()
        self.is_saving = True
        self.last_error = None
        self._log(
            SessionEventType.SAVE_STARTED,
            f"{'create' if self.is_new else 'update'} '{payload.name}' "
            f"({len(payload.nodes)} nodes, {len(payload.edges)} edges, trigger={payload.trigger_type})",
        )
        try:
            if self.is_new:
                saved = await self._backend.create(self.organization_id, payload)
            else:
                saved = await self._backend.update(self.organization_id, self.workflow_id, payload)
        except WorkflowBackendError as e:
            self.last_error = SaveRequestFailed(e)
            self._log(SessionEventType.SAVE_FAILED, e.message, status_code=e.status_code)
            raise self.last_error from e
        finally:
            self.is_saving = False

        self.workflow_id = saved.id
        self._log(SessionEventType.SAVE_SUCCEEDED, f"saved as {saved.id}", workflow_id=saved.id)
        self._close()
        return saved

    def discard(self) -> None:
        """Abandon the session without saving."""
        if not self.closed:
            self._close()

    # ── Diagnostics ──

    def warnings(self) -> List[str]:
        """Non-blocking structural findings for the current canvas."""
        nodes, edges = self.canvas.to_persisted()
        preview = WorkflowDefinition(
            id=self.workflow_id or "draft",
            name=self.name or "draft",
            trigger_type=self.trigger_type,
            nodes=nodes,
            edges=edges,
        )
        return inspect_workflow(preview, registry=self.canvas.registry)["validation"]["warnings"]

    # ── Internals ──

    def _close(self) -> None:
        self.canvas.clear()
        self.closed = True
        self._log(SessionEventType.SESSION_CLOSED, "session closed")
        remove_session_logger(self.session_id)

    def _log(self, event_type: SessionEventType, message: str, **data: Any) -> None:
        if self._session_logger is None:
            return
        if event_type in (SessionEventType.SAVE_STARTED, SessionEventType.SAVE_SUCCEEDED,
                          SessionEventType.SAVE_FAILED):
            self._session_logger.log_save(event_type, message, **data)
        else:
            self._session_logger.log(event_type, message, **data)
