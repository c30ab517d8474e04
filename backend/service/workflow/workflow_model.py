"""
Workflow Data Models — the persisted (canonical) workflow shape.

These are the serializable structures exchanged with the backend.
JSON keys are camelCase (``sourceHandle``, ``triggerType``); Python
attributes are snake_case. A node's config map travels under ``data``.

Node and edge identity fields are optional here so legacy or corrupt
records still parse; ``workflow_codec.decode`` drops such entries.
A node with a non-object config or a malformed position keeps its
identity with an empty config / no position; a node or edge entry that
still fails validation is dropped from its workflow with a warning
instead of failing the whole definition.
"""

from __future__ import annotations

from enum import Enum
from logging import getLogger
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self, **kwargs: Any) -> Dict[str, Any]:
        """Dump with camelCase keys, JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


class Position(_CamelModel):
    """Canvas coordinates. Presentational only."""
    x: float = 0
    y: float = 0


class WorkflowNode(_CamelModel):
    """A single node of a persisted workflow graph."""

    id: Optional[str] = None
    type: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict, alias="data")
    position: Optional[Position] = None

    @field_validator("config", mode="before")
    @classmethod
    def _object_config(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return v
        if v is not None:
            logger.warning(f"Replacing non-object node config: {v!r}")
        return {}

    @field_validator("position", mode="before")
    @classmethod
    def _tolerant_position(cls, v: Any) -> Any:
        if v is None or isinstance(v, Position):
            return v
        try:
            return Position.model_validate(v)
        except ValidationError:
            logger.warning(f"Ignoring malformed node position: {v!r}")
            return None


class WorkflowEdge(_CamelModel):
    """A directed edge of a persisted workflow graph.

    ``source_handle`` is the branch tag (``"true"`` / ``"false"``)
    when the source is a condition node, otherwise ``None``.
    """

    id: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None


def _keep_valid(kind: str, model: Type[BaseModel], v: Any) -> Any:
    """Validate list entries one by one, dropping those that fail."""
    if v is None:
        return []
    if not isinstance(v, list):
        return v
    kept = []
    for index, item in enumerate(v):
        if isinstance(item, model):
            kept.append(item)
            continue
        if not isinstance(item, dict):
            logger.warning(f"Dropping non-object {kind} entry at index {index}: {item!r}")
            continue
        try:
            kept.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping invalid {kind} entry at index {index}: {e.error_count()} error(s)")
    return kept


class WorkflowDefinition(_CamelModel):
    """A workflow as stored by the backend."""

    id: str
    organization_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    trigger_type: str
    trigger_config: Dict[str, Any] = Field(default_factory=dict)
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    is_active: bool = False
    is_system: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("nodes", mode="before")
    @classmethod
    def _clean_nodes(cls, v: Any) -> Any:
        return _keep_valid("node", WorkflowNode, v)

    @field_validator("edges", mode="before")
    @classmethod
    def _clean_edges(cls, v: Any) -> Any:
        return _keep_valid("edge", WorkflowEdge, v)

    @field_validator("trigger_config", mode="before")
    @classmethod
    def _object_trigger_config(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_edges_from(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges originating from a node."""
        return [e for e in self.edges if e.source == node_id]

    def get_edges_to(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges pointing to a node."""
        return [e for e in self.edges if e.target == node_id]


class CreateWorkflowData(_CamelModel):
    """Payload for ``create``. New workflows start inactive."""

    name: str
    description: Optional[str] = None
    trigger_type: str
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    is_active: bool = False


class UpdateWorkflowData(_CamelModel):
    """Payload for ``update``. ``description=None`` clears it."""

    name: str
    description: Optional[str] = None
    trigger_type: str
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)


def dump_nodes(nodes: List[WorkflowNode]) -> List[Dict[str, Any]]:
    return [n.to_json_dict() for n in nodes]


def dump_edges(edges: List[WorkflowEdge]) -> List[Dict[str, Any]]:
    # Optional handles and labels are omitted rather than sent as null.
    return [e.to_json_dict(exclude_none=True) for e in edges]


def dump_payload(payload: _CamelModel) -> Dict[str, Any]:
    """Serialize a create/update payload in the wire shape."""
    data = payload.to_json_dict(exclude={"nodes", "edges"})
    data["nodes"] = dump_nodes(payload.nodes)
    data["edges"] = dump_edges(payload.edges)
    return data


# ============================================================================
# Runs
# ============================================================================


class WorkflowRunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class RunStepStatus(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class WorkflowRunLogEntry(_CamelModel):
    """One node's outcome within a run."""

    node_id: str
    status: RunStepStatus
    started_at: str
    completed_at: Optional[str] = None
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class WorkflowRun(_CamelModel):
    """A single execution of a workflow, as reported by the backend.

    Runs are produced by the execution engine; this package only
    requests test runs and reads the history.
    """

    id: str
    workflow_id: str
    trigger_event: str
    trigger_data: Dict[str, Any] = Field(default_factory=dict)
    status: WorkflowRunStatus = WorkflowRunStatus.PENDING
    started_at: str
    completed_at: Optional[str] = None
    execution_log: List[WorkflowRunLogEntry] = Field(default_factory=list)
    error: Optional[str] = None

    @field_validator("trigger_data", mode="before")
    @classmethod
    def _object_trigger_data(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else {}

    @field_validator("execution_log", mode="before")
    @classmethod
    def _clean_log(cls, v: Any) -> Any:
        return _keep_valid("run log", WorkflowRunLogEntry, v)

    @property
    def is_finished(self) -> bool:
        return self.status in (
            WorkflowRunStatus.COMPLETED,
            WorkflowRunStatus.FAILED,
            WorkflowRunStatus.CANCELLED,
        )
