"""
Workflow Automation — visual trigger/condition/action workflow builder.

Provides the editing core behind the dashboard's workflow builder:
a node registry, conversion between persisted and canvas graphs, the
canvas state of one editing session, the node configuration panel,
and the save pipeline that persists through a backend.

Architecture:
    nodes/             — NodeCategory, NodeDefinition, NodeRegistry + node tables
    workflow_model     — Persisted (camelCase) workflow models
    workflow_codec     — decode / encode between persisted and canvas graphs
    workflow_canvas    — Mutable graph of one editing session
    config_panel       — Per-node dynamic config form with value coercion
    workflow_editor    — Editing session and save pipeline
    workflow_actions   — Activate / deactivate / delete / test from the list view
    workflow_backend   — Backend contract and errors
    workflow_store     — JSON-file backend
    workflow_api       — REST backend (httpx)
    workflow_inspector — Structural report and warnings
    templates          — System workflows
    palette            — Node palette grouping and search
"""

from service.workflow.nodes.base import (
    FieldKind,
    NodeCategory,
    NodeConfigField,
    NodeDefinition,
    NodeRegistry,
    get_node_registry,
    infer_category,
)
from service.workflow.nodes.trigger_nodes import MANUAL_TRIGGER_TYPE
from service.workflow.workflow_model import (
    CreateWorkflowData,
    Position,
    UpdateWorkflowData,
    WorkflowDefinition,
    WorkflowEdge,
    WorkflowNode,
    WorkflowRun,
    WorkflowRunLogEntry,
    WorkflowRunStatus,
)
from service.workflow.workflow_codec import CanvasEdge, CanvasNode, decode, encode
from service.workflow.workflow_canvas import WorkflowCanvas
from service.workflow.config_panel import FieldValidationError, NodeConfigPanel, coerce_value
from service.workflow.workflow_backend import (
    ActivationRejected,
    WorkflowBackend,
    WorkflowBackendError,
    WorkflowNotFound,
)
from service.workflow.workflow_editor import (
    EditorClosed,
    SaveInProgress,
    SaveRequestFailed,
    SaveValidationFailed,
    WorkflowEditor,
    derive_trigger_type,
)
from service.workflow.workflow_actions import (
    SystemWorkflowProtected,
    delete_workflow,
    request_test_run,
    toggle_active,
)
from service.workflow.workflow_store import WorkflowStore, get_workflow_store
from service.workflow.workflow_api import WorkflowApiClient
from service.workflow.workflow_inspector import inspect_workflow
from service.workflow.palette import build_palette

__all__ = [
    "FieldKind",
    "NodeCategory",
    "NodeConfigField",
    "NodeDefinition",
    "NodeRegistry",
    "get_node_registry",
    "infer_category",
    "MANUAL_TRIGGER_TYPE",
    "CreateWorkflowData",
    "Position",
    "UpdateWorkflowData",
    "WorkflowDefinition",
    "WorkflowEdge",
    "WorkflowNode",
    "WorkflowRun",
    "WorkflowRunLogEntry",
    "WorkflowRunStatus",
    "CanvasEdge",
    "CanvasNode",
    "decode",
    "encode",
    "WorkflowCanvas",
    "FieldValidationError",
    "NodeConfigPanel",
    "coerce_value",
    "ActivationRejected",
    "WorkflowBackend",
    "WorkflowBackendError",
    "WorkflowNotFound",
    "EditorClosed",
    "SaveInProgress",
    "SaveRequestFailed",
    "SaveValidationFailed",
    "WorkflowEditor",
    "derive_trigger_type",
    "SystemWorkflowProtected",
    "delete_workflow",
    "request_test_run",
    "toggle_active",
    "WorkflowStore",
    "get_workflow_store",
    "WorkflowApiClient",
    "inspect_workflow",
    "build_palette",
]
