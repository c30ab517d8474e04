"""
Workflow Codec — convert between persisted and canvas graphs.

``decode`` turns persisted nodes/edges into editable canvas objects,
resolving each node's category through the registry. ``encode``
strips presentation state and returns the persisted shape.

For a well-formed graph (every node has ``id`` and ``type``, every
edge has ``id`` plus a ``source`` and ``target`` naming nodes of the
graph), ``decode(*encode(g))`` reproduces ``g``. Malformed entries,
including edges that point at missing nodes, are dropped during decode
and logged; they never raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from service.workflow.nodes.base import NodeCategory, NodeRegistry, get_node_registry
from service.workflow.workflow_model import Position, WorkflowEdge, WorkflowNode

logger = getLogger(__name__)

# Called with (kind, index, reason) for every dropped entry.
SkipHook = Callable[[str, int, str], None]


@dataclass
class CanvasNode:
    """A node as held by the editor canvas."""
    id: str
    type: str
    category: NodeCategory
    position: Position = field(default_factory=Position)
    config: Dict[str, Any] = field(default_factory=dict)
    # ── presentation only ──
    label: str = ""
    selected: bool = field(default=False, compare=False)


@dataclass
class CanvasEdge:
    """An edge as held by the editor canvas."""
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None
    # ── presentation only ──
    animated: bool = field(default=True, compare=False)


def _skip(on_skip: Optional[SkipHook], kind: str, index: int, reason: str) -> None:
    logger.warning(f"Skipping persisted {kind} at index {index}: {reason}")
    if on_skip:
        on_skip(kind, index, reason)


def decode_nodes(
    nodes: Iterable[WorkflowNode],
    registry: Optional[NodeRegistry] = None,
    on_skip: Optional[SkipHook] = None,
) -> List[CanvasNode]:
    reg = registry or get_node_registry()
    result: List[CanvasNode] = []
    for index, node in enumerate(nodes):
        if not node.id:
            _skip(on_skip, "node", index, "missing id")
            continue
        if not node.type:
            _skip(on_skip, "node", index, f"node {node.id} missing type")
            continue
        definition = reg.resolve(node.type)
        position = node.position or Position()
        result.append(CanvasNode(
            id=node.id,
            type=node.type,
            category=definition.category,
            position=Position(x=position.x, y=position.y),
            config=dict(node.config),
            label=definition.label,
        ))
    return result


def decode_edges(
    edges: Iterable[WorkflowEdge],
    node_ids: Optional[Set[str]] = None,
    on_skip: Optional[SkipHook] = None,
) -> List[CanvasEdge]:
    """Decode edges. With ``node_ids``, edges whose endpoints are not
    among them are dropped as well."""
    result: List[CanvasEdge] = []
    for index, edge in enumerate(edges):
        missing = [name for name in ("id", "source", "target") if not getattr(edge, name)]
        if missing:
            _skip(on_skip, "edge", index, f"missing {', '.join(missing)}")
            continue
        if node_ids is not None:
            dangling = [n for n in (edge.source, edge.target) if n not in node_ids]
            if dangling:
                _skip(on_skip, "edge", index,
                      f"edge {edge.id} references missing node {', '.join(dangling)}")
                continue
        result.append(CanvasEdge(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            source_handle=edge.source_handle,
            target_handle=edge.target_handle,
            label=edge.label,
        ))
    return result


def decode(
    nodes: Iterable[WorkflowNode],
    edges: Iterable[WorkflowEdge],
    registry: Optional[NodeRegistry] = None,
    on_skip: Optional[SkipHook] = None,
) -> Tuple[List[CanvasNode], List[CanvasEdge]]:
    """Persisted graph → canvas graph."""
    canvas_nodes = decode_nodes(nodes, registry=registry, on_skip=on_skip)
    node_ids = {n.id for n in canvas_nodes}
    return canvas_nodes, decode_edges(edges, node_ids=node_ids, on_skip=on_skip)


def encode(
    nodes: Iterable[CanvasNode],
    edges: Iterable[CanvasEdge],
) -> Tuple[List[WorkflowNode], List[WorkflowEdge]]:
    """Canvas graph → persisted graph."""
    persisted_nodes = [
        WorkflowNode(
            id=n.id,
            type=n.type,
            config=dict(n.config),
            position=Position(x=n.position.x, y=n.position.y),
        )
        for n in nodes
    ]
    persisted_edges = [
        WorkflowEdge(
            id=e.id,
            source=e.source,
            target=e.target,
            # Empty handle strings mean "default handle"
            source_handle=e.source_handle or None,
            target_handle=e.target_handle or None,
            label=e.label,
        )
        for e in edges
    ]
    return persisted_nodes, persisted_edges
