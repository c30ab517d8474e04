"""
Workflow Canvas — the mutable graph of one editing session.

Holds nodes, edges, and the currently selected node. All mutations are
synchronous and applied in call order. Operations that cannot apply
(unknown ids, unresolvable node types, connections the target's
handles do not accept) are no-ops: they log at DEBUG and return
``None`` / ``False`` instead of raising.

Ids are ``node_<n>`` and ``edge_<n>`` from per-session counters that
never go backwards and skip every id the session has already held
(loaded or allocated), so an id is not reused after a delete.
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from service.logging.session_logger import SessionLogger
from service.workflow.nodes.base import (
    NodeCategory,
    NodeRegistry,
    get_node_registry,
    handle_rules,
    infer_category,
)
from service.workflow.workflow_codec import CanvasEdge, CanvasNode, decode, encode
from service.workflow.workflow_model import Position, WorkflowEdge, WorkflowNode

logger = getLogger(__name__)

PositionLike = Any  # Position, {"x": .., "y": ..} or (x, y)


def _to_position(value: PositionLike) -> Position:
    if isinstance(value, Position):
        return Position(x=value.x, y=value.y)
    if isinstance(value, Mapping):
        return Position(x=value.get("x", 0), y=value.get("y", 0))
    x, y = value
    return Position(x=x, y=y)


class WorkflowCanvas:
    """In-memory workflow graph with add/connect/update/delete operations."""

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        session_logger: Optional[SessionLogger] = None,
    ) -> None:
        self._registry = registry or get_node_registry()
        self._session_logger = session_logger
        self._nodes: List[CanvasNode] = []
        self._edges: List[CanvasEdge] = []
        self._selected_id: Optional[str] = None
        self._next_node = 0
        self._next_edge = 0
        # Every id the session has held, loaded or allocated
        self._used_node_ids: Set[str] = set()
        self._used_edge_ids: Set[str] = set()

    # ── Read access ──

    @property
    def nodes(self) -> List[CanvasNode]:
        return list(self._nodes)

    @property
    def edges(self) -> List[CanvasEdge]:
        return list(self._edges)

    @property
    def registry(self) -> NodeRegistry:
        return self._registry

    def get_node(self, node_id: str) -> Optional[CanvasNode]:
        for n in self._nodes:
            if n.id == node_id:
                return n
        return None

    def get_edge(self, edge_id: str) -> Optional[CanvasEdge]:
        for e in self._edges:
            if e.id == edge_id:
                return e
        return None

    def edges_from(self, node_id: str) -> List[CanvasEdge]:
        return [e for e in self._edges if e.source == node_id]

    def edges_to(self, node_id: str) -> List[CanvasEdge]:
        return [e for e in self._edges if e.target == node_id]

    def is_empty(self) -> bool:
        return not self._nodes

    # ── Selection ──

    @property
    def selected_node(self) -> Optional[CanvasNode]:
        if self._selected_id is None:
            return None
        return self.get_node(self._selected_id)

    def select_node(self, node_id: str) -> Optional[CanvasNode]:
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"select_node: unknown node {node_id}")
            return None
        self.clear_selection()
        node.selected = True
        self._selected_id = node_id
        return node

    def clear_selection(self) -> None:
        current = self.selected_node
        if current is not None:
            current.selected = False
        self._selected_id = None

    # ── Loading & export ──

    def load(self, nodes: Iterable[WorkflowNode], edges: Iterable[WorkflowEdge]) -> None:
        """Replace the graph with a decoded persisted graph."""
        on_skip = self._session_logger.log_decode_skipped if self._session_logger else None
        self._nodes, self._edges = decode(nodes, edges, registry=self._registry, on_skip=on_skip)
        self._used_node_ids.update(n.id for n in self._nodes)
        self._used_edge_ids.update(e.id for e in self._edges)
        self._selected_id = None

    def to_persisted(self) -> Tuple[List[WorkflowNode], List[WorkflowEdge]]:
        return encode(self._nodes, self._edges)

    def clear(self) -> None:
        """Discard the whole graph. Counters keep running."""
        self._nodes = []
        self._edges = []
        self._selected_id = None

    # ── Id allocation ──

    def _allocate_node_id(self) -> str:
        while True:
            candidate = f"node_{self._next_node}"
            self._next_node += 1
            if candidate not in self._used_node_ids:
                self._used_node_ids.add(candidate)
                return candidate

    def _allocate_edge_id(self) -> str:
        while True:
            candidate = f"edge_{self._next_edge}"
            self._next_edge += 1
            if candidate not in self._used_edge_ids:
                self._used_edge_ids.add(candidate)
                return candidate

    # ── Mutations ──

    def add_node(self, node_type: str, position: PositionLike) -> Optional[CanvasNode]:
        """Append a node of ``node_type`` with an empty config.

        Returns ``None`` without changing anything if the type is neither
        registered nor has an inferable category.
        """
        definition = self._registry.lookup(node_type)
        if definition is not None:
            category, label = definition.category, definition.label
        else:
            inferred = infer_category(node_type)
            if inferred is None:
                logger.debug(f"add_node: cannot resolve node type {node_type!r}")
                return None
            category, label = inferred, node_type

        node = CanvasNode(
            id=self._allocate_node_id(),
            type=node_type,
            category=category,
            position=_to_position(position),
            config={},
            label=label,
        )
        self._nodes.append(node)
        if self._session_logger:
            self._session_logger.log_node_added(node.id, node_type)
        return node

    def connect(
        self,
        source: str,
        target: str,
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
        label: Optional[str] = None,
    ) -> Optional[CanvasEdge]:
        """Append an edge from ``source`` to ``target``.

        A condition source must name its ``"true"`` or ``"false"`` handle;
        trigger and action sources use the default handle. Triggers accept
        no incoming edges. Re-connecting an identical
        (source, target, handles) tuple returns the existing edge.
        """
        source_node = self.get_node(source)
        target_node = self.get_node(target)
        if source_node is None or target_node is None:
            logger.debug(f"connect: unknown endpoint {source} -> {target}")
            return None

        source_handle = source_handle or None
        target_handle = target_handle or None

        if source_handle not in handle_rules(source_node.category).output_handles:
            logger.debug(
                f"connect: {source_node.category.value} node {source} "
                f"has no output handle {source_handle!r}"
            )
            return None
        if not handle_rules(target_node.category).has_input:
            logger.debug(f"connect: {target_node.category.value} node {target} accepts no input")
            return None

        for existing in self._edges:
            if (existing.source, existing.target, existing.source_handle, existing.target_handle) == (
                source, target, source_handle, target_handle,
            ):
                return existing

        edge = CanvasEdge(
            id=self._allocate_edge_id(),
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
            label=label,
        )
        self._edges.append(edge)
        if self._session_logger:
            self._session_logger.log_edge_added(edge.id, source, target, source_handle)
        return edge

    def update_node_config(self, node_id: str, partial_config: Mapping[str, Any]) -> Optional[CanvasNode]:
        """Shallow-merge ``partial_config`` into the node's config."""
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"update_node_config: unknown node {node_id}")
            return None
        node.config = {**node.config, **partial_config}
        if self._session_logger:
            self._session_logger.log_config_changed(node_id, list(partial_config))
        return node

    def update_node_position(self, node_id: str, position: PositionLike) -> Optional[CanvasNode]:
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"update_node_position: unknown node {node_id}")
            return None
        node.position = _to_position(position)
        return node

    def delete_node(self, node_id: str) -> bool:
        """Remove a node and every edge touching it."""
        node = self.get_node(node_id)
        if node is None:
            logger.debug(f"delete_node: unknown node {node_id}")
            return False
        if self._selected_id == node_id:
            self.clear_selection()
        self._nodes = [n for n in self._nodes if n.id != node_id]
        before = len(self._edges)
        self._edges = [e for e in self._edges if e.source != node_id and e.target != node_id]
        if self._session_logger:
            self._session_logger.log_node_deleted(node_id, before - len(self._edges))
        return True

    def delete_edge(self, edge_id: str) -> bool:
        edge = self.get_edge(edge_id)
        if edge is None:
            logger.debug(f"delete_edge: unknown edge {edge_id}")
            return False
        self._edges = [e for e in self._edges if e.id != edge_id]
        if self._session_logger:
            self._session_logger.log_edge_deleted(edge_id)
        return True

    # ── Derived views ──

    def first_node_of(self, category: NodeCategory) -> Optional[CanvasNode]:
        for n in self._nodes:
            if n.category == category:
                return n
        return None

    def config_preview(self, node_id: str, limit: int = 2) -> str:
        """Short ``key: value`` summary shown on the node card."""
        node = self.get_node(node_id)
        if node is None:
            return ""
        items: List[Tuple[str, Any]] = list(node.config.items())[:limit]
        return ", ".join(f"{k}: {v}" for k, v in items)

    def summary(self) -> Dict[str, int]:
        counts = {c.value: 0 for c in NodeCategory}
        for n in self._nodes:
            counts[n.category.value] += 1
        counts["edges"] = len(self._edges)
        return counts
